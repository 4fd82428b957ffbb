from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StandardMilestone:
    category: str
    milestone: str
    description: str
    min_weeks: int
    max_weeks: int


STANDARD_MILESTONES: tuple[StandardMilestone, ...] = (
    StandardMilestone("motor", "Tient sa tête droite", "Peut maintenir sa tête droite quand on le tient en position verticale", 8, 16),
    StandardMilestone("motor", "Se retourne ventre-dos", "Peut se retourner du ventre vers le dos", 12, 20),
    StandardMilestone("motor", "Tient assis sans aide", "Peut rester assis sans soutien pendant plusieurs minutes", 20, 32),
    StandardMilestone("motor", "Rampe", "Se déplace en rampant sur le ventre", 24, 36),

    StandardMilestone("cognitive", "Suit des objets du regard", "Suit des objets en mouvement avec ses yeux", 6, 12),
    StandardMilestone("cognitive", "Reconnaît les visages familiers", "Montre une préférence pour les visages connus", 8, 16),
    StandardMilestone(
        "cognitive",
        "Comprend la permanence des objets",
        "Réalise que les objets continuent d'exister même cachés",
        32,
        48,
    ),

    StandardMilestone("language", "Sourit en réponse", "Sourit quand on lui parle ou lui sourit", 4, 8),
    StandardMilestone("language", "Babille", 'Produit des sons comme "ba-ba" ou "da-da"', 16, 28),
    StandardMilestone("language", "Répond à son prénom", "Se tourne quand on l'appelle par son nom", 24, 36),

    StandardMilestone("social", "Sourit spontanément", "Sourit sans stimulation externe", 6, 12),
    StandardMilestone("social", "Joue à coucou-caché", "Participe activement au jeu de coucou-caché", 28, 40),
    StandardMilestone("social", "Imite les expressions", "Copie les expressions faciales des autres", 12, 24),

    StandardMilestone("adaptive", "Porte objets à la bouche", "Explore les objets en les portant à sa bouche", 12, 20),
    StandardMilestone("adaptive", "Boit au biberon/tasse", "Peut boire dans un biberon ou une tasse avec aide", 20, 32),
    StandardMilestone("adaptive", "Mange des aliments solides", "Accepte et mange des aliments en morceaux", 24, 36),
)
