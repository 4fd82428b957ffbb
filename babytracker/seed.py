from __future__ import annotations

import logging

from sqlalchemy import select

from .db import db_session
from .models import HealthcareProvider, Medication

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = [
    {
        "name": "Dr. Sarah Smith",
        "type": "pediatrician",
        "phone": "01 42 34 56 78",
        "email": "dr.smith@pediatrie.fr",
        "address": "123 Rue de la Santé, 75014 Paris",
        "hours": "Lun-Ven 8h-18h, Sam 9h-12h",
        "distance": "2.3 km",
    },
    {
        "name": "Urgences Pédiatriques Necker",
        "type": "emergency",
        "phone": "01 44 49 40 00",
        "address": "149 Rue de Sèvres, 75015 Paris",
        "hours": "24h/24, 7j/7",
        "distance": "0.8 km",
    },
    {
        "name": "Centre de PMI Paris 14",
        "type": "specialist",
        "phone": "01 43 22 45 67",
        "address": "45 Avenue du Général Leclerc, 75014 Paris",
        "hours": "Lun-Ven 9h-17h",
        "distance": "1.2 km",
    },
]

# (name, type, active ingredient, concentration, form)
DEFAULT_MEDICATIONS = [
    ("Doliprane", "pain_reliever", "Paracétamol", "80mg/ml", "liquid"),
    ("Advil", "pain_reliever", "Ibuprofène", "20mg/ml", "liquid"),
    ("Vitamin D", "vitamin", "Cholécalciférol", "1000 UI/ml", "drops"),
]


def seed_base() -> None:
    """
    Minimal reference data (idempotent):
    - healthcare providers
    - medications
    """
    added = 0
    with db_session() as s:
        for data in DEFAULT_PROVIDERS:
            exists = s.execute(
                select(HealthcareProvider.id).where(HealthcareProvider.name == data["name"])
            ).first()
            if exists is None:
                s.add(HealthcareProvider(**data))
                added += 1

        for name, type_, ingredient, concentration, form in DEFAULT_MEDICATIONS:
            exists = s.execute(
                select(Medication.id).where(Medication.name == name, Medication.active_ingredient == ingredient)
            ).first()
            if exists is None:
                s.add(Medication(name=name, type=type_, active_ingredient=ingredient, concentration=concentration, form=form))
                added += 1

    if added:
        logger.info("Seed: %d reference rows added", added)
