from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

# A scheduled dose more than this many weeks in the past is overdue
OVERDUE_AFTER_WEEKS = 4


@dataclass(frozen=True)
class ScheduledVaccine:
    name: str
    age_group: str
    weeks: int  # age at which the dose is due


STANDARD_SCHEDULE: tuple[ScheduledVaccine, ...] = (
    ScheduledVaccine("Hépatite B", "birth", 0),

    ScheduledVaccine("DTaP (Diphtérie, Tétanos, Coqueluche)", "2-months", 8),
    ScheduledVaccine("Hib (Haemophilus influenzae)", "2-months", 8),
    ScheduledVaccine("IPV (Poliomyélite)", "2-months", 8),
    ScheduledVaccine("PCV13 (Pneumocoque)", "2-months", 8),
    ScheduledVaccine("RV (Rotavirus)", "2-months", 8),

    ScheduledVaccine("DTaP (Diphtérie, Tétanos, Coqueluche)", "4-months", 16),
    ScheduledVaccine("Hib (Haemophilus influenzae)", "4-months", 16),
    ScheduledVaccine("IPV (Poliomyélite)", "4-months", 16),
    ScheduledVaccine("PCV13 (Pneumocoque)", "4-months", 16),
    ScheduledVaccine("RV (Rotavirus)", "4-months", 16),

    ScheduledVaccine("DTaP (Diphtérie, Tétanos, Coqueluche)", "6-months", 24),
    ScheduledVaccine("Hib (Haemophilus influenzae)", "6-months", 24),
    ScheduledVaccine("PCV13 (Pneumocoque)", "6-months", 24),
    ScheduledVaccine("RV (Rotavirus)", "6-months", 24),
    ScheduledVaccine("Influenza", "6-months", 24),

    ScheduledVaccine("MMR (Rougeole, Oreillons, Rubéole)", "12-months", 52),
    ScheduledVaccine("Varicelle", "12-months", 52),
    ScheduledVaccine("Hépatite A", "12-months", 52),
    ScheduledVaccine("PCV13 (Pneumocoque)", "12-months", 52),
)


def scheduled_date(birth_date: datetime, weeks: int) -> datetime:
    return birth_date + timedelta(weeks=weeks)


def vaccine_status(scheduled: datetime, now: datetime) -> str:
    """
    upcoming: not due yet
    due:      due within the last OVERDUE_AFTER_WEEKS weeks
    overdue:  more than OVERDUE_AFTER_WEEKS full weeks late
    """
    if scheduled >= now:
        return "upcoming"
    weeks_past = (now - scheduled).days // 7
    return "overdue" if weeks_past > OVERDUE_AFTER_WEEKS else "due"
