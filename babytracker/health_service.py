from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .db import db_session, utcnow
from .milestone_schedule import STANDARD_MILESTONES
from .models import (
    Appointment,
    Baby,
    DevelopmentalMilestone,
    HealthcareProvider,
    Medication,
    MedicationDose,
    MedicationEntry,
    Symptom,
    SymptomEntry,
    SymptomPhoto,
    VaccineEntry,
)
from .services import FieldSpec, NotFoundError, apply_changes, optional_datetime, parse_datetime
from .vaccine_schedule import STANDARD_SCHEDULE, scheduled_date, vaccine_status

logger = logging.getLogger(__name__)


def _get_or_404(s: Session, model, obj_id: str, label: str):
    obj = s.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


# =========================
# Healthcare providers
# =========================
def list_providers() -> list[dict[str, Any]]:
    with db_session() as s:
        q = select(HealthcareProvider).where(HealthcareProvider.is_active.is_(True)).order_by(HealthcareProvider.name)
        return [p.to_dict() for p in s.scalars(q)]


def create_provider(
    name: str,
    type: str,
    phone: str,
    email: str | None = None,
    address: str | None = None,
    hours: str | None = None,
    distance: str | None = None,
) -> dict[str, Any]:
    with db_session() as s:
        p = HealthcareProvider(
            name=name, type=type, phone=phone, email=email, address=address, hours=hours, distance=distance
        )
        s.add(p)
        s.flush()
        logger.info("Healthcare provider %s created", p.id)
        return p.to_dict()


PROVIDER_FIELDS: list[FieldSpec] = [
    ("name", "name", None, True),
    ("type", "type", None, True),
    ("phone", "phone", None, True),
    ("email", "email", None, False),
    ("address", "address", None, False),
    ("hours", "hours", None, False),
    ("distance", "distance", None, False),
    ("isActive", "is_active", None, False),
]


def update_provider(provider_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        p = _get_or_404(s, HealthcareProvider, provider_id, "Provider")
        apply_changes(p, changes, PROVIDER_FIELDS)
        s.flush()
        return p.to_dict()


# =========================
# Appointments
# =========================
def _appointment_dict(a: Appointment) -> dict[str, Any]:
    return {**a.to_dict(), "provider": a.provider.to_dict() if a.provider else None}


def list_appointments(baby_id: str, status: str | None = None) -> list[dict[str, Any]]:
    with db_session() as s:
        q = select(Appointment).where(Appointment.baby_id == baby_id)
        if status:
            q = q.where(Appointment.status == status)
        return [_appointment_dict(a) for a in s.scalars(q.order_by(Appointment.date.asc()))]


def create_appointment(
    baby_id: str,
    provider_id: str,
    type: str,
    date: Any,
    duration: int | None = None,
    notes: str | None = None,
    reminders: Any = None,
) -> dict[str, Any]:
    when = parse_datetime(date, "date")
    with db_session() as s:
        _get_or_404(s, HealthcareProvider, provider_id, "Provider")
        a = Appointment(
            baby_id=baby_id,
            provider_id=provider_id,
            type=type,
            date=when,
            duration=duration or 30,
            notes=notes,
            reminders=reminders,
            status="scheduled",
        )
        s.add(a)
        s.flush()
        logger.info("Appointment %s scheduled for baby %s", a.id, baby_id)
        return _appointment_dict(a)


APPOINTMENT_FIELDS: list[FieldSpec] = [
    ("status", "status", None, True),
    ("date", "date", parse_datetime, True),
    ("duration", "duration", None, True),
    ("notes", "notes", None, False),
    ("reminders", "reminders", None, True),
]


def update_appointment(appointment_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        a = _get_or_404(s, Appointment, appointment_id, "Appointment")
        apply_changes(a, changes, APPOINTMENT_FIELDS)
        s.flush()
        return _appointment_dict(a)


# =========================
# Vaccines
# =========================
def list_vaccines(baby_id: str) -> list[dict[str, Any]]:
    with db_session() as s:
        q = select(VaccineEntry).where(VaccineEntry.baby_id == baby_id).order_by(VaccineEntry.scheduled_date.asc())
        return [v.to_dict() for v in s.scalars(q)]


def create_vaccine(
    baby_id: str,
    name: str,
    status: str | None = None,
    scheduled_date: Any = None,
    completed_date: Any = None,
    location: str | None = None,
    batch_number: str | None = None,
    reactions: Any = None,
    notes: str | None = None,
    age_group: str | None = None,
) -> dict[str, Any]:
    with db_session() as s:
        v = VaccineEntry(
            baby_id=baby_id,
            name=name,
            status=status or "upcoming",
            scheduled_date=optional_datetime(scheduled_date, "scheduledDate"),
            completed_date=optional_datetime(completed_date, "completedDate"),
            location=location,
            batch_number=batch_number,
            reactions=reactions,
            notes=notes,
            age_group=age_group,
        )
        s.add(v)
        s.flush()
        return v.to_dict()


VACCINE_FIELDS: list[FieldSpec] = [
    ("status", "status", None, True),
    ("completedDate", "completed_date", parse_datetime, True),
    ("location", "location", None, False),
    ("batchNumber", "batch_number", None, False),
    ("reactions", "reactions", None, False),
    ("notes", "notes", None, False),
]


def update_vaccine(vaccine_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        v = _get_or_404(s, VaccineEntry, vaccine_id, "Vaccine entry")
        apply_changes(v, changes, VACCINE_FIELDS)
        s.flush()
        return v.to_dict()


def create_vaccine_schedule(baby_id: str, now: datetime | None = None) -> list[dict[str, Any]]:
    """
    Create the standard vaccination calendar for a baby from its birth date.
    Doses already on file (same name and age group) are left untouched.
    """
    now = now or utcnow()
    with db_session() as s:
        baby = _get_or_404(s, Baby, baby_id, "Baby")

        existing = {
            (name, age_group)
            for name, age_group in s.execute(
                select(VaccineEntry.name, VaccineEntry.age_group).where(VaccineEntry.baby_id == baby_id)
            )
        }

        created = []
        for item in STANDARD_SCHEDULE:
            if (item.name, item.age_group) in existing:
                continue
            when = scheduled_date(baby.birth_date, item.weeks)
            v = VaccineEntry(
                baby_id=baby_id,
                name=item.name,
                age_group=item.age_group,
                scheduled_date=when,
                status=vaccine_status(when, now),
            )
            s.add(v)
            created.append(v)

        s.flush()
        logger.info("Vaccine schedule for baby %s: %d doses created", baby_id, len(created))
        return [v.to_dict() for v in created]


# =========================
# Developmental milestones
# =========================
def list_milestones(
    baby_id: str,
    category: str | None = None,
    achieved: bool | None = None,
    age_weeks: int | None = None,
) -> list[dict]:
    """
    Milestones of a baby by expected age. With `age_weeks`, only the ones
    whose window contains that age, grouped by category.
    """
    with db_session() as s:
        q = select(DevelopmentalMilestone).where(DevelopmentalMilestone.baby_id == baby_id)
        if category:
            q = q.where(DevelopmentalMilestone.category == category)
        if achieved is not None:
            q = q.where(DevelopmentalMilestone.achieved.is_(achieved))
        if age_weeks is not None:
            q = q.where(
                DevelopmentalMilestone.min_weeks <= age_weeks, DevelopmentalMilestone.max_weeks >= age_weeks
            ).order_by(DevelopmentalMilestone.category.asc())
        q = q.order_by(DevelopmentalMilestone.min_weeks.asc())
        return [m.to_dict() for m in s.scalars(q)]


def create_milestone_schedule(baby_id: str) -> list[dict[str, Any]]:
    """Add the standard first-year milestones a baby does not have yet (matched on category and title)."""
    with db_session() as s:
        _get_or_404(s, Baby, baby_id, "Baby")

        existing = {
            (category, title)
            for category, title in s.execute(
                select(DevelopmentalMilestone.category, DevelopmentalMilestone.milestone).where(
                    DevelopmentalMilestone.baby_id == baby_id
                )
            )
        }

        created = []
        for item in STANDARD_MILESTONES:
            if (item.category, item.milestone) in existing:
                continue
            m = DevelopmentalMilestone(
                baby_id=baby_id,
                category=item.category,
                milestone=item.milestone,
                description=item.description,
                min_weeks=item.min_weeks,
                max_weeks=item.max_weeks,
                achieved=False,
            )
            s.add(m)
            created.append(m)

        s.flush()
        logger.info("Milestone schedule for baby %s: %d milestones created", baby_id, len(created))
        return [m.to_dict() for m in created]


def create_milestone(
    baby_id: str,
    category: str,
    milestone: str,
    description: str,
    min_weeks: int,
    max_weeks: int,
    achieved: bool | None = None,
    achieved_date: Any = None,
    photos: Any = None,
    video: str | None = None,
    notes: str | None = None,
    concerns: Any = None,
) -> dict[str, Any]:
    if min_weeks > max_weeks:
        raise ValueError("minWeeks cannot be greater than maxWeeks")

    with db_session() as s:
        m = DevelopmentalMilestone(
            baby_id=baby_id,
            category=category,
            milestone=milestone,
            description=description,
            min_weeks=min_weeks,
            max_weeks=max_weeks,
            achieved=bool(achieved),
            achieved_date=optional_datetime(achieved_date, "achievedDate"),
            photos=photos,
            video=video,
            notes=notes,
            concerns=concerns,
        )
        s.add(m)
        s.flush()
        return m.to_dict()


MILESTONE_FIELDS: list[FieldSpec] = [
    ("achieved", "achieved", None, False),
    ("achievedDate", "achieved_date", optional_datetime, False),
    ("photos", "photos", None, False),
    ("video", "video", None, False),
    ("notes", "notes", None, False),
    ("concerns", "concerns", None, False),
]


def update_milestone(milestone_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        m = _get_or_404(s, DevelopmentalMilestone, milestone_id, "Milestone")
        apply_changes(m, changes, MILESTONE_FIELDS)
        s.flush()
        return m.to_dict()


# =========================
# Medications
# =========================
RECENT_DOSES = 10
DEFAULT_DOSE_INTERVAL_HOURS = 6

_HOURS_RE = re.compile(r"(\d+)\s*(?:hours?\b|heures?\b|h\b)", re.IGNORECASE)


def parse_frequency(frequency: str | None) -> int:
    """
    Hours between two doses, read from a free-text frequency:
    "every 4 hours" / "toutes les 6h" -> 4 / 6, "twice daily" -> 12,
    "once a day" -> 24. Anything else is taken as every 6 hours.
    """
    text = (frequency or "").lower()
    m = _HOURS_RE.search(text)
    if m:
        return int(m.group(1))

    if "daily" in text or "day" in text or "jour" in text:
        if "twice" in text or "2" in text:
            return 12
        if "thrice" in text or "3" in text:
            return 8
        if "four" in text or "4" in text:
            return 6
        return 24
    return DEFAULT_DOSE_INTERVAL_HOURS


def next_dose_time(frequency: str | None, last_dose: datetime | None, now: datetime) -> datetime:
    # no dose given yet: the first one is due now
    if last_dose is None:
        return now
    return last_dose + timedelta(hours=parse_frequency(frequency))


def _last_dose(s: Session, entry_id: str) -> MedicationDose | None:
    q = select(MedicationDose).where(MedicationDose.medication_entry_id == entry_id)
    return s.scalars(q.order_by(MedicationDose.time.desc()).limit(1)).first()


def _medication_entry_dict(
    s: Session, e: MedicationEntry, dose_limit: int | None = RECENT_DOSES, now: datetime | None = None
) -> dict:
    q = select(MedicationDose).where(MedicationDose.medication_entry_id == e.id).order_by(MedicationDose.time.desc())
    if dose_limit is not None:
        q = q.limit(dose_limit)
    last = _last_dose(s, e.id)
    return {
        **e.to_dict(),
        "medication": e.medication.to_dict(),
        "doses": [d.to_dict() for d in s.scalars(q)],
        "nextDose": next_dose_time(e.frequency, last.time if last else None, now or utcnow()),
    }


def _active_medications(s: Session, baby_id: str, now: datetime) -> list[MedicationEntry]:
    q = select(MedicationEntry).where(
        MedicationEntry.baby_id == baby_id,
        or_(MedicationEntry.end_date.is_(None), MedicationEntry.end_date >= now),
    )
    return list(s.scalars(q.order_by(MedicationEntry.start_date.desc())))


def list_medications(baby_id: str, active_only: bool = False, now: datetime | None = None) -> list[dict]:
    """Medication courses for a baby, newest first; active = no end date or ending in the future."""
    now = now or utcnow()
    with db_session() as s:
        if active_only:
            entries = _active_medications(s, baby_id, now)
        else:
            q = select(MedicationEntry).where(MedicationEntry.baby_id == baby_id)
            entries = list(s.scalars(q.order_by(MedicationEntry.start_date.desc())))
        return [_medication_entry_dict(s, e, now=now) for e in entries]


def find_or_create_medication(s: Session, medication: dict[str, Any]) -> Medication:
    """Medications are shared reference rows, matched on name + active ingredient."""
    name = medication.get("name")
    if not name:
        raise ValueError("Medication name is required")
    ingredient = medication.get("activeIngredient")

    q = select(Medication).where(Medication.name == name)
    q = q.where(Medication.active_ingredient.is_(None) if ingredient is None else Medication.active_ingredient == ingredient)
    m = s.scalars(q).first()
    if m is None:
        m = Medication(
            name=name,
            type=medication.get("type"),
            active_ingredient=ingredient,
            concentration=medication.get("concentration"),
            form=medication.get("form"),
        )
        s.add(m)
        s.flush()
    return m


def create_medication_entry(
    baby_id: str,
    medication: dict[str, Any],
    dosage: float,
    unit: str,
    frequency: str,
    start_date: Any,
    end_date: Any = None,
    prescribed_by: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    start = parse_datetime(start_date, "startDate")
    end = optional_datetime(end_date, "endDate")

    with db_session() as s:
        med = find_or_create_medication(s, medication)
        e = MedicationEntry(
            baby_id=baby_id,
            medication_id=med.id,
            dosage=dosage,
            unit=unit,
            frequency=frequency,
            start_date=start,
            end_date=end,
            prescribed_by=prescribed_by,
            notes=notes,
        )
        s.add(e)
        s.flush()
        s.refresh(e)
        logger.info("Medication %s started for baby %s", med.name, baby_id)
        return _medication_entry_dict(s, e)


MEDICATION_FIELDS: list[FieldSpec] = [
    ("dosage", "dosage", None, False),
    ("unit", "unit", None, True),
    ("frequency", "frequency", None, True),
    ("endDate", "end_date", optional_datetime, False),
    ("notes", "notes", None, False),
]


def update_medication_entry(entry_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        e = _get_or_404(s, MedicationEntry, entry_id, "Medication entry")
        apply_changes(e, changes, MEDICATION_FIELDS)
        s.flush()
        return _medication_entry_dict(s, e)


def record_dose(medication_entry_id: str, dosage: float, unit: str, time: Any) -> dict[str, Any]:
    when = parse_datetime(time, "time")
    with db_session() as s:
        _get_or_404(s, MedicationEntry, medication_entry_id, "Medication entry")
        d = MedicationDose(medication_entry_id=medication_entry_id, dosage=dosage, unit=unit, time=when)
        s.add(d)
        s.flush()
        return d.to_dict()


def list_doses(medication_entry_id: str, limit: int | None = None) -> list[dict[str, Any]]:
    with db_session() as s:
        q = (
            select(MedicationDose)
            .where(MedicationDose.medication_entry_id == medication_entry_id)
            .order_by(MedicationDose.time.desc())
        )
        if limit:
            q = q.limit(limit)
        return [d.to_dict() for d in s.scalars(q)]


# =========================
# Symptoms
# =========================
def _symptom_entry_dict(e: SymptomEntry) -> dict[str, Any]:
    return {
        **e.to_dict(),
        "symptoms": [x.to_dict() for x in e.symptoms],
        "photos": [p.to_dict() for p in e.photos],
        "medications": [d.to_dict() for d in e.medications],
    }


def list_symptoms(baby_id: str, limit: int | None = None) -> list[dict[str, Any]]:
    with db_session() as s:
        q = select(SymptomEntry).where(SymptomEntry.baby_id == baby_id).order_by(SymptomEntry.date.desc())
        if limit:
            q = q.limit(limit)
        return [_symptom_entry_dict(e) for e in s.scalars(q)]


def create_symptom_entry(
    baby_id: str,
    date: Any,
    notes: str,
    temperature: float | None = None,
    temperature_unit: str | None = None,
    doctor_contacted: bool | None = None,
    follow_up_required: bool | None = None,
    symptoms: list[dict[str, Any]] | None = None,
    photos: list[dict[str, Any]] | None = None,
    medications: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """One illness report with its symptoms, photos and the doses given for it."""
    with db_session() as s:
        e = SymptomEntry(
            baby_id=baby_id,
            date=parse_datetime(date, "date"),
            temperature=temperature,
            temperature_unit=temperature_unit or "celsius",
            notes=notes,
            doctor_contacted=bool(doctor_contacted),
            follow_up_required=bool(follow_up_required),
        )
        for x in symptoms or []:
            e.symptoms.append(
                Symptom(name=x["name"], category=x["category"], severity=x["severity"], icon=x.get("icon"))
            )
        for p in photos or []:
            e.photos.append(SymptomPhoto(url=p["url"], body_part=p["bodyPart"], notes=p.get("notes")))
        for d in medications or []:
            e.medications.append(
                MedicationDose(dosage=d["dosage"], unit=d["unit"], time=parse_datetime(d["time"], "time"))
            )
        s.add(e)
        s.flush()
        logger.info("Symptom entry %s recorded for baby %s", e.id, baby_id)
        return _symptom_entry_dict(e)


SYMPTOM_FIELDS: list[FieldSpec] = [
    ("temperature", "temperature", None, False),
    ("temperatureUnit", "temperature_unit", None, True),
    ("notes", "notes", None, False),
    ("doctorContacted", "doctor_contacted", None, False),
    ("followUpRequired", "follow_up_required", None, False),
]


def update_symptom_entry(entry_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        e = _get_or_404(s, SymptomEntry, entry_id, "Symptom entry")
        apply_changes(e, changes, SYMPTOM_FIELDS)
        s.flush()
        return _symptom_entry_dict(e)


# =========================
# Alerts / summary
# =========================
UPCOMING_APPOINTMENTS = 5
APPOINTMENT_REMINDER_DAYS = 3
SUMMARY_WINDOW = timedelta(days=7)


def _overdue_vaccines(s: Session, baby_id: str, now: datetime) -> list[VaccineEntry]:
    q = select(VaccineEntry).where(
        VaccineEntry.baby_id == baby_id,
        VaccineEntry.status.in_(("due", "overdue")),
        VaccineEntry.scheduled_date < now,
    )
    return list(s.scalars(q.order_by(VaccineEntry.scheduled_date.asc())))


def _upcoming_appointments(s: Session, baby_id: str, now: datetime) -> list[Appointment]:
    q = select(Appointment).where(
        Appointment.baby_id == baby_id, Appointment.status == "scheduled", Appointment.date >= now
    )
    return list(s.scalars(q.order_by(Appointment.date.asc()).limit(UPCOMING_APPOINTMENTS)))


def _alerts(s: Session, baby_id: str, now: datetime) -> list[dict[str, Any]]:
    alerts: list[dict[str, Any]] = []

    overdue = _overdue_vaccines(s, baby_id, now)
    if overdue:
        alerts.append(
            {
                "babyId": baby_id,
                "type": "vaccine_due",
                "severity": "urgent",
                "title": "Overdue vaccines",
                "message": f"{len(overdue)} overdue vaccine(s)",
                "actionRequired": True,
            }
        )

    for a in _upcoming_appointments(s, baby_id, now):
        days = math.ceil((a.date - now).total_seconds() / 86400)
        if 0 < days <= APPOINTMENT_REMINDER_DAYS:
            alerts.append(
                {
                    "babyId": baby_id,
                    "type": "appointment_reminder",
                    "severity": "info",
                    "title": "Upcoming appointment",
                    "message": f"{a.type} with {a.provider.name} in {days} day(s)",
                    "dueDate": a.date,
                    "actionRequired": False,
                }
            )

    for e in _active_medications(s, baby_id, now):
        last = _last_dose(s, e.id)
        due = next_dose_time(e.frequency, last.time if last else None, now)
        if due <= now:
            alerts.append(
                {
                    "babyId": baby_id,
                    "type": "medication_reminder",
                    "severity": "warning",
                    "title": "Medication due",
                    "message": f"Time to give {e.medication.name}",
                    "dueDate": due,
                    "actionRequired": True,
                }
            )
    return alerts


def health_alerts(baby_id: str, now: datetime | None = None) -> list[dict[str, Any]]:
    """Alerts computed on the fly: overdue vaccines, appointments within 3 days, doses due."""
    now = now or utcnow()
    with db_session() as s:
        _get_or_404(s, Baby, baby_id, "Baby")
        return _alerts(s, baby_id, now)


def health_summary(baby_id: str, now: datetime | None = None) -> dict[str, Any]:
    """Counts over the last week and what is coming up, with the current alerts."""
    now = now or utcnow()
    since = now - SUMMARY_WINDOW
    with db_session() as s:
        _get_or_404(s, Baby, baby_id, "Baby")

        recent_symptoms = s.scalars(
            select(SymptomEntry.id).where(SymptomEntry.baby_id == baby_id, SymptomEntry.date >= since)
        ).all()
        recent_milestones = s.scalars(
            select(DevelopmentalMilestone.id).where(
                DevelopmentalMilestone.baby_id == baby_id,
                DevelopmentalMilestone.achieved.is_(True),
                DevelopmentalMilestone.achieved_date >= since,
            )
        ).all()
        alerts = _alerts(s, baby_id, now)

        return {
            "recentSymptoms": len(recent_symptoms),
            "upcomingAppointments": len(_upcoming_appointments(s, baby_id, now)),
            "overdueVaccines": len(_overdue_vaccines(s, baby_id, now)),
            "recentMilestones": len(recent_milestones),
            "alerts": alerts,
            "lastUpdate": now,
        }
