"""
Baby health endpoints: providers, appointments, vaccines, milestones,
medications (and their doses), symptoms, alerts and the weekly summary.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query

from . import health_service as hs
from .schemas import (
    AppointmentIn,
    DoseIn,
    MedicationEntryIn,
    MilestoneIn,
    ProviderIn,
    ScheduleIn,
    SymptomEntryIn,
    UpdateByIdIn,
    VaccineIn,
)

router = APIRouter(prefix="/api/health")


def _require_baby_id(baby_id: Optional[str]) -> str:
    if not baby_id:
        raise HTTPException(status_code=400, detail="Baby ID is required")
    return baby_id


def _as_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.lower() == "true"


# Providers

@router.get("/providers")
def api_providers() -> list[dict]:
    return hs.list_providers()


@router.post("/providers", status_code=201)
def api_create_provider(payload: ProviderIn) -> dict[str, Any]:
    return hs.create_provider(**payload.model_dump())


@router.put("/providers")
def api_update_provider(payload: UpdateByIdIn) -> dict[str, Any]:
    return hs.update_provider(payload.id, payload.changes())


# Appointments

@router.get("/appointments")
def api_appointments(baby_id: Optional[str] = Query(None, alias="babyId"), status: Optional[str] = None) -> list[dict]:
    return hs.list_appointments(_require_baby_id(baby_id), status=status)


@router.post("/appointments", status_code=201)
def api_create_appointment(payload: AppointmentIn) -> dict[str, Any]:
    return hs.create_appointment(**payload.model_dump())


@router.put("/appointments")
def api_update_appointment(payload: UpdateByIdIn) -> dict[str, Any]:
    return hs.update_appointment(payload.id, payload.changes())


# Vaccines

@router.get("/vaccines")
def api_vaccines(baby_id: Optional[str] = Query(None, alias="babyId")) -> list[dict]:
    return hs.list_vaccines(_require_baby_id(baby_id))


@router.post("/vaccines", status_code=201)
def api_create_vaccine(payload: VaccineIn) -> dict[str, Any]:
    return hs.create_vaccine(**payload.model_dump())


@router.put("/vaccines")
def api_update_vaccine(payload: UpdateByIdIn) -> dict[str, Any]:
    return hs.update_vaccine(payload.id, payload.changes())


@router.post("/vaccines/schedule", status_code=201)
def api_vaccine_schedule(payload: ScheduleIn) -> dict[str, Any]:
    created = hs.create_vaccine_schedule(payload.baby_id)
    return {"success": True, "created": len(created), "vaccines": created}


# Milestones

@router.get("/milestones")
def api_milestones(
    baby_id: Optional[str] = Query(None, alias="babyId"),
    category: Optional[str] = None,
    achieved: Optional[str] = None,
    age_weeks: Optional[int] = Query(None, alias="ageWeeks"),
) -> list[dict]:
    return hs.list_milestones(
        _require_baby_id(baby_id), category=category, achieved=_as_bool(achieved), age_weeks=age_weeks
    )


@router.post("/milestones/schedule", status_code=201)
def api_milestone_schedule(payload: ScheduleIn) -> dict[str, Any]:
    created = hs.create_milestone_schedule(payload.baby_id)
    return {"success": True, "created": len(created), "milestones": created}


@router.post("/milestones", status_code=201)
def api_create_milestone(payload: MilestoneIn) -> dict[str, Any]:
    return hs.create_milestone(**payload.model_dump())


@router.put("/milestones")
def api_update_milestone(payload: UpdateByIdIn) -> dict[str, Any]:
    return hs.update_milestone(payload.id, payload.changes())


# Medications

@router.get("/medications")
def api_medications(baby_id: Optional[str] = Query(None, alias="babyId"), active: Optional[str] = None) -> list[dict]:
    return hs.list_medications(_require_baby_id(baby_id), active_only=_as_bool(active) is True)


@router.post("/medications", status_code=201)
def api_create_medication(payload: MedicationEntryIn) -> dict[str, Any]:
    data = payload.model_dump(exclude={"medication"})
    return hs.create_medication_entry(medication=payload.medication.model_dump(by_alias=True), **data)


@router.put("/medications")
def api_update_medication(payload: UpdateByIdIn) -> dict[str, Any]:
    return hs.update_medication_entry(payload.id, payload.changes())


@router.post("/medications/doses", status_code=201)
def api_record_dose(payload: DoseIn) -> dict[str, Any]:
    return hs.record_dose(**payload.model_dump())


@router.get("/medications/doses")
def api_doses(
    medication_entry_id: Optional[str] = Query(None, alias="medicationEntryId"),
    limit: Optional[int] = None,
) -> list[dict]:
    if not medication_entry_id:
        raise HTTPException(status_code=400, detail="Medication entry ID is required")
    return hs.list_doses(medication_entry_id, limit=limit)


# Symptoms

@router.get("/symptoms")
def api_symptoms(baby_id: Optional[str] = Query(None, alias="babyId"), limit: Optional[int] = None) -> list[dict]:
    return hs.list_symptoms(_require_baby_id(baby_id), limit=limit)


@router.post("/symptoms", status_code=201)
def api_create_symptom_entry(payload: SymptomEntryIn) -> dict[str, Any]:
    data = payload.model_dump(exclude={"symptoms", "photos", "medications"})
    return hs.create_symptom_entry(
        symptoms=[x.model_dump(by_alias=True) for x in payload.symptoms],
        photos=[p.model_dump(by_alias=True) for p in payload.photos],
        medications=[d.model_dump(by_alias=True) for d in payload.medications],
        **data,
    )


@router.put("/symptoms")
def api_update_symptom_entry(payload: UpdateByIdIn) -> dict[str, Any]:
    return hs.update_symptom_entry(payload.id, payload.changes())


# Alerts / summary

@router.get("/alerts")
def api_alerts(baby_id: Optional[str] = Query(None, alias="babyId")) -> list[dict]:
    return hs.health_alerts(_require_baby_id(baby_id))


@router.get("/summary")
def api_summary(baby_id: Optional[str] = Query(None, alias="babyId")) -> dict[str, Any]:
    return hs.health_summary(_require_baby_id(baby_id))
