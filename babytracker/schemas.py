from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ISO string (with or without Z) or epoch milliseconds; parsed by the services
Timestamp = Union[str, int, float]


class CamelIn(BaseModel):
    """Request bodies arrive in camelCase from the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartialIn(CamelIn):
    """Identifier plus any subset of updatable fields (kept in `model_extra`)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def changes(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


# =========================
# Users / babies
# =========================
class UserIn(CamelIn):
    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    avatar: Optional[str] = None
    role: Optional[str] = None
    preferred_name: Optional[str] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact: Optional[dict[str, Any]] = None


class OldUserData(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None


class LookupIn(CamelIn):
    email: str = Field(..., min_length=1)
    old_user_data: Optional[OldUserData] = None


class BabyIn(CamelIn):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    birth_date: Timestamp
    user_id: str = Field(..., min_length=1)
    gender: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    avatar: Optional[str] = None


# =========================
# Tracking entries
# =========================
class EntryUpdateIn(PartialIn):
    entry_id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    user_email: str = Field(..., min_length=1)


# =========================
# Health
# =========================
class ProviderIn(CamelIn):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Optional[str] = None
    address: Optional[str] = None
    hours: Optional[str] = None
    distance: Optional[str] = None


class AppointmentIn(CamelIn):
    baby_id: str = Field(..., min_length=1)
    provider_id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    date: Timestamp
    duration: Optional[int] = None
    notes: Optional[str] = None
    reminders: Any = None


class VaccineIn(CamelIn):
    baby_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    status: Optional[str] = None
    scheduled_date: Optional[Timestamp] = None
    completed_date: Optional[Timestamp] = None
    location: Optional[str] = None
    batch_number: Optional[str] = None
    reactions: Any = None
    notes: Optional[str] = None
    age_group: Optional[str] = None


class ScheduleIn(CamelIn):
    baby_id: str = Field(..., min_length=1)


class MilestoneIn(CamelIn):
    baby_id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    milestone: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    min_weeks: int
    max_weeks: int
    achieved: Optional[bool] = None
    achieved_date: Optional[Timestamp] = None
    photos: Any = None
    video: Optional[str] = None
    notes: Optional[str] = None
    concerns: Any = None


class MedicationIn(CamelIn):
    name: str = Field(..., min_length=1)
    type: Optional[str] = None
    active_ingredient: Optional[str] = None
    concentration: Optional[str] = None
    form: Optional[str] = None


class MedicationEntryIn(CamelIn):
    baby_id: str = Field(..., min_length=1)
    medication: MedicationIn
    dosage: float
    unit: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    start_date: Timestamp
    end_date: Optional[Timestamp] = None
    prescribed_by: Optional[str] = None
    notes: Optional[str] = None


class DoseIn(CamelIn):
    medication_entry_id: str = Field(..., min_length=1)
    dosage: float
    unit: str = Field(..., min_length=1)
    time: Timestamp


class SymptomIn(CamelIn):
    name: str
    category: str
    severity: str
    icon: Optional[str] = None


class SymptomPhotoIn(CamelIn):
    url: str
    body_part: str
    notes: Optional[str] = None


class SymptomDoseIn(CamelIn):
    dosage: float
    unit: str
    time: Timestamp


class SymptomEntryIn(CamelIn):
    baby_id: str = Field(..., min_length=1)
    date: Timestamp
    notes: str = Field(..., min_length=1)
    temperature: Optional[float] = None
    temperature_unit: Optional[str] = None
    doctor_contacted: Optional[bool] = None
    follow_up_required: Optional[bool] = None
    symptoms: list[SymptomIn] = []
    photos: list[SymptomPhotoIn] = []
    medications: list[SymptomDoseIn] = []


# =========================
# Parent health
# =========================
class GoalsIn(CamelIn):
    user_email: str = Field(..., min_length=1)
    goals: Union[dict[str, Any], list[Any]]


class RecoveryIn(CamelIn):
    user_email: str = Field(..., min_length=1)
    recovery_items: Union[dict[str, Any], list[Any]]


class MoodIn(CamelIn):
    user_email: str = Field(..., min_length=1)
    mood: Optional[int] = Field(None, ge=1, le=5)
    energy: Optional[int] = Field(None, ge=1, le=10)
    stress: Optional[int] = Field(None, ge=1, le=10)
    confidence: Optional[int] = None
    sleep_hours: Optional[float] = Field(None, ge=0)
    stress_factors: Optional[list[Any]] = None
    positive_moments: Optional[list[Any]] = None
    notes: Optional[str] = None


class UpdateByIdIn(PartialIn):
    id: str = Field(..., min_length=1)
