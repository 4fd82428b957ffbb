from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base, utcnow


def new_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    # id is generated by the client, not by the database
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(String(80), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(30), default="mother", nullable=False)
    preferred_name: Mapped[str | None] = mapped_column(String(80), nullable=True)
    timezone: Mapped[str] = mapped_column(String(60), default="Europe/Paris", nullable=False)
    language: Mapped[str] = mapped_column(String(10), default="fr", nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    emergency_contact: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    babies: Mapped[list["Baby"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    settings: Mapped[Optional["UserSettings"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    parent_health_profile: Mapped[Optional["ParentHealthProfile"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"User({self.first_name} {self.last_name}, {self.email})"


class UserSettings(Base):
    __tablename__ = "user_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)
    theme: Mapped[str] = mapped_column(String(20), default="light", nullable=False)
    color_scheme: Mapped[str] = mapped_column(String(20), default="green", nullable=False)
    font_size: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    language: Mapped[str] = mapped_column(String(10), default="fr", nullable=False)
    date_format: Mapped[str] = mapped_column(String(20), default="DD/MM/YYYY", nullable=False)
    time_format: Mapped[str] = mapped_column(String(10), default="24h", nullable=False)
    weight_unit: Mapped[str] = mapped_column(String(10), default="grams", nullable=False)
    height_unit: Mapped[str] = mapped_column(String(10), default="cm", nullable=False)
    temperature_unit: Mapped[str] = mapped_column(String(20), default="celsius", nullable=False)
    volume_unit: Mapped[str] = mapped_column(String(10), default="ml", nullable=False)
    notifications: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    privacy: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    backup: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="settings")


class Baby(Base):
    __tablename__ = "babies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    birth_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)  # grams
    height: Mapped[float | None] = mapped_column(Float, nullable=True)  # cm
    avatar: Mapped[str] = mapped_column(String(255), default="👶", nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="babies")
    feeding_entries: Mapped[list["FeedingEntry"]] = relationship(back_populates="baby", cascade="all, delete-orphan")
    sleep_entries: Mapped[list["SleepEntry"]] = relationship(back_populates="baby", cascade="all, delete-orphan")
    diaper_entries: Mapped[list["DiaperEntry"]] = relationship(back_populates="baby", cascade="all, delete-orphan")
    growth_entries: Mapped[list["GrowthEntry"]] = relationship(back_populates="baby", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"Baby({self.name}, {self.birth_date:%Y-%m-%d})"


# =========================
# Daily tracking
# =========================
class FeedingEntry(Base):
    __tablename__ = "feeding_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # biberon, tétée, solide, snack
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)  # ml for liquids, g for solids
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # seconds
    mood: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    baby: Mapped["Baby"] = relationship(back_populates="feeding_entries")


class SleepEntry(Base):
    __tablename__ = "sleep_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quality: Mapped[str | None] = mapped_column(String(20), nullable=True)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # night, nap
    location: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    baby: Mapped["Baby"] = relationship(back_populates="sleep_entries")


class DiaperEntry(Base):
    __tablename__ = "diaper_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # wet, soiled, mixed
    wetness: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    stool: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    diaper: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    mood: Mapped[str | None] = mapped_column(String(20), nullable=True)
    changed_by: Mapped[str | None] = mapped_column(String(80), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # older clients still send these two
    amount: Mapped[str | None] = mapped_column(String(20), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    baby: Mapped["Baby"] = relationship(back_populates="diaper_entries")


class GrowthEntry(Base):
    __tablename__ = "growth_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    head_circ: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    baby: Mapped["Baby"] = relationship(back_populates="growth_entries")


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    baby_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    action: Mapped[str] = mapped_column(String(60), nullable=False)
    data: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


# =========================
# Health
# =========================
class HealthcareProvider(Base):
    __tablename__ = "healthcare_providers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)  # pediatrician, emergency, specialist, urgent_care
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str | None] = mapped_column(String(120), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hours: Mapped[str | None] = mapped_column(String(120), nullable=True)
    distance: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    appointments: Mapped[list["Appointment"]] = relationship(back_populates="provider")


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    provider_id: Mapped[str] = mapped_column(ForeignKey("healthcare_providers.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(80), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, default=30, nullable=False)  # minutes
    status: Mapped[str] = mapped_column(String(20), default="scheduled", nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reminders: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    provider: Mapped["HealthcareProvider"] = relationship(back_populates="appointments")


class VaccineEntry(Base):
    __tablename__ = "vaccine_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="upcoming", nullable=False)  # completed, due, upcoming, overdue
    scheduled_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    location: Mapped[str | None] = mapped_column(String(120), nullable=True)
    batch_number: Mapped[str | None] = mapped_column(String(60), nullable=True)
    reactions: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    age_group: Mapped[str | None] = mapped_column(String(30), nullable=True)


class DevelopmentalMilestone(Base):
    __tablename__ = "developmental_milestones"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # motor, cognitive, language, social, adaptive
    milestone: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    min_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    max_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    achieved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    achieved_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    photos: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    video: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    concerns: Mapped[Any | None] = mapped_column(JSON, nullable=True)


class Medication(Base):
    __tablename__ = "medications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    active_ingredient: Mapped[str | None] = mapped_column(String(120), nullable=True)
    concentration: Mapped[str | None] = mapped_column(String(60), nullable=True)
    form: Mapped[str | None] = mapped_column(String(30), nullable=True)

    entries: Mapped[list["MedicationEntry"]] = relationship(back_populates="medication")


class MedicationEntry(Base):
    __tablename__ = "medication_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    medication_id: Mapped[str] = mapped_column(ForeignKey("medications.id"), nullable=False)
    dosage: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(10), nullable=False)  # ml, mg, drops
    frequency: Mapped[str] = mapped_column(String(60), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    prescribed_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    medication: Mapped["Medication"] = relationship(back_populates="entries")
    doses: Mapped[list["MedicationDose"]] = relationship(
        back_populates="medication_entry", cascade="all, delete-orphan"
    )


class MedicationDose(Base):
    __tablename__ = "medication_doses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    # a dose belongs either to a medication course or to a symptom report
    medication_entry_id: Mapped[str | None] = mapped_column(ForeignKey("medication_entries.id"), nullable=True)
    symptom_entry_id: Mapped[str | None] = mapped_column(ForeignKey("symptom_entries.id"), nullable=True)
    dosage: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(10), nullable=False)
    time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    medication_entry: Mapped[Optional["MedicationEntry"]] = relationship(back_populates="doses")
    symptom_entry: Mapped[Optional["SymptomEntry"]] = relationship(back_populates="medications")


class SymptomEntry(Base):
    __tablename__ = "symptom_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    baby_id: Mapped[str] = mapped_column(ForeignKey("babies.id"), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    temperature_unit: Mapped[str] = mapped_column(String(20), default="celsius", nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    doctor_contacted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    follow_up_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    symptoms: Mapped[list["Symptom"]] = relationship(back_populates="symptom_entry", cascade="all, delete-orphan")
    photos: Mapped[list["SymptomPhoto"]] = relationship(back_populates="symptom_entry", cascade="all, delete-orphan")
    medications: Mapped[list["MedicationDose"]] = relationship(
        back_populates="symptom_entry", cascade="all, delete-orphan"
    )


class Symptom(Base):
    __tablename__ = "symptoms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    symptom_entry_id: Mapped[str] = mapped_column(ForeignKey("symptom_entries.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)  # mild, moderate, severe
    icon: Mapped[str | None] = mapped_column(String(20), nullable=True)

    symptom_entry: Mapped["SymptomEntry"] = relationship(back_populates="symptoms")


class SymptomPhoto(Base):
    __tablename__ = "symptom_photos"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    symptom_entry_id: Mapped[str] = mapped_column(ForeignKey("symptom_entries.id"), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    body_part: Mapped[str] = mapped_column(String(60), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    symptom_entry: Mapped["SymptomEntry"] = relationship(back_populates="photos")


# =========================
# Parent health
# =========================
class ParentHealthProfile(Base):
    __tablename__ = "parent_health_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)
    delivery_type: Mapped[str] = mapped_column(String(20), nullable=False)  # vaginal, cesarean
    delivery_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    complications: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    current_conditions: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    user: Mapped["User"] = relationship(back_populates="parent_health_profile")
    mental_health: Mapped[list["MentalHealthTracking"]] = relationship(
        back_populates="parent_profile", cascade="all, delete-orphan"
    )
    recovery_data: Mapped[list["PhysicalRecovery"]] = relationship(
        back_populates="parent_profile", cascade="all, delete-orphan"
    )


class MentalHealthTracking(Base):
    __tablename__ = "mental_health_tracking"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    parent_profile_id: Mapped[str] = mapped_column(ForeignKey("parent_health_profiles.id"), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    edps_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    anxiety_level: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-10
    risk_level: Mapped[str] = mapped_column(String(20), nullable=False)  # low, moderate, high

    parent_profile: Mapped["ParentHealthProfile"] = relationship(back_populates="mental_health")
    mood_entries: Mapped[list["MoodEntry"]] = relationship(
        back_populates="mental_health_tracking", cascade="all, delete-orphan"
    )


class MoodEntry(Base):
    __tablename__ = "mood_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    mental_health_tracking_id: Mapped[str] = mapped_column(ForeignKey("mental_health_tracking.id"), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    mood: Mapped[str] = mapped_column(String(20), nullable=False)  # excellent, good, okay, low, very_low
    anxiety_level: Mapped[int] = mapped_column(Integer, nullable=False)
    stress_factors: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    coping_strategies: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    mental_health_tracking: Mapped["MentalHealthTracking"] = relationship(back_populates="mood_entries")


class PhysicalRecovery(Base):
    __tablename__ = "physical_recovery"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    parent_profile_id: Mapped[str] = mapped_column(ForeignKey("parent_health_profiles.id"), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    c_section_healing: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    lochia: Mapped[str] = mapped_column(String(20), nullable=False)  # heavy, moderate, light, none
    pain_level: Mapped[int] = mapped_column(Integer, nullable=False)
    energy_level: Mapped[int] = mapped_column(Integer, nullable=False)
    sleep_quality: Mapped[str] = mapped_column(String(20), nullable=False)

    parent_profile: Mapped["ParentHealthProfile"] = relationship(back_populates="recovery_data")
