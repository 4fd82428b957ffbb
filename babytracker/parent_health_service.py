from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from .db import db_session, utcnow
from .models import MentalHealthTracking, MoodEntry, ParentHealthProfile, PhysicalRecovery, User
from .services import get_user_by_email, merge_privacy, optional_datetime

logger = logging.getLogger(__name__)

MOOD_LABELS = {5: "excellent", 4: "good", 3: "okay", 2: "low"}
DEFAULT_LEVEL = 3


def _ensure_profile(s: Session, user: User) -> ParentHealthProfile:
    """Parent profile with placeholder delivery data, created on first use."""
    profile = s.execute(
        select(ParentHealthProfile).where(ParentHealthProfile.user_id == user.id)
    ).scalar_one_or_none()
    if profile is None:
        profile = ParentHealthProfile(user_id=user.id, delivery_type="vaginal", delivery_date=utcnow())
        s.add(profile)
        s.flush()
        logger.info("Parent health profile created for user %s", user.id)
    return profile


def _privacy_value(user: User, key: str) -> Any:
    privacy = (user.settings.privacy if user.settings else None) or {}
    return privacy.get(key) or {}


# =========================
# Self-care goals / recovery checklist
# =========================
def save_goals(user_email: str, goals: Any) -> dict[str, Any]:
    with db_session() as s:
        user = get_user_by_email(s, user_email)
        merge_privacy(s, user.id, "selfCareGoals", goals)
    return {"goals": goals}


def get_goals(user_email: str) -> dict[str, Any]:
    with db_session() as s:
        user = get_user_by_email(s, user_email)
        return {"selfCareGoals": _privacy_value(user, "selfCareGoals")}


def save_recovery(user_email: str, recovery_items: Any) -> dict[str, Any]:
    with db_session() as s:
        user = get_user_by_email(s, user_email)
        _ensure_profile(s, user)
        merge_privacy(s, user.id, "recoveryProgress", recovery_items)
    return {"recoveryItems": recovery_items}


def get_recovery(user_email: str) -> dict[str, Any]:
    with db_session() as s:
        user = get_user_by_email(s, user_email)
        return {"recoveryProgress": _privacy_value(user, "recoveryProgress")}


# =========================
# Daily mood check-in
# =========================
def _at_most(score: int | None, limit: int) -> bool:
    # a score that was not given never counts as low
    return score is not None and score <= limit


def risk_level(mood: int | None, energy: int | None) -> str:
    if _at_most(mood, 2) and _at_most(energy, 2):
        return "high"
    if _at_most(mood, 3) or _at_most(energy, 3):
        return "moderate"
    return "low"


def mood_label(mood: int | None) -> str:
    return MOOD_LABELS.get(mood, "very_low")


def sleep_quality(hours: float | None) -> str:
    hours = hours or 0
    if hours >= 7:
        return "good"
    if hours >= 5:
        return "poor"
    return "terrible"


def _today_row(s: Session, model, parent_filter, start: datetime, end: datetime):
    q = select(model).where(parent_filter, model.date >= start, model.date < end)
    return s.scalars(q).first()


def record_mood(
    user_email: str,
    mood: int | None = None,
    energy: int | None = None,
    stress: int | None = None,
    sleep_hours: float | None = None,
    stress_factors: list | None = None,
    positive_moments: list | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    One check-in per day: today's tracking, mood and recovery rows are
    created on the first call and overwritten on the following ones.
    """
    now = now or utcnow()
    today = datetime(now.year, now.month, now.day)
    tomorrow = today + timedelta(days=1)
    anxiety = stress or DEFAULT_LEVEL
    energy_level = energy or DEFAULT_LEVEL

    with db_session() as s:
        user = get_user_by_email(s, user_email)
        profile = _ensure_profile(s, user)

        tracking = _today_row(
            s, MentalHealthTracking, MentalHealthTracking.parent_profile_id == profile.id, today, tomorrow
        )
        if tracking is None:
            tracking = MentalHealthTracking(parent_profile_id=profile.id, date=today)
            s.add(tracking)
        tracking.anxiety_level = anxiety
        tracking.risk_level = risk_level(mood, energy)
        s.flush()

        entry = _today_row(s, MoodEntry, MoodEntry.mental_health_tracking_id == tracking.id, today, tomorrow)
        if entry is None:
            entry = MoodEntry(mental_health_tracking_id=tracking.id)
            s.add(entry)
        entry.date = now
        entry.mood = mood_label(mood)
        entry.anxiety_level = anxiety
        entry.stress_factors = stress_factors or []
        entry.coping_strategies = positive_moments or []
        entry.notes = notes or ""

        recovery = _today_row(s, PhysicalRecovery, PhysicalRecovery.parent_profile_id == profile.id, today, tomorrow)
        if recovery is None:
            recovery = PhysicalRecovery(parent_profile_id=profile.id)
            s.add(recovery)
        recovery.date = now
        recovery.energy_level = energy_level
        recovery.sleep_quality = sleep_quality(sleep_hours)
        # pain is taken as the inverse of energy
        recovery.pain_level = max(1, 11 - energy_level)
        recovery.lochia = "moderate"

        s.flush()
        if tracking.risk_level == "high":
            logger.warning("High wellbeing risk reported by user %s", user.id)
        return {
            "moodEntry": entry.to_dict(),
            "mentalHealthTracking": tracking.to_dict(),
            "physicalRecovery": recovery.to_dict(),
        }


def mood_history(user_email: str, start_date: Any = None, end_date: Any = None) -> dict[str, Any]:
    """Parent profile with its tracking (and mood entries) and recovery rows, newest first."""
    start = optional_datetime(start_date, "startDate")
    end = optional_datetime(end_date, "endDate")

    with db_session() as s:
        user = get_user_by_email(s, user_email)
        profile = s.execute(
            select(ParentHealthProfile).where(ParentHealthProfile.user_id == user.id)
        ).scalar_one_or_none()
        if profile is None:
            return {"mentalHealth": [], "recoveryData": []}

        def rows(model):
            q = select(model).where(model.parent_profile_id == profile.id)
            # the range applies only when both ends are given
            if start is not None and end is not None:
                q = q.where(model.date >= start, model.date <= end)
            return s.scalars(q.order_by(model.date.desc())).all()

        return {
            **profile.to_dict(),
            "mentalHealth": [
                {**t.to_dict(), "moodEntries": [m.to_dict() for m in t.mood_entries]}
                for t in rows(MentalHealthTracking)
            ],
            "recoveryData": [r.to_dict() for r in rows(PhysicalRecovery)],
        }
