"""
Parent wellbeing endpoints: self-care goals, recovery checklist, daily mood.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query

from . import parent_health_service as phs
from .schemas import GoalsIn, MoodIn, RecoveryIn

router = APIRouter(prefix="/api/parent-health")


def _require_email(user_email: Optional[str]) -> str:
    if not user_email:
        raise HTTPException(status_code=400, detail="User email is required")
    return user_email


@router.post("/goals")
def api_save_goals(payload: GoalsIn) -> dict[str, Any]:
    return {"success": True, "data": phs.save_goals(payload.user_email, payload.goals)}


@router.get("/goals")
def api_goals(user_email: Optional[str] = Query(None, alias="userEmail")) -> dict[str, Any]:
    return {"success": True, "data": phs.get_goals(_require_email(user_email))}


@router.post("/recovery")
def api_save_recovery(payload: RecoveryIn) -> dict[str, Any]:
    return {"success": True, "data": phs.save_recovery(payload.user_email, payload.recovery_items)}


@router.get("/recovery")
def api_recovery(user_email: Optional[str] = Query(None, alias="userEmail")) -> dict[str, Any]:
    return {"success": True, "data": phs.get_recovery(_require_email(user_email))}


@router.post("/mood")
def api_record_mood(payload: MoodIn) -> dict[str, Any]:
    data = phs.record_mood(
        payload.user_email,
        mood=payload.mood,
        energy=payload.energy,
        stress=payload.stress,
        sleep_hours=payload.sleep_hours,
        stress_factors=payload.stress_factors,
        positive_moments=payload.positive_moments,
        notes=payload.notes,
    )
    return {"success": True, "data": data}


@router.get("/mood")
def api_mood_history(
    user_email: Optional[str] = Query(None, alias="userEmail"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
) -> dict[str, Any]:
    data = phs.mood_history(_require_email(user_email), start_date=start_date, end_date=end_date)
    return {"success": True, "data": data}
