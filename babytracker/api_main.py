from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config import configure_logging, settings
from .db import utcnow
from .errors import setup_exception_handlers
from .routes_health import router as health_router
from .routes_parent_health import router as parent_health_router
from .schemas import BabyIn, EntryUpdateIn, LookupIn, UserIn
from .seed import seed_base
from .services import (
    create_entry,
    delete_entry,
    get_baby,
    get_profile,
    get_settings,
    init_db,
    list_babies,
    list_entries,
    list_users,
    live_data,
    lookup_user,
    update_baby,
    update_entry,
    update_profile,
    update_settings,
    upsert_baby,
    upsert_user,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="BabyTracker Pro API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

app.include_router(health_router, tags=["Health"])
app.include_router(parent_health_router, tags=["Parent health"])


# Startup

@app.on_event("startup")
def startup() -> None:
    # tables + reference data (idempotent)
    init_db()
    seed_base()


@app.get("/healthz")
def healthcheck() -> dict[str, Any]:
    return {"status": "ok", "timestamp": utcnow()}


# Users

@app.post("/api/users")
def api_upsert_user(payload: UserIn) -> dict[str, Any]:
    user = upsert_user(payload.model_dump(exclude_unset=True, exclude_none=True))
    return {"success": True, "user": user}


@app.get("/api/users")
def api_users() -> dict[str, Any]:
    return {"users": list_users()}


@app.post("/api/user/lookup")
def api_lookup_user(payload: LookupIn) -> dict[str, Any]:
    old_id = payload.old_user_data.id if payload.old_user_data else None
    return lookup_user(payload.email, old_user_id=old_id)


@app.get("/api/user/profile")
def api_profile(email: Optional[str] = None) -> dict[str, Any]:
    if not email:
        raise HTTPException(status_code=400, detail="Email parameter is required for user profile lookup")
    return get_profile(email)


@app.put("/api/user/profile")
def api_update_profile(updates: dict[str, Any] = Body(...)) -> dict[str, Any]:
    return {"success": True, "profile": update_profile(updates)}


@app.get("/api/user/settings")
def api_settings(user_id: Optional[str] = Query(None, alias="userId")) -> dict[str, Any]:
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID parameter is required")
    return get_settings(user_id)


@app.put("/api/user/settings")
def api_update_settings(updates: dict[str, Any] = Body(...)) -> dict[str, Any]:
    changes = dict(updates)
    user_id = changes.pop("userId", None)
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required for settings update")
    return {"success": True, "settings": update_settings(user_id, changes)}


# Babies

@app.post("/api/babies")
def api_upsert_baby(payload: BabyIn) -> dict[str, Any]:
    baby = upsert_baby(
        baby_id=payload.id,
        name=payload.name,
        birth_date=payload.birth_date,
        user_id=payload.user_id,
        gender=payload.gender,
        weight=payload.weight,
        height=payload.height,
        avatar=payload.avatar,
    )
    return {"success": True, "baby": baby}


@app.get("/api/babies")
def api_babies() -> dict[str, Any]:
    return {"babies": list_babies()}


@app.get("/api/babies/{baby_id}")
def api_baby(baby_id: str) -> dict[str, Any]:
    return get_baby(baby_id)


@app.put("/api/babies/{baby_id}")
def api_update_baby(baby_id: str, changes: dict[str, Any] = Body(...)) -> dict[str, Any]:
    return update_baby(baby_id, changes)


# Tracking entries

@app.post("/api/babies/{baby_id}/entries")
def api_create_entry(baby_id: str, body: dict[str, Any] = Body(...)) -> dict[str, Any]:
    return {"success": True, "entry": create_entry(baby_id, body)}


@app.get("/api/babies/{baby_id}/entries")
def api_entries(
    baby_id: str,
    email: Optional[str] = None,
    type: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = 100,
    page: int = 1,
) -> dict[str, Any]:
    if not email:
        raise HTTPException(status_code=400, detail="User email parameter is required for entry lookup")
    return list_entries(baby_id, email, entry_type=type, start_date=start_date, end_date=end_date, limit=limit, page=page)


@app.put("/api/babies/{baby_id}/entries")
def api_update_entry(baby_id: str, payload: EntryUpdateIn) -> dict[str, Any]:
    updated = update_entry(baby_id, payload.entry_id, payload.type, payload.user_email, payload.changes())
    return {"success": True, "message": f"{payload.type} entry updated successfully", "updatedEntry": updated}


@app.delete("/api/babies/{baby_id}/entries")
def api_delete_entry(
    baby_id: str,
    entry_id: Optional[str] = Query(None, alias="entryId"),
    type: Optional[str] = None,
    email: Optional[str] = None,
) -> dict[str, Any]:
    if not entry_id or not type or not email:
        raise HTTPException(status_code=400, detail="Entry ID, type, and user email are required")
    deleted = delete_entry(baby_id, entry_id, type, email)
    return {"success": True, "message": f"{type} entry deleted successfully", "deletedEntry": deleted}


@app.get("/api/babies/{baby_id}/live-data")
def api_live_data(baby_id: str, email: Optional[str] = None) -> dict[str, Any]:
    if not email:
        raise HTTPException(status_code=400, detail="User email parameter is required")
    return live_data(baby_id, email)
