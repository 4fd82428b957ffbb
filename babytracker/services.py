from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import Base, camel, db_session, engine, utcnow
from .models import (
    ActivityLog,
    Baby,
    DiaperEntry,
    FeedingEntry,
    GrowthEntry,
    SleepEntry,
    User,
    UserSettings,
)

logger = logging.getLogger(__name__)


# =========================
# Bootstrap DB
# =========================
def init_db() -> None:
    """Create missing tables."""
    Base.metadata.create_all(bind=engine)


# =========================
# Errors / helpers
# =========================
class NotFoundError(LookupError):
    """The requested record does not exist (or is not visible to the caller)."""


def parse_datetime(value: Any, field: str) -> datetime:
    """
    Accepts what the web client sends for a timestamp: ISO strings (with or
    without a trailing Z), epoch milliseconds, or datetime objects.
    Aware values are converted to naive UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Invalid {field} format") from None
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f"Invalid {field} format") from None
    else:
        raise ValueError(f"Invalid {field} format")

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def optional_datetime(value: Any, field: str) -> datetime | None:
    return parse_datetime(value, field) if value else None


def to_int(value: Any, field: str = "number") -> int | None:
    """Whole-number conversion used for growth measurements; falsy means no value."""
    if not value:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field} value") from None


FieldSpec = tuple[str, str, Optional[Callable[[Any, str], Any]], bool]


def apply_changes(entity: Base, changes: dict[str, Any], fields: list[FieldSpec]) -> None:
    """
    Partial update. Each field is (client key, column, converter, truthy_only):
    a key is applied when present in `changes`, or only when truthy if
    truthy_only is set.
    """
    for key, column, convert, truthy_only in fields:
        if key not in changes or (truthy_only and not changes[key]):
            continue
        value = changes[key]
        setattr(entity, column, convert(value, key) if convert else value)


def _columns(model: type[Base]) -> dict[str, str]:
    """camelCase wire name -> column attribute."""
    return {camel(c.key): c.key for c in model.__mapper__.column_attrs}


def _log_activity(s: Session, user_id: str, action: str, data: Any, baby_id: str | None = None) -> None:
    s.add(ActivityLog(user_id=user_id, baby_id=baby_id, action=action, data=data))


def _log_activity_safely(user_id: str, action: str, data: Any, baby_id: str | None = None) -> None:
    """Activity logging in its own transaction: a failure here must not undo the main write."""
    try:
        with db_session() as s:
            _log_activity(s, user_id, action, data, baby_id)
    except SQLAlchemyError:
        logger.exception("Could not log activity %s for user %s", action, user_id)


def user_summary(u: User) -> dict[str, Any]:
    return {"id": u.id, "firstName": u.first_name, "lastName": u.last_name, "email": u.email}


# =========================
# Users
# =========================
USER_DEFAULTS = {"role": "mother", "timezone": "Europe/Paris", "language": "fr"}


def upsert_user(data: dict[str, Any]) -> dict[str, Any]:
    """
    Create the user, or update it when the id already exists.
    `data` holds only the fields the client sent (snake_case); the email of an
    existing user is never rewritten here.
    """
    fields = {**USER_DEFAULTS, **data}
    user_id = fields.pop("id")
    email = fields.pop("email")

    with db_session() as s:
        u = s.get(User, user_id)
        if u is None:
            taken = s.execute(select(User.id).where(User.email == email)).first()
            if taken:
                raise ValueError("Email already in use")
            u = User(id=user_id, email=email, **fields)
            s.add(u)
        else:
            for key, value in fields.items():
                setattr(u, key, value)
        s.flush()

        _log_activity(s, u.id, "user_created", {"id": u.id, "email": u.email})
        logger.info("User %s created/updated", u.id)
        return u.to_dict()


def list_users() -> list[dict[str, Any]]:
    with db_session() as s:
        users = s.scalars(select(User).order_by(User.created_at)).all()
        return [
            {
                **u.to_dict(),
                "babies": [b.to_dict() for b in u.babies],
                "settings": u.settings.to_dict() if u.settings else None,
            }
            for u in users
        ]


def _user_with_relations(u: User) -> dict[str, Any]:
    return {
        **u.to_dict(),
        "settings": u.settings.to_dict() if u.settings else None,
        "babies": [b.to_dict() for b in u.babies],
    }


def get_user_by_email(s: Session, email: str) -> User:
    u = s.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if u is None:
        raise NotFoundError("User not found")
    return u


def lookup_user(email: str, old_user_id: str | None = None) -> dict[str, Any]:
    """
    Email-based login: return the user owning `email`; otherwise move a legacy
    account (`old_user_id`) to that email; otherwise report a new user.
    """
    with db_session() as s:
        u = s.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if u is not None:
            return {"success": True, "user": _user_with_relations(u), "isExistingUser": True}

        if old_user_id:
            old = s.get(User, old_user_id)
            if old is not None and old.email != email:
                old_email = old.email
                old.email = email
                _log_activity(s, old.id, "email_updated", {"oldEmail": old_email, "newEmail": email})
                s.flush()
                logger.info("User %s moved from %s to %s", old.id, old_email, email)
                return {"success": True, "user": _user_with_relations(old), "isEmailUpdated": True}

        return {"success": True, "user": None, "isNewUser": True}


PROFILE_ENTRY_LIMIT = 50


def get_profile(email: str) -> dict[str, Any]:
    """User, settings and every baby with its most recent tracking entries."""
    with db_session() as s:
        u = get_user_by_email(s, email)

        babies = []
        for b in u.babies:
            babies.append(
                {
                    **b.to_dict(),
                    "feedingEntries": _recent(s, FeedingEntry, FeedingEntry.start_time, b.id),
                    "sleepEntries": _recent(s, SleepEntry, SleepEntry.start_time, b.id),
                    "diaperEntries": _recent(s, DiaperEntry, DiaperEntry.time, b.id),
                    "growthEntries": _recent(s, GrowthEntry, GrowthEntry.date, b.id),
                }
            )

        return {**u.to_dict(), "settings": u.settings.to_dict() if u.settings else None, "babies": babies}


def _recent(s: Session, model, order_col, baby_id: str) -> list[dict]:
    q = select(model).where(model.baby_id == baby_id).order_by(order_col.desc()).limit(PROFILE_ENTRY_LIMIT)
    return [e.to_dict() for e in s.scalars(q)]


def update_profile(updates: dict[str, Any]) -> dict[str, Any]:
    updates = dict(updates)
    if not updates.get("email") and not updates.get("id"):
        raise ValueError("Email or user ID is required for profile update")
    if not updates.get("id"):
        raise ValueError("User ID is required when updating email")

    user_id = updates.pop("id")
    columns = _columns(User)
    unknown = [k for k in updates if k not in columns or k in ("createdAt", "updatedAt")]
    if unknown:
        raise ValueError(f"Unknown profile field(s): {', '.join(sorted(unknown))}")

    with db_session() as s:
        u = s.get(User, user_id)
        if u is None:
            raise NotFoundError("User not found")

        new_email = updates.get("email")
        if new_email and new_email != u.email:
            taken = s.execute(select(User.id).where(User.email == new_email)).first()
            if taken:
                raise ValueError("Email already in use")

        for key, value in updates.items():
            setattr(u, columns[key], value)

        _log_activity(s, u.id, "profile_updated", updates)
        s.flush()
        return u.to_dict()


# =========================
# User settings
# =========================
DEFAULT_SETTINGS: dict[str, Any] = {
    "theme": "light",
    "colorScheme": "green",
    "fontSize": "medium",
    "language": "fr",
    "dateFormat": "DD/MM/YYYY",
    "timeFormat": "24h",
    "weightUnit": "grams",
    "heightUnit": "cm",
    "temperatureUnit": "celsius",
    "volumeUnit": "ml",
    "notifications": {"push": True, "email": True, "feeding": True, "sleep": True, "diaper": True, "growth": True},
    "privacy": {"shareData": False, "analytics": True},
    "backup": {"autoBackup": True, "frequency": "weekly"},
}

# seeded into a JSON section when neither the request nor the stored row has it
SECTION_DEFAULTS: dict[str, dict[str, Any]] = {
    "notifications": {
        "enabled": True,
        "feedingReminders": True,
        "feedingInterval": 180,
        "sleepReminders": True,
        "sleepInsufficientThreshold": 0.5,
        "sleepQualityMinimumHours": 6,
        "diaperReminders": True,
        "healthAlerts": True,
        "quietHours": {"enabled": False, "start": "22:00", "end": "06:00"},
        "pushNotifications": True,
        "emailNotifications": False,
    },
    "privacy": {"dataSharing": False, "analytics": True, "faceIdUnlock": False},
    "backup": {"autoBackup": True, "backupFrequency": "weekly", "cloudSync": False},
}


def get_settings(user_id: str) -> dict[str, Any]:
    with db_session() as s:
        row = s.execute(select(UserSettings).where(UserSettings.user_id == user_id)).scalar_one_or_none()
        return row.to_dict() if row else dict(DEFAULT_SETTINGS)


def update_settings(user_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Partial settings update. JSON sections are shallow-merged over the stored
    ones; a section missing on both sides gets its defaults.
    """
    columns = _columns(UserSettings)
    unknown = [k for k in changes if k not in columns or k in ("id", "userId", "updatedAt")]
    if unknown:
        raise ValueError(f"Unknown settings field(s): {', '.join(sorted(unknown))}")

    with db_session() as s:
        row = s.execute(select(UserSettings).where(UserSettings.user_id == user_id)).scalar_one_or_none()

        data = dict(changes)
        for section, defaults in SECTION_DEFAULTS.items():
            incoming = changes.get(section)
            stored = getattr(row, section) if row else None
            if incoming and stored:
                data[section] = {**stored, **incoming}
            elif not incoming and not stored:
                data[section] = dict(defaults)

        if row is None:
            row = UserSettings(user_id=user_id)
            s.add(row)
        for key, value in data.items():
            setattr(row, columns[key], value)

        _log_activity(s, user_id, "settings_updated", changes)
        s.flush()
        return row.to_dict()


def merge_privacy(s: Session, user_id: str, key: str, value: Any) -> None:
    """Store `value` under `privacy[key]` in the user's settings, creating them if needed."""
    row = s.execute(select(UserSettings).where(UserSettings.user_id == user_id)).scalar_one_or_none()
    if row is None:
        s.add(UserSettings(user_id=user_id, notifications={}, privacy={key: value}, backup={}))
    else:
        # reassign: in-place edits of a JSON column are not tracked
        row.privacy = {**(row.privacy or {}), key: value}


# =========================
# Babies
# =========================
def _baby_with_owner(b: Baby) -> dict[str, Any]:
    return {**b.to_dict(), "user": user_summary(b.user)}


def upsert_baby(
    baby_id: str,
    name: str,
    birth_date: Any,
    user_id: str,
    gender: str | None = None,
    weight: float | None = None,
    height: float | None = None,
    avatar: str | None = None,
) -> dict[str, Any]:
    birth = parse_datetime(birth_date, "birthDate")

    with db_session() as s:
        # the owner may not have been synced yet: create a placeholder account
        if s.get(User, user_id) is None:
            s.add(User(id=user_id, email=f"{user_id}@temp.com", first_name="Temp", last_name="User", role="mother"))
            s.flush()
            logger.info("Placeholder user %s created for baby %s", user_id, baby_id)

        b = s.get(Baby, baby_id)
        if b is None:
            b = Baby(id=baby_id, user_id=user_id)
            s.add(b)
        b.name = name
        b.birth_date = birth
        # values left out of a re-sync keep what is stored
        if gender is not None:
            b.gender = gender
        if weight is not None:
            b.weight = weight
        if height is not None:
            b.height = height
        b.avatar = avatar or "👶"
        s.flush()
        result = b.to_dict()

    logger.info("Baby %s created/updated for user %s", baby_id, user_id)
    _log_activity_safely(user_id, "baby_created", {"id": baby_id, "name": name})
    return result


def list_babies() -> list[dict[str, Any]]:
    with db_session() as s:
        babies = s.scalars(select(Baby).order_by(Baby.created_at)).all()
        return [{**b.to_dict(), "user": b.user.to_dict()} for b in babies]


def get_baby(baby_id: str) -> dict[str, Any]:
    with db_session() as s:
        b = s.get(Baby, baby_id)
        if b is None:
            raise NotFoundError("Baby not found")
        return _baby_with_owner(b)


BABY_UPDATE_FIELDS: list[FieldSpec] = [
    ("name", "name", None, True),
    ("birthDate", "birth_date", parse_datetime, True),
    ("gender", "gender", None, True),
    ("weight", "weight", None, False),
    ("height", "height", None, False),
]


def update_baby(baby_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with db_session() as s:
        b = s.get(Baby, baby_id)
        if b is None:
            raise NotFoundError("Baby not found")

        apply_changes(b, changes, BABY_UPDATE_FIELDS)

        s.flush()
        return _baby_with_owner(b)


# =========================
# Tracking entries (feeding / sleep / diaper / growth)
# =========================
FEEDING_TYPES = ("feeding", "biberon", "tétée", "solide")


def entry_kind(entry_type: str | None) -> str:
    if entry_type in FEEDING_TYPES:
        return "feeding"
    if entry_type in ("sleep", "diaper", "growth"):
        return entry_type
    raise ValueError("Invalid entry type")


# kind -> (model, timestamp column name, tied to the logging user)
ENTRY_MODELS: dict[str, tuple[type[Base], str, bool]] = {
    "feeding": (FeedingEntry, "start_time", True),
    "sleep": (SleepEntry, "start_time", True),
    "diaper": (DiaperEntry, "time", True),
    "growth": (GrowthEntry, "date", False),
}


def _build_feeding(body: dict[str, Any]) -> dict[str, Any]:
    entry_type = body.get("type")
    return {
        "type": (body.get("feedingType") or "biberon") if entry_type == "feeding" else entry_type,
        "amount": body.get("amount") or None,
        "start_time": parse_datetime(body.get("startTime"), "startTime"),
        "end_time": optional_datetime(body.get("endTime"), "endTime"),
        "duration": body.get("duration") or None,
        "mood": body.get("mood") or None,
        "notes": body.get("notes") or None,
    }


def _build_sleep(body: dict[str, Any]) -> dict[str, Any]:
    return {
        "start_time": parse_datetime(body.get("startTime"), "startTime"),
        "end_time": optional_datetime(body.get("endTime"), "endTime"),
        "duration": body.get("duration") or None,
        "quality": body.get("quality") or None,
        "type": body.get("sleepType") or None,
        "location": body.get("location") or None,
        "notes": body.get("notes") or None,
    }


def _build_diaper(body: dict[str, Any]) -> dict[str, Any]:
    return {
        "time": parse_datetime(body.get("time"), "time"),
        "type": body.get("diaperType"),
        "wetness": body.get("wetness") or None,
        "stool": body.get("stool") or None,
        "diaper": body.get("diaper") or None,
        "mood": body.get("mood") or None,
        "changed_by": body.get("changedBy") or None,
        "notes": body.get("notes") or None,
        "amount": body.get("amount") or None,
        "color": body.get("color") or None,
    }


def _build_growth(body: dict[str, Any]) -> dict[str, Any]:
    return {
        "date": parse_datetime(body.get("date"), "date"),
        "weight": to_int(body.get("weight")),
        "height": to_int(body.get("height")),
        "head_circ": to_int(body.get("headCircumference")),
        "notes": body.get("notes") or None,
    }


BUILDERS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "feeding": _build_feeding,
    "sleep": _build_sleep,
    "diaper": _build_diaper,
    "growth": _build_growth,
}


def create_entry(baby_id: str, body: dict[str, Any]) -> dict[str, Any]:
    entry_type = body.get("type")
    kind = entry_kind(entry_type)
    model, _, per_user = ENTRY_MODELS[kind]
    user_id = body.get("userId")

    fields = BUILDERS[kind](body)
    if per_user:
        fields["user_id"] = user_id

    with db_session() as s:
        entry = model(baby_id=baby_id, **fields)
        s.add(entry)
        s.flush()

        if user_id:
            _log_activity(s, user_id, f"{kind}_created", {"id": entry.id, "type": entry_type}, baby_id=baby_id)
        logger.info("%s entry %s created for baby %s", kind, entry.id, baby_id)
        return entry.to_dict()


def _serialize_entry(kind: str, entry: Base) -> dict[str, Any]:
    data = entry.to_dict()
    if "type" in data:
        data["kind"] = data["type"]
    data["type"] = kind
    return data


def _entry_timestamp(data: dict[str, Any]) -> datetime:
    return data.get("startTime") or data.get("time") or data.get("date")


def list_entries(
    baby_id: str,
    email: str,
    entry_type: str | None = None,
    start_date: Any = None,
    end_date: Any = None,
    limit: int = 100,
    page: int = 1,
) -> dict[str, Any]:
    """
    Entries of every kind (or one kind) for a baby, newest first.
    Paging is applied per kind before merging. A type other than
    feeding, sleep, diaper or growth matches nothing.
    """
    if limit < 1 or page < 1:
        raise ValueError("limit and page must be positive")
    if entry_type:
        kinds = [entry_type] if entry_type in ENTRY_MODELS else []
    else:
        kinds = list(ENTRY_MODELS)
    start = optional_datetime(start_date, "startDate")
    end = optional_datetime(end_date, "endDate")
    skip = (page - 1) * limit

    with db_session() as s:
        user = get_user_by_email(s, email)

        entries: list[dict[str, Any]] = []
        for kind in kinds:
            model, ts_name, per_user = ENTRY_MODELS[kind]
            ts = getattr(model, ts_name)
            q = select(model).where(model.baby_id == baby_id)
            if per_user:
                q = q.where(model.user_id == user.id)
            if start is not None:
                q = q.where(ts >= start)
            if end is not None:
                q = q.where(ts <= end)
            q = q.order_by(ts.desc()).offset(skip).limit(limit)
            entries.extend(_serialize_entry(kind, e) for e in s.scalars(q))

    entries.sort(key=_entry_timestamp, reverse=True)
    total = len(entries)
    return {
        "entries": entries,
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit),
    }


def _owned_entry(s: Session, kind: str, entry_id: str, baby_id: str, user: User) -> Base:
    model, _, per_user = ENTRY_MODELS[kind]
    q = select(model).where(model.id == entry_id, model.baby_id == baby_id)
    if per_user:
        q = q.where(model.user_id == user.id)
    entry = s.scalars(q).first()
    if entry is None:
        raise NotFoundError(f"{kind.capitalize()} entry not found or unauthorized")
    return entry


_ts = parse_datetime
UPDATE_FIELDS: dict[str, list[FieldSpec]] = {
    "feeding": [
        ("kind", "type", None, True),
        ("amount", "amount", None, False),
        ("startTime", "start_time", _ts, True),
        ("endTime", "end_time", _ts, True),
        ("duration", "duration", None, False),
        ("mood", "mood", None, True),
        ("notes", "notes", None, False),
    ],
    "sleep": [
        ("startTime", "start_time", _ts, True),
        ("endTime", "end_time", _ts, True),
        ("duration", "duration", None, False),
        ("quality", "quality", None, True),
        ("sleepType", "type", None, True),
        ("location", "location", None, True),
        ("notes", "notes", None, False),
    ],
    "diaper": [
        ("time", "time", _ts, True),
        ("diaperType", "type", None, True),
        ("wetness", "wetness", None, True),
        ("stool", "stool", None, True),
        ("diaper", "diaper", None, True),
        ("mood", "mood", None, True),
        ("changedBy", "changed_by", None, True),
        ("notes", "notes", None, False),
        ("amount", "amount", None, True),
        ("color", "color", None, True),
    ],
    "growth": [
        ("date", "date", _ts, True),
        ("weight", "weight", to_int, False),
        ("height", "height", to_int, False),
        ("headCircumference", "head_circ", to_int, False),
        ("notes", "notes", None, False),
    ],
}


def update_entry(baby_id: str, entry_id: str, entry_type: str, user_email: str, changes: dict[str, Any]) -> dict:
    kind = entry_kind(entry_type)
    if kind == "feeding" and entry_type != "feeding":
        raise ValueError("Invalid entry type")

    with db_session() as s:
        user = get_user_by_email(s, user_email)
        entry = _owned_entry(s, kind, entry_id, baby_id, user)

        apply_changes(entry, changes, UPDATE_FIELDS[kind])

        _log_activity(
            s, user.id, f"{kind}_updated", {"id": entry_id, "type": entry_type, "updates": changes}, baby_id=baby_id
        )
        s.flush()
        return entry.to_dict()


def delete_entry(baby_id: str, entry_id: str, entry_type: str, user_email: str) -> dict[str, Any]:
    kind = entry_kind(entry_type)
    if kind == "feeding" and entry_type != "feeding":
        raise ValueError("Invalid entry type")

    with db_session() as s:
        user = get_user_by_email(s, user_email)
        entry = _owned_entry(s, kind, entry_id, baby_id, user)
        deleted = entry.to_dict()
        s.delete(entry)

        _log_activity(s, user.id, f"{kind}_deleted", {"id": entry_id, "type": entry_type}, baby_id=baby_id)
        logger.info("%s entry %s deleted for baby %s", kind, entry_id, baby_id)
        return deleted


# =========================
# Live data (polled by the dashboard)
# =========================
def _minutes_between(start: datetime, end: datetime) -> int:
    return math.floor((end - start).total_seconds() / 60)


def live_data(baby_id: str, email: str, now: datetime | None = None) -> dict[str, Any]:
    """
    Today's feedings, sleeps and diapers for a baby plus running totals.
    "Today" is the UTC day containing `now`.
    """
    now = now or utcnow()
    start_of_day = datetime(now.year, now.month, now.day)
    end_of_day = start_of_day + timedelta(days=1)

    with db_session() as s:
        user = get_user_by_email(s, email)
        baby = s.execute(select(Baby).where(Baby.id == baby_id, Baby.user_id == user.id)).scalar_one_or_none()
        if baby is None:
            raise NotFoundError("Baby not found")

        def today(model, ts):
            q = (
                select(model)
                .where(model.baby_id == baby_id, model.user_id == user.id, ts >= start_of_day, ts < end_of_day)
                .order_by(ts.desc())
            )
            return list(s.scalars(q))

        feedings = today(FeedingEntry, FeedingEntry.start_time)
        sleeps = today(SleepEntry, SleepEntry.start_time)
        diapers = today(DiaperEntry, DiaperEntry.time)

        total_milk = sum(f.amount or 0 for f in feedings if f.type == "biberon")
        total_sleep = sum(_minutes_between(x.start_time, x.end_time) for x in sleeps if x.end_time)
        last = feedings[0] if feedings else None

        return {
            "baby": {
                "id": baby.id,
                "name": baby.name,
                "birthDate": baby.birth_date,
                "weight": baby.weight,
                "height": baby.height,
                "avatar": baby.avatar,
                "gender": baby.gender,
            },
            "liveData": {
                "feedings": [
                    {
                        "id": f.id,
                        "babyId": f.baby_id,
                        "kind": f.type,
                        "amount": f.amount,
                        "startTime": f.start_time,
                        "endTime": f.end_time,
                        "duration": f.duration,
                        "mood": f.mood,
                        "notes": f.notes,
                    }
                    for f in feedings
                ],
                "sleeps": [
                    {
                        "id": x.id,
                        "babyId": x.baby_id,
                        "startTime": x.start_time,
                        "endTime": x.end_time,
                        "duration": x.duration,
                        "quality": x.quality,
                        "type": x.type,
                        "location": x.location,
                        "notes": x.notes,
                    }
                    for x in sleeps
                ],
                "diapers": [{**d.to_dict(), "timestamp": d.time} for d in diapers],
                "stats": {
                    "totalMilk": total_milk,
                    "totalSleepMinutes": total_sleep,
                    "feedingCount": len(feedings),
                    "sleepCount": len(sleeps),
                    "diaperCount": len(diapers),
                    "timeSinceLastFeeding": _minutes_between(last.start_time, now) if last else None,
                    "lastFeeding": (
                        {"time": last.start_time, "amount": last.amount, "type": last.type, "mood": last.mood}
                        if last
                        else None
                    ),
                },
            },
            "timestamp": now,
        }
