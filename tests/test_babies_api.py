from __future__ import annotations

from sqlalchemy import select

from babytracker.db import db_session
from babytracker.models import ActivityLog


def test_create_baby_creates_placeholder_owner(client):
    r = client.post(
        "/api/babies",
        json={"id": "baby-9", "name": "Noé", "birthDate": "2026-02-14T00:00:00Z", "userId": "ghost"},
    )
    assert r.status_code == 200
    baby = r.json()["baby"]
    assert baby["avatar"] == "👶"
    assert baby["birthDate"].startswith("2026-02-14")

    owner = client.get("/api/babies/baby-9").json()["user"]
    assert owner["email"] == "ghost@temp.com"

    with db_session() as s:
        actions = s.scalars(select(ActivityLog.action).where(ActivityLog.user_id == "ghost")).all()
    assert actions == ["baby_created"]


def test_create_baby_missing_fields(client):
    r = client.post("/api/babies", json={"id": "baby-9", "name": "Noé"})
    assert r.status_code == 400
    assert "birthDate" in r.json()["error"]
    assert "userId" in r.json()["error"]


def test_create_baby_bad_birth_date(client, user):
    r = client.post("/api/babies", json={"id": "baby-9", "name": "Noé", "birthDate": "soon", "userId": "user-1"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid birthDate format"


def test_upsert_existing_baby(client, baby):
    r = client.post(
        "/api/babies",
        json={"id": "baby-1", "name": "Léa Rose", "birthDate": "2026-01-01", "userId": "user-1", "avatar": "🐣"},
    )
    assert r.json()["baby"]["name"] == "Léa Rose"
    assert r.json()["baby"]["avatar"] == "🐣"
    assert len(client.get("/api/babies").json()["babies"]) == 1


def test_list_babies_with_owner(client, baby):
    babies = client.get("/api/babies").json()["babies"]
    assert babies[0]["user"]["email"] == "alice@example.com"


def test_get_unknown_baby(client):
    r = client.get("/api/babies/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Baby not found"}


def test_update_baby_merges_fields(client, baby):
    r = client.put("/api/babies/baby-1", json={"name": "", "weight": 3650, "gender": "girl"})
    assert r.status_code == 200
    updated = r.json()
    # empty name is ignored, weight is applied
    assert updated["name"] == "Léa"
    assert updated["weight"] == 3650
    assert updated["user"]["id"] == "user-1"


def test_update_unknown_baby(client):
    r = client.put("/api/babies/nope", json={"name": "X"})
    assert r.status_code == 404


def test_resync_keeps_measurements(client, user):
    full = {"id": "baby-3", "name": "Inès", "birthDate": "2026-01-10", "userId": "user-1"}
    client.post("/api/babies", json={**full, "gender": "girl", "weight": 3200, "height": 50})

    r = client.post("/api/babies", json=full)
    baby = r.json()["baby"]
    assert (baby["gender"], baby["weight"], baby["height"]) == ("girl", 3200, 50)
