from __future__ import annotations

from datetime import datetime

import pytest

from babytracker.parent_health_service import mood_history, mood_label, record_mood, risk_level, sleep_quality


@pytest.mark.parametrize(
    "mood, energy, expected",
    [
        (1, 2, "high"),
        (2, 2, "high"),
        (2, 5, "moderate"),
        (4, 3, "moderate"),
        (4, 4, "low"),
        (5, 9, "low"),
        (None, None, "low"),
        (None, 2, "moderate"),
        (2, None, "moderate"),
    ],
)
def test_risk_level(mood, energy, expected):
    assert risk_level(mood, energy) == expected


def test_labels():
    assert [mood_label(m) for m in (5, 4, 3, 2, 1, None)] == ["excellent", "good", "okay", "low", "very_low", "very_low"]
    assert [sleep_quality(h) for h in (8, 7, 6, 5, 4.5, None)] == ["good", "good", "poor", "poor", "terrible", "terrible"]


class TestGoals:
    def test_save_and_read(self, client, user):
        goals = {"hydration": True, "walk": False}
        r = client.post("/api/parent-health/goals", json={"userEmail": "alice@example.com", "goals": goals})
        assert r.status_code == 200
        assert r.json() == {"success": True, "data": {"goals": goals}}

        r = client.get("/api/parent-health/goals", params={"userEmail": "alice@example.com"})
        assert r.json()["data"]["selfCareGoals"] == goals

    def test_keeps_other_privacy_keys(self, client, user):
        client.put("/api/user/settings", json={"userId": "user-1", "privacy": {"analytics": False}})
        client.post("/api/parent-health/goals", json={"userEmail": "alice@example.com", "goals": {"rest": True}})

        privacy = client.get("/api/user/settings", params={"userId": "user-1"}).json()["privacy"]
        assert privacy == {"analytics": False, "selfCareGoals": {"rest": True}}

    def test_nothing_stored(self, client, user):
        r = client.get("/api/parent-health/goals", params={"userEmail": "alice@example.com"})
        assert r.json()["data"]["selfCareGoals"] == {}

    def test_errors(self, client, user):
        assert client.post("/api/parent-health/goals", json={"userEmail": "alice@example.com"}).status_code == 400
        assert client.get("/api/parent-health/goals").status_code == 400
        r = client.post("/api/parent-health/goals", json={"userEmail": "nobody@example.com", "goals": {}})
        assert r.status_code == 404


class TestRecovery:
    def test_save_creates_profile(self, client, user):
        items = {"pelvicFloor": True, "scarCare": False}
        r = client.post("/api/parent-health/recovery", json={"userEmail": "alice@example.com", "recoveryItems": items})
        assert r.json()["data"] == {"recoveryItems": items}

        r = client.get("/api/parent-health/recovery", params={"userEmail": "alice@example.com"})
        assert r.json()["data"]["recoveryProgress"] == items

        profile = mood_history("alice@example.com")
        assert profile["deliveryType"] == "vaginal"
        assert profile["mentalHealth"] == []


class TestMood:
    def test_one_check_in_per_day(self, user):
        morning = datetime(2026, 3, 10, 8, 0)
        evening = datetime(2026, 3, 10, 20, 0)

        first = record_mood("alice@example.com", mood=2, energy=2, stress=7, sleep_hours=4, now=morning)
        assert first["mentalHealthTracking"]["riskLevel"] == "high"
        assert first["moodEntry"]["mood"] == "low"
        assert first["physicalRecovery"]["sleepQuality"] == "terrible"
        assert first["physicalRecovery"]["painLevel"] == 9

        second = record_mood(
            "alice@example.com", mood=5, energy=8, sleep_hours=7.5, positive_moments=["first smile"], now=evening
        )
        assert second["mentalHealthTracking"]["id"] == first["mentalHealthTracking"]["id"]
        assert second["moodEntry"]["id"] == first["moodEntry"]["id"]
        assert second["mentalHealthTracking"]["riskLevel"] == "low"
        assert second["moodEntry"]["anxietyLevel"] == 3
        assert second["moodEntry"]["copingStrategies"] == ["first smile"]
        assert second["physicalRecovery"]["painLevel"] == 3

        history = mood_history("alice@example.com")
        assert len(history["mentalHealth"]) == 1
        assert len(history["mentalHealth"][0]["moodEntries"]) == 1
        assert len(history["recoveryData"]) == 1

    def test_history_range(self, user):
        record_mood("alice@example.com", mood=3, energy=3, now=datetime(2026, 3, 1, 9, 0))
        record_mood("alice@example.com", mood=4, energy=4, now=datetime(2026, 3, 5, 9, 0))
        record_mood("alice@example.com", mood=4, energy=5, now=datetime(2026, 3, 9, 9, 0))

        history = mood_history("alice@example.com", start_date="2026-03-04", end_date="2026-03-10")
        assert [t["date"] for t in history["mentalHealth"]] == [datetime(2026, 3, 9), datetime(2026, 3, 5)]
        assert len(history["recoveryData"]) == 2

        # a single bound is ignored
        assert len(mood_history("alice@example.com", start_date="2026-03-04")["mentalHealth"]) == 3

    def test_endpoints(self, client, user):
        r = client.get("/api/parent-health/mood", params={"userEmail": "alice@example.com"})
        assert r.json()["data"] == {"mentalHealth": [], "recoveryData": []}

        r = client.post("/api/parent-health/mood", json={"userEmail": "alice@example.com", "mood": 4, "energy": 6})
        assert r.status_code == 200
        assert r.json()["data"]["moodEntry"]["mood"] == "good"

        r = client.get("/api/parent-health/mood", params={"userEmail": "alice@example.com"})
        assert len(r.json()["data"]["mentalHealth"]) == 1

    def test_check_in_without_scores(self, client, user, caplog):
        with caplog.at_level("WARNING", logger="babytracker.parent_health_service"):
            r = client.post("/api/parent-health/mood", json={"userEmail": "alice@example.com", "sleepHours": 8})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["mentalHealthTracking"]["riskLevel"] == "low"
        assert data["physicalRecovery"]["energyLevel"] == 3
        assert data["physicalRecovery"]["sleepQuality"] == "good"
        assert "High wellbeing risk" not in caplog.text

    def test_mood_out_of_range(self, client, user):
        r = client.post("/api/parent-health/mood", json={"userEmail": "alice@example.com", "mood": 9})
        assert r.status_code == 400
