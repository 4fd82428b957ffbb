from __future__ import annotations

import pytest

URL = "/api/babies/baby-1/entries"


@pytest.fixture()
def entries(client, baby, other_user):
    created = {}
    payloads = {
        "feeding": {"type": "feeding", "feedingType": "tétée", "duration": 900, "startTime": "2026-03-01T08:00:00Z"},
        "biberon": {"type": "biberon", "amount": 120, "mood": "happy", "startTime": "2026-03-01T11:00:00Z"},
        "sleep": {
            "type": "sleep",
            "sleepType": "nap",
            "quality": "good",
            "startTime": "2026-03-01T09:00:00Z",
            "endTime": "2026-03-01T10:30:00Z",
        },
        "diaper": {"type": "diaper", "diaperType": "wet", "time": "2026-03-01T10:45:00Z"},
        "growth": {"type": "growth", "weight": "4210.8", "height": 55, "headCircumference": 37, "date": "2026-03-01"},
    }
    for key, payload in payloads.items():
        r = client.post(URL, json={**payload, "userId": "user-1"})
        assert r.status_code == 200, r.text
        created[key] = r.json()["entry"]

    # someone else's feeding on the same baby
    client.post(URL, json={"type": "biberon", "amount": 60, "startTime": "2026-03-01T12:00:00Z", "userId": "user-2"})
    return created


class TestCreate:
    def test_feeding_subtypes(self, entries):
        assert entries["feeding"]["type"] == "tétée"
        assert entries["biberon"]["type"] == "biberon"
        assert entries["biberon"]["amount"] == 120

    def test_generic_feeding_defaults_to_bottle(self, client, baby):
        r = client.post(URL, json={"type": "feeding", "startTime": "2026-03-01T08:00:00Z"})
        assert r.json()["entry"]["type"] == "biberon"

    def test_sleep_and_diaper_mapping(self, entries):
        assert entries["sleep"]["type"] == "nap"
        assert entries["diaper"]["type"] == "wet"

    def test_growth_values_are_truncated(self, entries):
        assert entries["growth"]["weight"] == 4210
        assert entries["growth"]["headCirc"] == 37

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"type": "biberon", "startTime": "not a date"}, "Invalid startTime format"),
            ({"type": "sleep", "startTime": "2026-03-01T08:00:00Z", "endTime": "later"}, "Invalid endTime format"),
            ({"type": "diaper"}, "Invalid time format"),
            ({"type": "growth", "date": ""}, "Invalid date format"),
            ({"type": "bath"}, "Invalid entry type"),
        ],
    )
    def test_invalid_payloads(self, client, baby, payload, message):
        r = client.post(URL, json=payload)
        assert r.status_code == 400
        assert r.json() == {"error": message}


class TestList:
    def test_email_required(self, client, baby):
        r = client.get(URL)
        assert r.status_code == 400
        assert r.json()["error"] == "User email parameter is required for entry lookup"

    def test_unknown_user(self, client, baby):
        assert client.get(URL, params={"email": "nobody@example.com"}).status_code == 404

    def test_merged_newest_first(self, client, entries):
        body = client.get(URL, params={"email": "alice@example.com"}).json()
        assert body["total"] == 5
        assert body["page"] == 1
        assert body["totalPages"] == 1
        # Bob's feeding is not listed
        assert [e["type"] for e in body["entries"]] == ["feeding", "diaper", "sleep", "feeding", "growth"]
        assert body["entries"][0]["kind"] == "biberon"

    def test_filter_by_type(self, client, entries):
        body = client.get(URL, params={"email": "alice@example.com", "type": "sleep"}).json()
        assert [e["id"] for e in body["entries"]] == [entries["sleep"]["id"]]

    def test_filter_by_dates(self, client, entries):
        params = {
            "email": "alice@example.com",
            "startDate": "2026-03-01T09:30:00Z",
            "endDate": "2026-03-01T23:00:00Z",
        }
        body = client.get(URL, params=params).json()
        assert sorted(e["type"] for e in body["entries"]) == ["diaper", "feeding"]

    def test_paging_is_per_type(self, client, entries):
        body = client.get(URL, params={"email": "alice@example.com", "type": "feeding", "limit": 1, "page": 2}).json()
        assert [e["id"] for e in body["entries"]] == [entries["feeding"]["id"]]
        assert body["limit"] == 1


class TestUpdate:
    def test_update_feeding(self, client, entries):
        payload = {
            "entryId": entries["biberon"]["id"],
            "type": "feeding",
            "userEmail": "alice@example.com",
            "amount": 150,
            "kind": "solide",
        }
        r = client.put(URL, json=payload)
        assert r.status_code == 200
        body = r.json()
        assert body["message"] == "feeding entry updated successfully"
        assert body["updatedEntry"]["amount"] == 150
        assert body["updatedEntry"]["type"] == "solide"

    def test_update_growth(self, client, entries):
        payload = {
            "entryId": entries["growth"]["id"],
            "type": "growth",
            "userEmail": "alice@example.com",
            "headCircumference": "38.4",
        }
        assert client.put(URL, json=payload).json()["updatedEntry"]["headCirc"] == 38

    def test_other_user_cannot_update(self, client, entries):
        payload = {"entryId": entries["sleep"]["id"], "type": "sleep", "userEmail": "bob@example.com", "quality": "bad"}
        r = client.put(URL, json=payload)
        assert r.status_code == 404
        assert r.json() == {"error": "Sleep entry not found or unauthorized"}

    def test_required_parameters(self, client, entries):
        r = client.put(URL, json={"entryId": entries["sleep"]["id"], "type": "sleep"})
        assert r.status_code == 400
        assert "userEmail" in r.json()["error"]


class TestDelete:
    def test_delete_diaper(self, client, entries):
        params = {"entryId": entries["diaper"]["id"], "type": "diaper", "email": "alice@example.com"}
        r = client.delete(URL, params=params)
        assert r.status_code == 200
        assert r.json()["deletedEntry"]["id"] == entries["diaper"]["id"]

        remaining = client.get(URL, params={"email": "alice@example.com", "type": "diaper"}).json()
        assert remaining["entries"] == []

        assert client.delete(URL, params=params).status_code == 404

    def test_missing_parameters(self, client, entries):
        r = client.delete(URL, params={"type": "diaper"})
        assert r.status_code == 400
        assert r.json()["error"] == "Entry ID, type, and user email are required"

    def test_invalid_type(self, client, entries):
        params = {"entryId": entries["diaper"]["id"], "type": "bath", "email": "alice@example.com"}
        assert client.delete(URL, params=params).status_code == 400


def test_out_of_range_epoch(client, baby):
    r = client.post(URL, json={"type": "sleep", "startTime": 1e20})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid startTime format"}


@pytest.mark.parametrize("entry_type", ["biberon", "bath"])
def test_list_unmatched_type_is_empty(client, entries, entry_type):
    body = client.get(URL, params={"email": "alice@example.com", "type": entry_type}).json()
    assert body["entries"] == []
    assert body["total"] == 0
