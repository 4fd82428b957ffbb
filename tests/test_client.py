from __future__ import annotations

import threading

import pytest
import requests

from babytracker.client import STATE_KEY, ApiClient, ApiError, AppState, LiveDataPoller, LocalStore


class FakeResponse:
    def __init__(self, status_code=200, body=None, reason="OK"):
        self.status_code = status_code
        self._body = body
        self.reason = reason
        self.text = "" if body is None else str(body)

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)


class TestApiClient:
    def test_drops_empty_params(self):
        session = FakeSession(FakeResponse(body={"entries": []}))
        api = ApiClient("http://api.test/", session=session)

        api.entries("baby-1", "alice@example.com", type=None, limit=5)

        method, url, kwargs = session.calls[0]
        assert method == "GET"
        assert url == "http://api.test/api/babies/baby-1/entries"
        assert kwargs["params"] == {"email": "alice@example.com", "limit": 5}
        assert kwargs["headers"]["Cache-Control"] == "no-cache"

    def test_error_message_from_body(self):
        api = ApiClient("http://api.test", session=FakeSession(FakeResponse(404, {"error": "Baby not found"}, "Not Found")))
        with pytest.raises(ApiError) as exc:
            api.live_data("nope", "alice@example.com")
        assert exc.value.status_code == 404
        assert exc.value.message == "Baby not found"

    def test_error_without_json(self):
        api = ApiClient("http://api.test", session=FakeSession(FakeResponse(502, None, "Bad Gateway")))
        with pytest.raises(ApiError, match="Bad Gateway"):
            api.vaccines("baby-1")

    def test_lookup_sends_legacy_id(self):
        session = FakeSession(FakeResponse(body={"success": True, "isNewUser": True}))
        ApiClient("http://api.test", session=session).lookup_user("a@b.c", old_user_id="old-1")
        assert session.calls[0][2]["json"] == {"email": "a@b.c", "oldUserData": {"id": "old-1"}}


def _snapshot(feedings=1):
    stats = {"feedingCount": feedings, "sleepCount": 0, "diaperCount": 0}
    return {"baby": {"id": "baby-1"}, "liveData": {"stats": stats}}


class FakeClient:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def live_data(self, baby_id, email):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class TestLiveDataPoller:
    def test_refresh_notifies(self):
        seen = []
        poller = LiveDataPoller(FakeClient(_snapshot()), "baby-1", "a@b.c", interval=60, on_update=seen.append)

        assert poller.refresh() == _snapshot()
        assert seen == [_snapshot()]
        assert poller.error is None
        assert poller.loading is False

    def test_failure_keeps_previous_data(self):
        client = FakeClient(_snapshot(), ApiError(500, "boom"), requests.ConnectionError("down"))
        poller = LiveDataPoller(client, "baby-1", "a@b.c", interval=60)

        poller.refresh()
        assert poller.refresh() == _snapshot()
        assert poller.error == "500: boom"
        assert poller.refresh() == _snapshot()
        assert "down" in poller.error

    def test_background_thread(self):
        updated = threading.Event()
        client = FakeClient(_snapshot())
        poller = LiveDataPoller(client, "baby-1", "a@b.c", interval=0.01, on_update=lambda _: updated.set())

        with poller:
            assert poller.running
            assert updated.wait(2)
        assert not poller.running
        assert client.calls >= 1


class TestLocalStore:
    def test_roundtrip(self, tmp_path):
        store = LocalStore(tmp_path / "state" / "store.json")
        assert store.get("missing", "fallback") == "fallback"
        assert store.set("theme", {"dark": True})
        assert store.set("lang", "fr")

        again = LocalStore(tmp_path / "state" / "store.json")
        assert again.get("theme") == {"dark": True}
        assert again.get("lang") == "fr"

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        store = LocalStore(path)

        assert store.get("theme", "light") == "light"
        assert store.set("theme", "dark")
        assert store.get("theme") == "dark"

    def test_unwritable_path(self, tmp_path):
        store = LocalStore(tmp_path)
        assert store.set("theme", "dark") is False
        assert store.get("theme", "light") == "light"


class TestAppState:
    def test_update_persists_and_notifies(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        state = AppState(store)
        seen = []
        unsubscribe = state.subscribe(seen.append)

        state.update(userEmail="alice@example.com", currentBabyId="baby-1")
        assert state["currentBabyId"] == "baby-1"
        assert seen[-1]["userEmail"] == "alice@example.com"
        assert store.get(STATE_KEY)["currentBabyId"] == "baby-1"

        assert AppState(store)["userEmail"] == "alice@example.com"

        unsubscribe()
        state.update(currentBabyId="baby-2")
        assert len(seen) == 1

    def test_clients_sharing_a_store(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        first = AppState(store, key=f"{STATE_KEY}:a")
        first.update(userEmail="alice@example.com")

        second = AppState(store, key=f"{STATE_KEY}:b")
        assert second["userEmail"] is None
        second.update(userEmail="bob@example.com")

        assert AppState(store, key=f"{STATE_KEY}:a")["userEmail"] == "alice@example.com"

    def test_reset(self, tmp_path):
        state = AppState(LocalStore(tmp_path / "store.json"))
        state.update(userId="user-1", settings={"theme": "dark"})
        state.reset()
        assert state.snapshot() == AppState.DEFAULTS
