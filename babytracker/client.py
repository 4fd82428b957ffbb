"""
Client side of the tracker, used by the Streamlit dashboard and the CLI:

- ApiClient:      thin requests wrapper over the REST API
- LiveDataPoller: re-fetches the live-data endpoint on an interval and on demand
- LocalStore:     JSON-file key/value persistence (last write wins)
- AppState:       current user / baby selection, persisted in a LocalStore
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable

import requests

from .config import settings

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    def __init__(self, base_url: str | None = None, timeout: float = 10, session: Any = None):
        self.base_url = (base_url or settings.API_BASE).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, params: dict | None = None, payload: Any = None) -> Any:
        r = self.session.request(
            method,
            f"{self.base_url}{path}",
            params={k: v for k, v in (params or {}).items() if v is not None},
            json=payload,
            headers={"Cache-Control": "no-cache"},
            timeout=self.timeout,
        )
        if r.status_code >= 400:
            try:
                message = r.json().get("error") or r.reason
            except ValueError:
                message = r.text or r.reason
            raise ApiError(r.status_code, message)
        return r.json()

    def get(self, path: str, params: dict | None = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: dict) -> Any:
        return self._request("POST", path, payload=payload)

    def put(self, path: str, payload: dict) -> Any:
        return self._request("PUT", path, payload=payload)

    def delete(self, path: str, params: dict | None = None) -> Any:
        return self._request("DELETE", path, params=params)

    # Users / babies
    def lookup_user(self, email: str, old_user_id: str | None = None) -> dict:
        payload: dict[str, Any] = {"email": email}
        if old_user_id:
            payload["oldUserData"] = {"id": old_user_id}
        return self.post("/api/user/lookup", payload)

    def save_user(self, user: dict) -> dict:
        return self.post("/api/users", user)["user"]

    def profile(self, email: str) -> dict:
        return self.get("/api/user/profile", {"email": email})

    def save_baby(self, baby: dict) -> dict:
        return self.post("/api/babies", baby)["baby"]

    # Tracking entries
    def add_entry(self, baby_id: str, entry: dict) -> dict:
        return self.post(f"/api/babies/{baby_id}/entries", entry)["entry"]

    def entries(self, baby_id: str, email: str, **filters: Any) -> dict:
        return self.get(f"/api/babies/{baby_id}/entries", {"email": email, **filters})

    def update_entry(self, baby_id: str, entry_id: str, entry_type: str, email: str, **changes: Any) -> dict:
        payload = {"entryId": entry_id, "type": entry_type, "userEmail": email, **changes}
        return self.put(f"/api/babies/{baby_id}/entries", payload)["updatedEntry"]

    def delete_entry(self, baby_id: str, entry_id: str, entry_type: str, email: str) -> dict:
        params = {"entryId": entry_id, "type": entry_type, "email": email}
        return self.delete(f"/api/babies/{baby_id}/entries", params)["deletedEntry"]

    def live_data(self, baby_id: str, email: str) -> dict:
        return self.get(f"/api/babies/{baby_id}/live-data", {"email": email})

    # Health
    def vaccines(self, baby_id: str) -> list[dict]:
        return self.get("/api/health/vaccines", {"babyId": baby_id})

    def create_vaccine_schedule(self, baby_id: str) -> dict:
        return self.post("/api/health/vaccines/schedule", {"babyId": baby_id})

    def health_summary(self, baby_id: str) -> dict:
        return self.get("/api/health/summary", {"babyId": baby_id})


class LiveDataPoller:
    """
    Keeps the latest live-data snapshot of one baby.

    A background thread calls `refresh()` every `interval` seconds until
    `stop()`; `refresh()` can also be called directly (e.g. right after an
    entry was saved). A failed fetch keeps the previous snapshot and records
    the error message.
    """

    def __init__(
        self,
        client: ApiClient,
        baby_id: str,
        email: str,
        interval: float | None = None,
        on_update: Callable[[dict], None] | None = None,
    ):
        self.client = client
        self.baby_id = baby_id
        self.email = email
        self.interval = settings.LIVE_DATA_POLL_SECONDS if interval is None else interval
        self.on_update = on_update

        self.data: dict | None = None
        self.error: str | None = None
        self.loading = False

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def refresh(self) -> dict | None:
        with self._lock:
            self.loading = True
            self.error = None
            try:
                data = self.client.live_data(self.baby_id, self.email)
            except (ApiError, requests.RequestException) as e:
                logger.warning("Live data refresh failed for baby %s: %s", self.baby_id, e)
                self.error = str(e)
                return self.data
            finally:
                self.loading = False

            self.data = data
            stats = data["liveData"]["stats"]
            logger.debug(
                "Live data updated: %d feedings, %d sleeps, %d diapers",
                stats["feedingCount"],
                stats["sleepCount"],
                stats["diaperCount"],
            )

        if self.on_update:
            self.on_update(data)
        return data

    def _run(self) -> None:
        self.refresh()
        while not self._stop.wait(self.interval):
            self.refresh()

    def start(self) -> "LiveDataPoller":
        if self._thread is None or not self._thread.is_alive():
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name=f"live-data-{self.baby_id}", daemon=True)
            self._thread.start()
        return self

    def stop(self, timeout: float | None = 5) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> "LiveDataPoller":
        return self.start()

    def __exit__(self, *exc: Any) -> None:
        self.stop()


class LocalStore:
    """Key/value pairs kept in one JSON file. Read or write failures are logged, never raised."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else settings.LOCAL_STORE_PATH
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        try:
            with self._lock:
                return self._load().get(key, default)
        except (OSError, ValueError) as e:
            logger.error("Error reading local store key %r: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            with self._lock:
                try:
                    data = self._load()
                except ValueError:
                    # corrupted file: start over
                    data = {}
                data[key] = value
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp = self.path.with_suffix(self.path.suffix + ".tmp")
                tmp.write_text(json.dumps(data, ensure_ascii=False, default=str), encoding="utf-8")
                tmp.replace(self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving local store key %r: %s", key, e)
            return False


STATE_KEY = "babytracker-state"


class AppState:
    """
    Small observable state holder: listeners are called with the new state
    after every `update()`, and the state is persisted in a LocalStore under
    `key` (one key per client when several share the same store).
    """

    DEFAULTS: dict[str, Any] = {"userEmail": None, "userId": None, "currentBabyId": None, "settings": {}}

    def __init__(self, store: LocalStore | None = None, key: str = STATE_KEY):
        self.store = store or LocalStore()
        self.key = key
        self._state: dict[str, Any] = {**self.DEFAULTS, **(self.store.get(self.key) or {})}
        self._listeners: list[Callable[[dict[str, Any]], None]] = []

    def __getitem__(self, key: str) -> Any:
        return self._state.get(key)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._state)

    def subscribe(self, listener: Callable[[dict[str, Any]], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes: Any) -> None:
        self._state.update(changes)
        self.store.set(self.key, self._state)
        for listener in list(self._listeners):
            listener(self.snapshot())

    def reset(self) -> None:
        self._state = dict(self.DEFAULTS)
        self.store.set(self.key, self._state)
        for listener in list(self._listeners):
            listener(self.snapshot())
