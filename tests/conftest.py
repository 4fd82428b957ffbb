from __future__ import annotations

import os
import tempfile
from pathlib import Path

# must be set before babytracker.config is imported
_TMP_DIR = Path(tempfile.mkdtemp(prefix="babytracker-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.sqlite'}"
os.environ["LOCAL_STORE_PATH"] = str(_TMP_DIR / "store.json")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from babytracker.api_main import app  # noqa: E402
from babytracker.db import Base, engine  # noqa: E402
from babytracker.seed import seed_base  # noqa: E402
from babytracker.services import upsert_baby, upsert_user  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    """Every test starts from empty tables plus the reference seed."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    seed_base()
    yield


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user():
    return upsert_user({"id": "user-1", "email": "alice@example.com", "first_name": "Alice", "last_name": "Martin"})


@pytest.fixture()
def other_user():
    return upsert_user({"id": "user-2", "email": "bob@example.com", "first_name": "Bob", "last_name": "Durand"})


@pytest.fixture()
def baby(user):
    return upsert_baby(baby_id="baby-1", name="Léa", birth_date="2026-01-01T00:00:00Z", user_id=user["id"], gender="girl")
