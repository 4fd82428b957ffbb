from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]


class Settings:
    """Settings read from the environment (or a .env file)."""

    # SQLite file in the project root unless DATABASE_URL is set
    DATABASE_URL: str = os.getenv("DATABASE_URL") or f"sqlite:///{PROJECT_ROOT / 'babytracker.sqlite'}"
    DATABASE_ECHO: bool = _env_bool("DATABASE_ECHO")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    CORS_ORIGINS: list[str] = _env_list("CORS_ORIGINS", "*")

    # Client (Streamlit / poller)
    API_BASE: str = os.getenv("API_BASE", "http://127.0.0.1:8000")
    LIVE_DATA_POLL_SECONDS: float = float(os.getenv("LIVE_DATA_POLL_SECONDS", "30"))
    LOCAL_STORE_PATH: Path = Path(os.getenv("LOCAL_STORE_PATH", str(PROJECT_ROOT / ".babytracker_store.json")))


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
