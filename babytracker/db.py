from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import settings

DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    DATABASE_URL,
    echo=settings.DATABASE_ECHO,   # DATABASE_ECHO=1 to print SQL
    future=True,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
    expire_on_commit=False
)


def camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


class Base(DeclarativeBase):
    """ORM base for every model."""

    def to_dict(self) -> dict[str, Any]:
        """Column values keyed in camelCase, the way the web client expects them."""
        return {camel(attr.key): getattr(self, attr.key) for attr in inspect(self).mapper.column_attrs}


@contextmanager
def db_session() -> Iterator[Session]:
    """
    Session scope for one unit of work:
    - commit when the block succeeds
    - rollback on any exception (re-raised)
    - always close
    """
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
