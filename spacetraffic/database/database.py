"""SQLite engine and session management for the local key/value store."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def create_store_engine(url: str) -> Engine:
    """Engine for a SQLite URL; in-memory URLs share one connection."""
    kwargs: dict = {"connect_args": {"check_same_thread": False}, "echo": False}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    else:
        path = url.removeprefix("sqlite:///")
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, **kwargs)

    # Enable WAL mode for better concurrent read performance
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_db(engine: Engine) -> sessionmaker[Session]:
    """Create all tables and return a session factory bound to ``engine``."""
    from spacetraffic.database import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


_default_engine: Optional[Engine] = None


def get_default_engine() -> Engine:
    """Engine at the configured data directory, created on first use."""
    global _default_engine
    if _default_engine is None:
        from spacetraffic.utils.config import get_settings
        _default_engine = create_store_engine(get_settings().local_store_url)
    return _default_engine
