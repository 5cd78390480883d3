"""Centralized SQLAlchemy engine/session helpers for the ledger database.

Usage
-----
from ledger_db.client import session_scope

with session_scope(database_url=url) as s:
    s.execute(...)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.ledger import Base

# One engine (and session factory) per database URL. A local ledger may point
# at several SQLite files over the life of a process (tests, backups), so the
# cache is keyed rather than global.
_ENGINES: dict[str, Engine] = {}
_SESSION_MAKERS: dict[str, sessionmaker[Session]] = {}


def resolve_database_url(override: str | None = None) -> str:
    """Resolve the database URL from ``override`` or the environment.

    ``LEDGER_DATABASE_URL`` takes precedence over the generic ``DATABASE_URL``.
    """

    url = override or os.getenv("LEDGER_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "LEDGER_DATABASE_URL is not set; cannot initialize database client"
        )
    return url


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the shared engine for the resolved URL, creating it on first use."""

    url = resolve_database_url(database_url)
    engine = _ENGINES.get(url)
    if engine is None:
        engine = create_engine(url, pool_pre_ping=True)
        _ENGINES[url] = engine
        _SESSION_MAKERS[url] = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
    return engine


def get_session(*, database_url: str | None = None) -> Session:
    """Return a new SQLAlchemy session bound to the shared engine."""

    url = resolve_database_url(database_url)
    get_engine(database_url=url)
    return _SESSION_MAKERS[url]()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_schema(*, database_url: str | None = None) -> None:
    """Create the ledger tables when missing (idempotent)."""

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


def dispose_engines() -> None:
    """Dispose every cached engine; used by tests to release SQLite files."""

    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()
    _SESSION_MAKERS.clear()


__all__ = [
    "resolve_database_url",
    "get_engine",
    "get_session",
    "session_scope",
    "init_schema",
    "dispose_engines",
]
