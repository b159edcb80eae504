"""Engine and session helpers for the ledger database.

The process holds at most one engine, bound to the URL given on first use
(``database_url=`` or ``DATABASE_URL``). Asking for a different URL later is
an error until :func:`reset_engine` drops the binding; tests rely on that to
point each case at its own SQLite file.

Usage
-----
from db.client import session_scope

with session_scope() as s:
    s.add(LedgerTransaction(...))
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NamedTuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DATABASE_URL_ENV = "DATABASE_URL"


class _Binding(NamedTuple):
    url: str
    engine: Engine
    sessions: sessionmaker[Session]


_binding: _Binding | None = None


def resolve_database_url(override: str | None = None) -> str:
    """Return ``override`` or ``$DATABASE_URL``; raise when neither is set."""

    url = override or os.getenv(DATABASE_URL_ENV)
    if not url:
        raise RuntimeError(f"{DATABASE_URL_ENV} is not set and no database URL was given")
    return url


def _bind(*, database_url: str | None) -> _Binding:
    global _binding
    url = resolve_database_url(database_url)
    if _binding is None:
        # Pre-ping only matters for pooled server connections
        engine = create_engine(url, pool_pre_ping=not url.startswith("sqlite"))
        _binding = _Binding(
            url=url,
            engine=engine,
            sessions=sessionmaker(bind=engine, expire_on_commit=False, class_=Session),
        )
    elif url != _binding.url:
        raise RuntimeError(
            f"ledger engine is bound to a different database ({_binding.engine.url!r}); "
            "call reset_engine() before switching"
        )
    return _binding


def get_engine(*, database_url: str | None = None) -> Engine:
    return _bind(database_url=database_url).engine


def reset_engine() -> None:
    """Dispose the current engine, if any, and forget its URL."""

    global _binding
    if _binding is not None:
        _binding.engine.dispose()
    _binding = None


def create_schema(*, database_url: str | None = None) -> None:
    """Create the ledger tables that are missing. Postgres deployments use Alembic."""

    from .models.finance import Base

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


def get_session(*, database_url: str | None = None) -> Session:
    return _bind(database_url=database_url).sessions()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on any error."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "resolve_database_url",
    "get_engine",
    "reset_engine",
    "create_schema",
    "get_session",
    "session_scope",
]
