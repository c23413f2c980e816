"""Engine settings per database backend.

TaskHub runs on PostgreSQL (asyncpg) in production and on SQLite (aiosqlite)
in development and tests.  The backend is read from the URL scheme and
decides how the async engine pools its connections.
"""
from __future__ import annotations

from enum import StrEnum
from typing import Any


class DbDialect(StrEnum):
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"
    MYSQL = "mysql"
    UNKNOWN = "unknown"


# scheme -> (dialect, async driver?)
_SCHEMES: dict[str, tuple[DbDialect, bool]] = {
    "postgresql": (DbDialect.POSTGRESQL, False),
    "postgresql+psycopg2": (DbDialect.POSTGRESQL, False),
    "postgresql+asyncpg": (DbDialect.POSTGRESQL, True),
    "postgresql+psycopg": (DbDialect.POSTGRESQL, True),
    "sqlite": (DbDialect.SQLITE, False),
    "sqlite+aiosqlite": (DbDialect.SQLITE, True),
    "mysql": (DbDialect.MYSQL, False),
    "mysql+aiomysql": (DbDialect.MYSQL, True),
    "mysql+asyncmy": (DbDialect.MYSQL, True),
}


def _scheme(database_url: str) -> str:
    scheme, sep, _ = database_url.strip().partition("://")
    return scheme.lower() if sep else ""


def detect_dialect(database_url: str) -> DbDialect:
    """Return the backend family named by *database_url*.

    >>> detect_dialect("sqlite+aiosqlite:///./taskhub.db")
    <DbDialect.SQLITE: 'sqlite'>
    """
    return _SCHEMES.get(_scheme(database_url), (DbDialect.UNKNOWN, True))[0]


def uses_sync_driver(database_url: str) -> bool:
    """True when the URL names a known driver that cannot run under asyncio."""
    return not _SCHEMES.get(_scheme(database_url), (DbDialect.UNKNOWN, True))[1]


def requires_static_pool(dialect: DbDialect) -> bool:
    # every new SQLite connection to :memory: opens an empty database
    return dialect == DbDialect.SQLITE


def engine_options(
    database_url: str,
    *,
    pool_size: int,
    max_overflow: int,
    echo: bool = False,
) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` on this backend.

    SQLite shares one connection through ``StaticPool`` so the schema created
    at start-up stays visible to every session.  Other backends get a
    bounded, pre-pinged pool whose connections are recycled hourly.
    """
    from sqlalchemy.pool import StaticPool

    options: dict[str, Any] = {"echo": echo}
    if requires_static_pool(detect_dialect(database_url)):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    return options


__all__ = [
    "DbDialect",
    "detect_dialect",
    "engine_options",
    "requires_static_pool",
    "uses_sync_driver",
]
