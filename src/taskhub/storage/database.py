"""Async SQLAlchemy engine and session factory.

Works with any async SQLAlchemy dialect:
- PostgreSQL + asyncpg (production)
- SQLite + aiosqlite (development / CI)

Example
-------
.. code-block:: python

    db = Database("sqlite+aiosqlite:///:memory:")
    await db.initialize()
    async with db.session_factory() as session:
        ...
    await db.close()
"""
from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskhub.storage.models import Base
from taskhub.utils.db_compat import detect_dialect, engine_options

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and hands out one session per unit of work."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ) -> None:
        self.dialect = dialect = detect_dialect(database_url)
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            **engine_options(
                database_url, pool_size=pool_size, max_overflow=max_overflow, echo=echo
            ),
        )
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database dialect=%s pool_size=%d", dialect.value, pool_size)

    async def initialize(self) -> None:
        """Create all tables if they do not exist (idempotent)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database closed")


__all__ = ["Database"]
