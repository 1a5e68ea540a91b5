"""SQLAlchemy async engine and session management.

``Database`` owns one async engine and its session factory.  Sessions
are scoped to an ``async with`` block, committed on success and rolled
back on error.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from tradebook.core.config import StorageConfig

from .models import Base

logger = logging.getLogger(__name__)


def create_engine(
    url: str,
    *,
    pool_size: int = 5,
    echo: bool = False,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Create a new :class:`AsyncEngine`.

    Args:
        url: Database URL, normally ``postgresql+asyncpg://``.
        pool_size: Persistent connections kept in the pool.
        echo: Log every emitted SQL statement.
        use_null_pool: Disable pooling (short-lived CLI runs, tests).
    """
    kwargs: dict = {"echo": echo}
    if use_null_pool:
        kwargs["poolclass"] = NullPool
    else:
        kwargs["pool_size"] = pool_size
    engine = create_async_engine(url, **kwargs)
    logger.info("Created async engine for %s", url.split("@")[-1])
    return engine


class Database:
    """Engine + session factory for the execution store."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessions = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(cls, config: StorageConfig, *, use_null_pool: bool = False) -> Database:
        return cls(create_engine(
            config.postgres_url,
            pool_size=config.pool_size,
            echo=config.echo,
            use_null_pool=use_null_pool,
        ))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_all(self) -> None:
        """Create every table in the ORM metadata (dev/test convenience)."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created / verified.")

    async def dispose(self) -> None:
        await self._engine.dispose()
        logger.info("Engine disposed.")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session committed on success, rolled back on exception."""
        session = self._sessions()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
