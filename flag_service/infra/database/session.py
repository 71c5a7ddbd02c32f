"""Database engine and session management.

The engine is created lazily from ``DatabaseSettings`` on first use, so that
importing the application never opens a connection and tests can point the
service at a different database before anything touches it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from flag_service.core.settings import get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from flag_service.core.settings.database import DatabaseSettings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine_from_settings(settings: DatabaseSettings) -> AsyncEngine:
    """Build an async engine for the configured URL.

    In-memory SQLite uses a single shared connection; otherwise every pooled
    connection would see its own empty database.
    """
    if settings.is_memory:
        return create_async_engine(
            settings.url,
            echo=settings.echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=settings.pool_pre_ping,
    )


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_engine_from_settings(get_db_settings())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Get an async database session.

    The session is closed on exit; uncommitted work is rolled back.

    Example:
        async with get_async_session() as session:
            result = await session.execute(select(FeatureFlag))
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_database(*, create_tables: bool | None = None) -> None:
    """Verify connectivity and create missing tables.

    Args:
        create_tables: Override ``DatabaseSettings.create_tables``.
    """
    settings = get_db_settings()
    should_create = settings.create_tables if create_tables is None else create_tables
    engine = get_engine()

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if should_create:
            # Models register on Base.metadata at import time
            from flag_service.core.database.base import Base
            from flag_service.features.featureflags import models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Database initialized",
        extra={"driver": engine.dialect.driver, "tables_created": should_create},
    )


async def close_database() -> None:
    """Dispose the engine and forget it, so the next use starts fresh."""
    global _engine, _session_factory
    if _engine is None:
        return

    logger.info("Closing database connection")
    await _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = [
    "close_database",
    "create_engine_from_settings",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "init_database",
]
