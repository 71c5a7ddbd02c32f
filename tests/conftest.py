"""Pytest configuration and shared fixtures.

Organization:
    - Environment: point every settings loader at an in-memory database
    - Database Fixtures: SQLAlchemy engine and session
    - Application Fixtures: FastAPI app and HTTP client
    - Feature Flag Fixtures: service, cache and evaluator
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from flag_service.features.featureflags.service import FeatureFlagService
    from flag_service.infra.cache import FlagRecordCache

# Run against an isolated in-memory store with quiet plain-text logs
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_SERVICE_NAME", "test-service")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FILE_ENABLED", "false")


@pytest.fixture(autouse=True)
def _reset_settings() -> None:
    """Reload settings from the environment for every test."""
    from flag_service.core.settings import clear_settings_cache
    from flag_service.features.featureflags.dependencies import get_flag_evaluator

    clear_settings_cache()
    get_flag_evaluator.cache_clear()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Async engine on a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session with all tables created.

    Example:
        async def test_create_flag(db_session):
            db_session.add(FeatureFlag(key="checkout", enabled=True))
            await db_session.commit()
    """
    from flag_service.core.database.base import Base
    from flag_service.features.featureflags import models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Feature Flag Fixtures
# ============================================================================


@pytest.fixture
def flag_cache() -> FlagRecordCache:
    from flag_service.infra.cache import FlagRecordCache

    return FlagRecordCache(max_entries=100)


@pytest.fixture
def flag_service(db_session: AsyncSession) -> FeatureFlagService:
    """Service without a cache, reading the database on every evaluation."""
    from flag_service.features.featureflags.service import FeatureFlagService

    return FeatureFlagService(db_session)


@pytest.fixture
def cached_flag_service(db_session: AsyncSession, flag_cache: FlagRecordCache) -> FeatureFlagService:
    from flag_service.features.featureflags.service import FeatureFlagService

    return FeatureFlagService(db_session, cache=flag_cache)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app() -> AsyncGenerator[FastAPI]:
    """FastAPI application backed by a fresh in-memory database.

    httpx does not run the lifespan, so the database and cache are set up
    here the way startup would.
    """
    from flag_service.app.main import create_app
    from flag_service.infra.cache import set_flag_cache
    from flag_service.infra.database import close_database, init_database

    await close_database()
    set_flag_cache(None)
    await init_database(create_tables=True)
    try:
        yield create_app()
    finally:
        set_flag_cache(None)
        await close_database()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the application.

    Example:
        async def test_health_check(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
