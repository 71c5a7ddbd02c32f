"""Application lifespan management.

Startup order:
1. Core (logging, application info metric)
2. Database (connectivity check, table creation)
3. Flag record cache

Shutdown runs in reverse.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from flag_service.core.settings import (
    get_app_settings,
    get_cache_settings,
    get_db_settings,
    get_evaluation_settings,
    get_logging_settings,
)
from flag_service.infra.cache import get_flag_cache, set_flag_cache
from flag_service.infra.database import close_database, init_database
from flag_service.infra.logging.config import complete, setup_logging
from flag_service.infra.metrics.tracking import set_app_info

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _startup_core() -> None:
    """Configure logging and publish the application info metric."""
    app = get_app_settings()

    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment},
    )

    set_app_info(app.service_name, app.version, app.environment)


async def _startup_database() -> None:
    """Open the flag store. The service cannot answer without it, so failures abort startup."""
    db = get_db_settings()
    try:
        await init_database()
    except Exception:
        logger.exception(
            "Database unavailable, failing startup",
            extra={"is_sqlite": db.is_sqlite, "is_memory": db.is_memory},
        )
        raise


async def _startup_cache() -> None:
    """Start from an empty flag record cache."""
    settings = get_cache_settings()
    set_flag_cache(None)
    cache = get_flag_cache()

    if cache is None:
        logger.info("Flag record cache disabled")
        return

    logger.info(
        "Flag record cache enabled",
        extra={"max_entries": settings.max_entries, "ttl_seconds": settings.ttl_seconds},
    )


async def _shutdown_cache() -> None:
    cache = get_flag_cache()
    if cache is not None:
        await cache.clear()
    set_flag_cache(None)


async def _shutdown_database() -> None:
    await close_database()
    logger.info("Database connection closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    _ = app

    await _startup_core()
    await _startup_database()
    await _startup_cache()

    app_settings = get_app_settings()
    logger.info(
        "Application startup complete",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
            "api_prefix": app_settings.api_prefix,
            "anonymous_variant": get_evaluation_settings().anonymous_variant,
        },
    )

    try:
        yield
    finally:
        logger.info("Application shutting down")
        await _shutdown_cache()
        await _shutdown_database()
        logger.info("Application shutdown complete")
        complete()
