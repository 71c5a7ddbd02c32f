"""Health check service."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from flag_service.core.settings import get_app_settings
from flag_service.infra.database import get_engine

logger = logging.getLogger(__name__)


class HealthService:
    """Liveness and readiness checks for the service and its database."""

    async def check_health(self) -> dict[str, Any]:
        settings = get_app_settings()
        return {
            "status": "ok",
            "service": settings.service_name,
            "version": settings.version,
            "environment": settings.environment,
            "timestamp": datetime.now(UTC),
        }

    async def liveness(self) -> dict[str, Any]:
        return {"alive": True}

    async def readiness(self) -> dict[str, Any]:
        """Ready when the database answers a trivial query."""
        database_ok = await self.check_database()
        return {
            "ready": database_ok,
            "checks": {"database": database_ok},
            "timestamp": datetime.now(UTC),
        }

    async def check_database(self) -> bool:
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Database readiness check failed", extra={"error": str(exc)})
            return False
        return True


def get_health_service() -> HealthService:
    """FastAPI dependency for the health service."""
    return HealthService()


HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]


__all__ = ["HealthService", "HealthServiceDep", "get_health_service"]
