"""Health check endpoints."""

from __future__ import annotations

from .router import router
from .service import HealthService, get_health_service

__all__ = ["HealthService", "get_health_service", "router"]
