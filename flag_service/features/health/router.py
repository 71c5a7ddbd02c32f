"""Health check API endpoints.

- ``/health``: basic status, always 200 while the process serves requests
- ``/health/live``: liveness check
- ``/health/ready``: readiness check, 503 when the database is unreachable
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from flag_service.features.health.schemas import (
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)

# Runtime import so FastAPI can resolve the Annotated[..., Depends(...)] metadata
from flag_service.features.health.service import HealthServiceDep  # noqa: TC001

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse, summary="Service health")
async def health_check(service: HealthServiceDep) -> HealthResponse:
    """Basic health check."""
    return HealthResponse(**await service.check_health())


@router.get("/live", response_model=LivenessResponse, summary="Liveness check")
async def liveness_check(service: HealthServiceDep) -> LivenessResponse:
    """Liveness check: the process is up and serving."""
    return LivenessResponse(**await service.liveness())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable"}},
    summary="Readiness check",
)
async def readiness_check(response: Response, service: HealthServiceDep) -> ReadinessResponse:
    """Readiness check: the database is reachable."""
    result = await service.readiness()
    if not result["ready"]:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(**result)
