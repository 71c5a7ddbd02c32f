"""Health check response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic service health."""

    status: Literal["ok"] = Field(default="ok", description="Always 'ok' while the process serves requests")
    service: str = Field(description="Service name")
    version: str = Field(description="Service version")
    environment: str = Field(description="Deployment environment")
    timestamp: datetime = Field(description="Check time (UTC)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "ok",
                "service": "flag-service",
                "version": "0.1.0",
                "environment": "production",
                "timestamp": "2025-01-01T00:00:00Z",
            },
        },
    }


class LivenessResponse(BaseModel):
    """Liveness check result."""

    alive: bool = Field(description="Liveness status")


class ReadinessResponse(BaseModel):
    """Readiness check result."""

    ready: bool = Field(description="Overall readiness status")
    checks: dict[str, bool] = Field(description="Per-dependency readiness")
    timestamp: datetime = Field(description="Check time (UTC)")


__all__ = ["HealthResponse", "LivenessResponse", "ReadinessResponse"]
