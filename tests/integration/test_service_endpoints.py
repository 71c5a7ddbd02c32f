"""Integration tests for the health and metrics endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "test-service"
    assert data["environment"] == "test"
    assert isinstance(data["version"], str)
    assert isinstance(data["timestamp"], str)


async def test_liveness(client: AsyncClient):
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["alive"] is True


async def test_readiness_checks_database(client: AsyncClient):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["ready"] is True
    assert data["checks"]["database"] is True


async def test_metrics_exposition(client: AsyncClient):
    await client.post("/flags", json={"key": "checkout", "enabled": True})
    await client.post("/evaluate", json={"key": "checkout", "user_id": "alice"})

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    body = response.text
    assert "flag_evaluations_total" in body
    assert "http_requests_total" in body
    assert 'endpoint="/evaluate"' in body


async def test_metrics_not_in_openapi(client: AsyncClient):
    schema = (await client.get("/openapi.json")).json()

    assert "/metrics" not in schema["paths"]
    assert "/flags" in schema["paths"]
    assert "/evaluate" in schema["paths"]


async def test_readiness_503_when_database_down(app, client: AsyncClient):
    from flag_service.features.health.service import HealthService, get_health_service

    class DownHealthService(HealthService):
        async def check_database(self) -> bool:
            return False

    app.dependency_overrides[get_health_service] = DownHealthService

    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["ready"] is False
    assert response.json()["checks"] == {"database": False}
