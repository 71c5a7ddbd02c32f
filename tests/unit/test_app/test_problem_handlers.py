"""Tests for the RFC 7807 exception handlers."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
import pytest
from sqlalchemy.exc import OperationalError

from flag_service.app.exception_handlers import configure_exception_handlers
from flag_service.app.middleware.request_id import RequestIDMiddleware
from flag_service.core.exceptions import ConflictException
from flag_service.features.featureflags.evaluation import FlagRecord
from flag_service.features.featureflags.schemas import FeatureFlagCreate
from flag_service.infra.metrics import REGISTRY


def build_app() -> FastAPI:
    app = FastAPI()
    configure_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/conflict")
    async def conflict() -> None:
        raise ConflictException("taken", type="flag-exists", extra={"key": "checkout"})

    @app.get("/contract")
    async def contract() -> None:
        FlagRecord(key="checkout", enabled=True, rollout=150)

    @app.get("/database")
    async def database() -> None:
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    @app.get("/model")
    async def model() -> None:
        FeatureFlagCreate.model_validate({"key": "bad key"})

    @app.get("/boom")
    async def boom() -> None:
        msg = "secret internals"
        raise RuntimeError(msg)

    @app.get("/paged")
    async def paged(limit: int) -> dict[str, int]:
        return {"limit": limit}

    return app


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    # Starlette re-raises after the catch-all handler has responded
    transport = ASGITransport(app=build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_app_exception_rendered_with_extra(client: AsyncClient) -> None:
    response = await client.get("/conflict", headers={"X-Request-ID": "abc"})

    assert response.status_code == 409
    assert response.json() == {
        "type": "flag-exists",
        "title": "Conflict",
        "status": 409,
        "detail": "taken",
        "instance": "/conflict",
        "key": "checkout",
        "request_id": "abc",
    }


async def test_app_exception_counted(client: AsyncClient) -> None:
    labels = {"error_type": "flag-exists", "endpoint": "/conflict", "status_code": "409"}
    before = REGISTRY.get_sample_value("errors_total", labels) or 0.0

    await client.get("/conflict")

    assert REGISTRY.get_sample_value("errors_total", labels) == before + 1


async def test_flag_contract_violation_is_500(client: AsyncClient) -> None:
    response = await client.get("/contract")

    assert response.status_code == 500
    problem = response.json()
    assert problem["type"] == "flag-contract-violation"
    assert "rollout" in problem["detail"]


async def test_operational_error_is_503(client: AsyncClient) -> None:
    response = await client.get("/database")

    assert response.status_code == 503
    problem = response.json()
    assert problem["type"] == "database-unavailable"
    assert "locked" not in problem["detail"]


async def test_pydantic_error_outside_request_parsing(client: AsyncClient) -> None:
    response = await client.get("/model")

    assert response.status_code == 422
    problem = response.json()
    assert problem["type"] == "validation-error"
    assert problem["errors"][0]["field"] == "key"


async def test_request_validation_lists_fields(client: AsyncClient) -> None:
    response = await client.get("/paged", params={"limit": "many"})

    assert response.status_code == 422
    problem = response.json()
    assert problem["errors"][0]["field"] == "query.limit"
    assert problem["errors"][0]["value"] == "many"


async def test_unexpected_exception_hides_details(client: AsyncClient) -> None:
    response = await client.get("/boom")

    assert response.status_code == 500
    problem = response.json()
    assert problem["type"] == "internal-error"
    assert "secret" not in problem["detail"]
