"""Tests for request ID propagation."""

from __future__ import annotations

from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from flag_service.app.middleware.request_id import RequestIDMiddleware
from flag_service.infra.logging.context import get_log_context


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/echo")
    async def echo(request: Request) -> dict[str, str | None]:
        return {
            "state": request.state.request_id,
            "log_context": get_log_context().get("request_id"),
        }

    return app


async def get(headers: dict[str, str] | None = None):
    transport = ASGITransport(app=build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get("/echo", headers=headers)


async def test_incoming_id_is_kept():
    response = await get({"X-Request-ID": "req-42"})

    assert response.headers["x-request-id"] == "req-42"
    assert response.json() == {"state": "req-42", "log_context": "req-42"}


async def test_missing_id_is_generated():
    response = await get()

    request_id = response.headers["x-request-id"]
    assert len(request_id) == 36
    assert response.json()["state"] == request_id


async def test_oversized_id_is_replaced():
    response = await get({"X-Request-ID": "x" * 500})

    assert response.headers["x-request-id"] != "x" * 500
    assert len(response.headers["x-request-id"]) == 36


async def test_context_cleared_after_request():
    await get({"X-Request-ID": "req-42"})

    assert "request_id" not in get_log_context()
