"""Middleware configuration for FastAPI application.

Execution order (outermost first):

1. Request ID: binds ``request_id`` into the logging context so every
   downstream record, including the exception handlers', carries it
2. Metrics: request counts, durations and ``X-Process-Time``
3. CORS: permissive by default, narrowed via ``APP_CORS_*``

Starlette runs the last added middleware first, so they are added in
reverse.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from flag_service.app.middleware.base import HeaderContextMiddleware, generate_uuid
from flag_service.app.middleware.metrics import MetricsMiddleware
from flag_service.app.middleware.request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from flag_service.core.settings import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "HeaderContextMiddleware",
    "MetricsMiddleware",
    "RequestIDMiddleware",
    "configure_middleware",
    "generate_uuid",
]


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Install the middleware stack on ``app``."""
    app_settings = settings.app

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
        expose_headers=["X-Request-ID", "X-Process-Time"],
        max_age=3600,
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    logger.debug(
        "Middleware configured",
        extra={"cors_origins": app_settings.cors_origins},
    )
