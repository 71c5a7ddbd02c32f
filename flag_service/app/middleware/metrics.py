"""Metrics middleware for HTTP request instrumentation with trace correlation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from flag_service.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import Request, Response

# Label for requests no route matched, keeping 404 scans out of the label space
UNMATCHED_ENDPOINT = "<unmatched>"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics, linked to traces via exemplars.

    - Request counts and durations labelled by route path template
      (``/flags/{key}`` rather than ``/flags/checkout``)
    - In-progress gauge kept accurate with try/finally
    - ``X-Process-Time`` response header with the handler duration
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        method = request.method
        http_requests_in_progress.labels(method=method).inc()

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = f"{time.perf_counter() - start_time:.6f}"
            return response
        finally:
            duration = time.perf_counter() - start_time

            # The router stores the matched route in the shared scope
            route = request.scope.get("route")
            endpoint = getattr(route, "path", None) or UNMATCHED_ENDPOINT

            span = trace.get_current_span()
            ctx = span.get_span_context() if span else None
            exemplar = (
                {"trace_id": format(ctx.trace_id, "032x")}
                if ctx is not None and ctx.is_valid
                else None
            )

            http_request_duration_seconds.labels(
                method=method, endpoint=endpoint,
            ).observe(duration, exemplar=exemplar)
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=str(status_code),
            ).inc(exemplar=exemplar)

            http_requests_in_progress.labels(method=method).dec()
