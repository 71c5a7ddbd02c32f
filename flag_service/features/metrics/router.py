"""Prometheus metrics endpoint.

Series exposed (all on the service's own registry):
    - http_requests_total, http_request_duration_seconds, http_requests_in_progress
    - flag_evaluations_total{outcome}, flag_evaluation_duration_seconds,
      flag_variant_assignments_total
    - flag_writes_total{operation}
    - flag_cache_hits_total, flag_cache_misses_total,
      flag_cache_invalidations_total{scope}, flag_cache_entries
    - errors_total, validation_errors_total, exceptions_unhandled_total
    - flag_service_info
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from flag_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose metrics in the Prometheus text format."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
