"""Helper functions for recording operational metrics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flag_service.infra.metrics import prometheus

if TYPE_CHECKING:
    from flag_service.features.featureflags.evaluation import EvaluationResult

logger = logging.getLogger(__name__)


def track_error(
    error_type: str,
    endpoint: str,
    status_code: int,
    extra: dict[str, Any] | None = None,
) -> None:
    """Track a handled application error.

    Example:
        track_error("flag-not-found", "/flags/{key}", 404)
    """
    prometheus.errors_total.labels(
        error_type=error_type,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()
    logger.debug(
        "Tracked error: %s",
        error_type,
        extra={"endpoint": endpoint, "status_code": status_code, **(extra or {})},
    )


def track_validation_error(endpoint: str, field: str) -> None:
    """Track a request validation error for a specific field."""
    prometheus.validation_errors_total.labels(endpoint=endpoint, field=field).inc()


def track_unhandled_exception(exception_type: str, endpoint: str) -> None:
    """Track an exception that reached the catch-all handler."""
    prometheus.exceptions_unhandled_total.labels(
        exception_type=exception_type,
        endpoint=endpoint,
    ).inc()


def track_evaluation(result: EvaluationResult, *, enabled: bool, duration: float) -> None:
    """Record the outcome and latency of one flag evaluation.

    Args:
        result: Evaluator output.
        enabled: Whether the evaluated flag was enabled, to tell a disabled
            flag apart from a gate miss.
        duration: Seconds spent in the evaluator.
    """
    if result.matched:
        outcome = "matched"
    elif not enabled:
        outcome = "disabled"
    else:
        outcome = "not_matched"

    prometheus.flag_evaluations_total.labels(outcome=outcome).inc()
    prometheus.flag_evaluation_duration_seconds.observe(duration)
    if result.variant is not None:
        prometheus.flag_variant_assignments_total.inc()


def track_unknown_flag() -> None:
    """Record an evaluation request for a flag that does not exist."""
    prometheus.flag_evaluations_total.labels(outcome="unknown").inc()


def track_flag_write(operation: str) -> None:
    """Record a flag create, update or delete."""
    prometheus.flag_writes_total.labels(operation=operation).inc()


def set_app_info(service_name: str, version: str, environment: str) -> None:
    """Publish static application info."""
    prometheus.app_info.info(
        {"service": service_name, "version": version, "environment": environment},
    )


__all__ = [
    "set_app_info",
    "track_error",
    "track_evaluation",
    "track_flag_write",
    "track_unhandled_exception",
    "track_unknown_flag",
    "track_validation_error",
]
