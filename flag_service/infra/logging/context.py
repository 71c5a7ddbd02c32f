"""Context management for structured logging.

Request-scoped fields (``request_id``, ``flag_key`` ...) are kept in a
contextvar and copied onto every log record by ``ContextInjectingFilter``,
so log calls never have to pass them explicitly. Each asyncio task gets its
own copy of the context.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

from opentelemetry import trace

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        set_log_context(request_id="abc-123", path="/evaluate")
        logger.info("Evaluating flag")  # record carries request_id and path
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the current logging context."""
    _log_context.set({})


class ContextInjectingFilter(logging.Filter):
    """Copy contextvar fields and the active trace ids onto each record.

    Installed on the queue handler, so it runs in the thread that emitted
    the record, before the record crosses to the listener thread where the
    caller's context is no longer visible.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)

        if not hasattr(record, "trace_id"):
            span = trace.get_current_span()
            ctx = span.get_span_context() if span else None
            if ctx is not None and ctx.is_valid:
                record.trace_id = format(ctx.trace_id, "032x")
                record.span_id = format(ctx.span_id, "016x")

        return True


__all__ = [
    "ContextInjectingFilter",
    "clear_log_context",
    "get_log_context",
    "set_log_context",
]
