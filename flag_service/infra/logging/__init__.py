"""Logging infrastructure.

Usage:
    from flag_service.infra.logging import setup_logging, set_log_context

    setup_logging()  # reads LOG_* settings
    set_log_context(request_id="abc-123")
    logging.getLogger(__name__).info("Flag evaluated", extra={"key": "checkout"})
"""

from __future__ import annotations

from .config import complete, configure_logging, setup_logging, shutdown
from .context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from .formatters import JSONFormatter
from .lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "clear_log_context",
    "complete",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
