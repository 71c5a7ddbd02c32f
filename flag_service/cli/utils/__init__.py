"""CLI utilities for running async operations and formatting output."""

from flag_service.cli.utils.async_runner import coro
from flag_service.cli.utils.formatters import (
    echo_json,
    error,
    header,
    info,
    section,
    success,
    warning,
)

__all__ = [
    "coro",
    "echo_json",
    "error",
    "header",
    "info",
    "section",
    "success",
    "warning",
]
