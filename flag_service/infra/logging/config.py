"""Logging configuration setup.

Production logging built from:
- dictConfig for the root logger and formatter definitions
- QueueHandler + QueueListener so handler I/O never blocks the event loop
- ContextInjectingFilter on the queue handler for request-scoped fields
- JSONL output for machine parsing, plain text for local development
"""

from __future__ import annotations

import atexit
import logging
import logging.config
import time
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from .context import ContextInjectingFilter
from .formatters import JSONFormatter

if TYPE_CHECKING:
    from flag_service.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_atexit_registered = False
_LOGGING_INITIALIZED = False

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def complete(max_wait: float = 5.0) -> None:
    """Block until queued log records have been handed to their handlers.

    Args:
        max_wait: Upper bound in seconds on how long to wait.
    """
    if _log_queue is None or _listener is None:
        return

    start = time.monotonic()
    while not _log_queue.empty() and (time.monotonic() - start) < max_wait:
        time.sleep(0.01)


def shutdown() -> None:
    """Flush pending records and stop the QueueListener.

    Registered with atexit; safe to call more than once.
    """
    global _log_queue, _listener

    if _listener is not None:
        complete()
        _listener.stop()
        _listener = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Configure logging once across entrypoints (API server and CLI).

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from flag_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    log_config = log_settings.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    console_level: str | None = None,
    file_level: str | None = None,
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    include_function_name: bool = False,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "flag-service",
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All handlers hang off a QueueListener; the root logger gets a single
    QueueHandler, and application loggers propagate up to it.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        console_level: Console handler level. If None, uses log_level.
        file_level: File handler level. If None, uses log_level.
        file_path: Path to log file. None disables file logging.
        json_logs: Emit JSONL instead of plain text.
        console_enabled: Enable console/stderr logging.
        include_context: Install ContextInjectingFilter.
        capture_warnings: Forward Python warnings to logging system.
        include_function_name: Include function name in records.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        service_name: Static ``service`` field on JSON records.
        **kwargs: Ignored extra settings.

    Example:
        from flag_service.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    global _log_queue, _listener, _atexit_registered

    # Reconfiguring must not leave a second listener thread running
    shutdown()

    if capture_warnings:
        logging.captureWarnings(True)

    resolved_path = Path(file_path) if file_path else None
    if resolved_path:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(_build_dict_config(log_level))

    handlers = _build_handlers(
        console_enabled=console_enabled,
        console_level=console_level or log_level,
        file_path=resolved_path,
        file_level=file_level or log_level,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
        json_logs=json_logs,
        include_function_name=include_function_name,
        service_name=service_name,
    )

    _log_queue = Queue()
    queue_handler = QueueHandler(_log_queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())

    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        logging.getLogger().addHandler(queue_handler)
        if not _atexit_registered:
            atexit.register(shutdown)
            _atexit_registered = True

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))


def _build_dict_config(log_level: str) -> dict[str, Any]:
    """Build the dictConfig dict for the root and library loggers."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "root": {
            "level": log_level.upper(),
            # Handlers are attached through the queue after dictConfig runs
            "handlers": [],
        },
        "loggers": {
            # Per-request access lines; request counts live in /metrics
            "uvicorn.access": {"level": "WARNING"},
            "aiosqlite": {"level": "WARNING"},
        },
    }


def _build_handlers(
    console_enabled: bool,
    console_level: str,
    file_path: Path | None,
    file_level: str,
    file_max_bytes: int,
    file_backup_count: int,
    json_logs: bool,
    include_function_name: bool,
    service_name: str,
) -> list[logging.Handler]:
    """Create the real handlers that the QueueListener fans records out to."""
    handlers: list[logging.Handler] = []

    def make_formatter() -> logging.Formatter:
        if json_logs:
            return JSONFormatter(
                fmt_keys=_json_fmt_keys(include_function_name),
                static={"service": service_name},
            )
        return logging.Formatter(fmt=_text_format(include_function_name), datefmt=TEXT_DATEFMT)

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level.upper())
        console_handler.setFormatter(make_formatter())
        handlers.append(console_handler)

    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level.upper())
        file_handler.setFormatter(make_formatter())
        handlers.append(file_handler)

    return handlers


def _json_fmt_keys(include_function_name: bool) -> dict[str, str]:
    fmt_keys = {"level": "levelname", "logger": "name", "message": "message"}
    if include_function_name:
        fmt_keys["function"] = "funcName"
    return fmt_keys


def _text_format(include_function_name: bool) -> str:
    if include_function_name:
        return "%(asctime)s - %(levelname)s - %(name)s - %(funcName)s - %(message)s"
    return TEXT_FORMAT


__all__ = ["complete", "configure_logging", "setup_logging", "shutdown"]
