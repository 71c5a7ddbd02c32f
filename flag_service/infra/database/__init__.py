"""Database infrastructure: engine lifecycle and sessions."""

from __future__ import annotations

from .session import (
    close_database,
    create_engine_from_settings,
    get_async_session,
    get_engine,
    get_session_factory,
    init_database,
)

__all__ = [
    "close_database",
    "create_engine_from_settings",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "init_database",
]
