"""Shared FastAPI dependencies."""

from __future__ import annotations

from .database import get_db_session

__all__ = ["get_db_session"]
