"""Declarative base, model mixins and repository helpers."""

from __future__ import annotations

from .base import NAMING_CONVENTION, Base, IntegerPKMixin, TimestampMixin
from .repository import BaseRepository

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "IntegerPKMixin",
    "TimestampMixin",
]
