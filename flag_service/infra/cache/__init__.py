"""Caching infrastructure."""

from __future__ import annotations

from .memory import FlagRecordCache, create_flag_cache, get_flag_cache, set_flag_cache

__all__ = ["FlagRecordCache", "create_flag_cache", "get_flag_cache", "set_flag_cache"]
