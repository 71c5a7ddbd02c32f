"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from flag_service.core.settings.loader import get_app_settings

    settings = get_app_settings()  # First call: loads and validates
    settings = get_app_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_app_settings.cache_clear()

    Or use clear_settings_cache() to reset every loader at once.
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .cache import FlagCacheSettings
from .database import DatabaseSettings
from .evaluation import EvaluationSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings.

    Returns:
        Validated and frozen DatabaseSettings instance.
    """
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_cache_settings() -> FlagCacheSettings:
    """Get cached flag record cache settings.

    Returns:
        Validated and frozen FlagCacheSettings instance.
    """
    return FlagCacheSettings()


@lru_cache(maxsize=1)
def get_evaluation_settings() -> EvaluationSettings:
    """Get cached evaluation settings.

    Returns:
        Validated and frozen EvaluationSettings instance.
    """
    return EvaluationSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance so the next access reloads."""
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_cache_settings.cache_clear()
    get_evaluation_settings.cache_clear()

    from .unified import get_settings

    get_settings.cache_clear()
