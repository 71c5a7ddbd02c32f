"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/db/logging/cache/evaluation), read from
environment variables and an optional ``.env`` file, validated once and
frozen.

Import settings via cached loaders:
    from flag_service.core.settings import get_app_settings

Or use unified settings for convenient access to all domains:
    from flag_service.core.settings import get_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .app import AppSettings
from .cache import FlagCacheSettings
from .database import DatabaseSettings
from .evaluation import EvaluationSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_cache_settings,
    get_db_settings,
    get_evaluation_settings,
    get_logging_settings,
)
from .logs import LoggingSettings
from .unified import Settings, get_settings

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "EvaluationSettings",
    "FlagCacheSettings",
    "LoggingSettings",
    "Settings",
    "clear_settings_cache",
    "get_app_settings",
    "get_cache_settings",
    "get_db_settings",
    "get_evaluation_settings",
    "get_logging_settings",
    "get_settings",
]
