"""Unified settings composition for convenient access.

Composes all domain-specific settings into a single object. This is purely
additive and does not replace the modular get_*_settings() functions.

Usage:
    from flag_service.core.settings import get_settings

    settings = get_settings()
    print(settings.app.port)
    print(settings.db.url)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .app import AppSettings
from .cache import FlagCacheSettings
from .database import DatabaseSettings
from .evaluation import EvaluationSettings
from .logs import LoggingSettings


class Settings(BaseSettings):
    """Unified settings composing all domain settings.

    Each nested settings class still loads from its own environment prefix
    (APP_, DB_, LOG_, CACHE_, EVAL_), not from a unified prefix.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cache: FlagCacheSettings = Field(default_factory=FlagCacheSettings)
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get unified settings instance (cached).

    Returns:
        Settings: Unified settings with all domain configurations.
    """
    return Settings()
