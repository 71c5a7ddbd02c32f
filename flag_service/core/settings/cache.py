"""Flag record cache settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlagCacheSettings(BaseSettings):
    """In-process read-through cache for flag records.

    Environment variables use CACHE_ prefix.
    Example: CACHE_ENABLED=false, CACHE_TTL_SECONDS=30
    """

    enabled: bool = Field(
        default=True,
        description="Serve evaluations from cached flag records",
    )
    ttl_seconds: float = Field(
        default=30.0,
        gt=0,
        description=(
            "Entry lifetime in seconds. Writes made through this process invalidate "
            "immediately; writes from other processes (CLI, other workers) become "
            "visible once the entry expires"
        ),
    )
    max_entries: int = Field(
        default=10_000,
        ge=1,
        le=1_000_000,
        description="Maximum number of cached flag records",
    )

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
