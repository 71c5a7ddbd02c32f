"""Database settings.

The service stores flag records through SQLAlchemy's async engine. SQLite via
aiosqlite is the default; any async SQLAlchemy URL works.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables use DB_ prefix; ``DATABASE_URL`` is also accepted
    for the connection URL.

    Example: DATABASE_URL=sqlite+aiosqlite:///./flags.db
    """

    url: str = Field(
        default="sqlite+aiosqlite:///./flags.db",
        min_length=1,
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
        description="Async SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Log emitted SQL statements")
    create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup",
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Test connections for liveness before use",
    )

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Whether the configured backend is SQLite."""
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def is_memory(self) -> bool:
        """Whether the configured backend is an in-memory SQLite database."""
        return self.is_sqlite and ":memory:" in self.url

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )
