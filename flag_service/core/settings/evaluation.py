"""Flag evaluation settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AnonymousVariant = Literal["first_bucket", "none"]


class EvaluationSettings(BaseSettings):
    """Evaluation behavior that is a deployment decision rather than flag data.

    Environment variables use EVAL_ prefix.
    Example: EVAL_ANONYMOUS_VARIANT=none
    """

    anonymous_variant: AnonymousVariant = Field(
        default="first_bucket",
        description=(
            "Variant pick for callers without an identifier: 'first_bucket' assigns "
            "the first weighted variant by name, 'none' assigns no variant"
        ),
    )

    @field_validator("anonymous_variant", mode="before")
    @classmethod
    def normalize_policy(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower().replace("-", "_")
        return v

    model_config = SettingsConfigDict(
        env_prefix="EVAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
