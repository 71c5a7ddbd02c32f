"""Feature flag schemas for API requests and responses.

These models are the write-path validation for flag records: anything that
passes them satisfies the evaluator's record invariants.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from .evaluation import EvaluationResult

# No ':' or '/', so flag keys never contain the hashing domain tags
FLAG_KEY_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"
MAX_KEY_LENGTH = 100
MAX_VARIANTS = 100

FlagKey = Annotated[
    str,
    StringConstraints(min_length=1, max_length=MAX_KEY_LENGTH, pattern=FLAG_KEY_PATTERN),
]
VariantName = Annotated[str, StringConstraints(min_length=1, max_length=100)]
VariantWeight = Annotated[int, Field(strict=True, ge=0, le=1_000_000)]
Rollout = Annotated[int, Field(strict=True, ge=0, le=100)]
Variants = Annotated[dict[VariantName, VariantWeight], Field(max_length=MAX_VARIANTS)]
Identifier = Annotated[str, StringConstraints(max_length=512)]


class FeatureFlagCreate(BaseModel):
    """Schema for creating a feature flag."""

    key: FlagKey = Field(description="Unique flag key (letters, digits, '_', '.', '-')")
    enabled: bool = Field(default=False, description="Global enabled state")
    variants: Variants | None = Field(
        default=None,
        description="Variant name to non-negative integer weight",
    )
    rollout: Rollout | None = Field(
        default=None,
        description="Percentage (0-100) of identified users; omit for no gating",
    )

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "key": "new-ui",
                "enabled": True,
                "variants": {"A": 1, "B": 1},
                "rollout": 50,
            },
        },
    )


class FeatureFlagUpdate(BaseModel):
    """Schema for partially updating a feature flag.

    Omitted fields keep their stored value. An explicit ``null`` clears
    ``variants`` or ``rollout``; ``enabled`` cannot be null.
    """

    enabled: bool | None = Field(default=None)
    variants: Variants | None = Field(default=None)
    rollout: Rollout | None = Field(default=None)

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"rollout": 100}},
    )

    @model_validator(mode="after")
    def enabled_not_null(self) -> FeatureFlagUpdate:
        if "enabled" in self.model_fields_set and self.enabled is None:
            msg = "enabled cannot be null"
            raise ValueError(msg)
        return self

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class FeatureFlagResponse(BaseModel):
    """Response schema for a feature flag."""

    id: int
    key: str
    enabled: bool
    variants: dict[str, int] | None
    rollout: int | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeatureFlagListResponse(BaseModel):
    """Response schema for listing feature flags."""

    items: list[FeatureFlagResponse]
    total: int


class FlagEvaluationRequest(BaseModel):
    """Request to evaluate one flag for an optional user."""

    key: Annotated[str, StringConstraints(min_length=1, max_length=MAX_KEY_LENGTH)]
    user_id: Identifier | None = Field(
        default=None,
        description="Caller identity; omit for anonymous evaluation ('' is a valid identity)",
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"key": "new-ui", "user_id": "user1"}},
    )


class FlagEvaluationResponse(BaseModel):
    """Result of evaluating a single flag."""

    key: str
    matched: bool
    variant: str | None = None

    @classmethod
    def from_result(cls, result: EvaluationResult) -> FlagEvaluationResponse:
        return cls(key=result.key, matched=result.matched, variant=result.variant)


class FlagBatchEvaluationRequest(BaseModel):
    """Request to evaluate several flags (or all flags) for one user."""

    user_id: Identifier | None = Field(default=None)
    keys: list[Annotated[str, StringConstraints(min_length=1, max_length=MAX_KEY_LENGTH)]] | None = Field(
        default=None,
        max_length=1000,
        description="Flags to evaluate; omit to evaluate every stored flag",
    )


class FlagBatchEvaluationResponse(BaseModel):
    """Results for a batch evaluation, in key order. Unknown keys are skipped."""

    results: list[FlagEvaluationResponse]


__all__ = [
    "FLAG_KEY_PATTERN",
    "FeatureFlagCreate",
    "FeatureFlagListResponse",
    "FeatureFlagResponse",
    "FeatureFlagUpdate",
    "FlagBatchEvaluationRequest",
    "FlagBatchEvaluationResponse",
    "FlagEvaluationRequest",
    "FlagEvaluationResponse",
]
