"""Feature flag database models."""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from flag_service.core.database.base import Base, IntegerPKMixin, TimestampMixin

from .evaluation import FlagRecord


class FeatureFlag(Base, IntegerPKMixin, TimestampMixin):
    """Stored flag configuration.

    Attributes:
        key: Unique flag identifier (e.g., "new-ui").
        enabled: Global on/off switch.
        variants: Variant name to non-negative integer weight, or NULL.
        rollout: Percentage (0-100) of identified users the flag applies to,
            or NULL for no gating.
    """

    __tablename__ = "flags"
    __table_args__ = (
        CheckConstraint(
            "rollout IS NULL OR (rollout >= 0 AND rollout <= 100)",
            name="rollout_range",
        ),
    )

    key: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # none_as_null stores Python None as SQL NULL rather than JSON 'null'
    variants: Mapped[dict[str, int] | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
    )
    rollout: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def to_record(self) -> FlagRecord:
        """Snapshot this row as an immutable evaluator input."""
        return FlagRecord(
            key=self.key,
            enabled=self.enabled,
            rollout=self.rollout,
            variants=dict(self.variants) if self.variants is not None else None,
        )

    def __repr__(self) -> str:
        return (
            f"<FeatureFlag(key={self.key!r}, enabled={self.enabled}, "
            f"rollout={self.rollout}, variants={self.variants})>"
        )


__all__ = ["FeatureFlag"]
