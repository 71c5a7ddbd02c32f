"""Value types consumed and produced by the flag evaluator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable


class FlagContractError(ValueError):
    """A flag record reached evaluation without satisfying its invariants.

    Raised for records that bypassed write-path validation, such as rows
    edited directly in the database. Not an ``AppException``: the API
    renders it as a 500.
    """


@dataclass(frozen=True, slots=True)
class FlagRecord:
    """Immutable snapshot of a feature flag, as seen by the evaluator.

    Attributes:
        key: Unique, non-empty flag key.
        enabled: Global on/off switch.
        rollout: Percentage of identified users (0-100) the flag is active for.
            ``None`` means no gating: every caller passes.
        variants: Variant name to non-negative integer weight. ``None`` or an
            empty mapping means the flag has no variants.
    """

    key: str
    enabled: bool
    rollout: int | None = None
    variants: Mapping[str, int] | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.key:
            msg = "flag key must be a non-empty string"
            raise FlagContractError(msg)
        if self.rollout is not None and (
            not isinstance(self.rollout, int)
            or isinstance(self.rollout, bool)
            or not 0 <= self.rollout <= 100
        ):
            msg = f"rollout for '{self.key}' must be an integer within [0, 100], got {self.rollout!r}"
            raise FlagContractError(msg)
        if self.variants is not None:
            for name, weight in self.variants.items():
                if not isinstance(weight, int) or isinstance(weight, bool) or weight < 0:
                    msg = (
                        f"variant '{name}' of '{self.key}' must have a non-negative "
                        f"integer weight, got {weight!r}"
                    )
                    raise FlagContractError(msg)
            # Private read-only copy
            object.__setattr__(self, "variants", MappingProxyType(dict(self.variants)))

    @property
    def has_variants(self) -> bool:
        """Whether at least one variant is configured."""
        return bool(self.variants)

    def sorted_variants(self) -> Iterable[tuple[str, int]]:
        """Variant entries in canonical (name-sorted) order."""
        if not self.variants:
            return ()
        return sorted(self.variants.items())


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of evaluating one flag for one identifier.

    Attributes:
        key: Echo of the evaluated flag key.
        matched: True when the flag is enabled and the rollout gate passed.
        variant: Selected variant name, only set when matched.
    """

    key: str
    matched: bool
    variant: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "matched": self.matched, "variant": self.variant}


__all__ = ["EvaluationResult", "FlagContractError", "FlagRecord"]
