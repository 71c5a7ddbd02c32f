"""Weighted variant selection."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from .hashing import variant_value

if TYPE_CHECKING:
    from .types import FlagRecord


class AnonymousVariantPolicy(StrEnum):
    """How to pick a variant when the caller supplied no identifier."""

    FIRST_BUCKET = "first_bucket"  # selection value 0: first weighted variant by name
    NONE = "none"  # matched, but no variant assigned


def select_variant(
    flag: FlagRecord,
    identifier: str | None,
    anonymous_policy: AnonymousVariantPolicy = AnonymousVariantPolicy.FIRST_BUCKET,
) -> str | None:
    """Pick a variant name in proportion to the configured weights.

    Variants are walked in name order while accumulating weights; the first
    variant whose cumulative weight strictly exceeds the selection value wins.
    Sorting makes the result independent of mapping insertion order.

    Args:
        flag: Flag record whose gate already passed.
        identifier: Optional caller identity.
        anonymous_policy: Fallback used when ``identifier`` is None.

    Returns:
        The selected variant name, or None when no variants are configured,
        all weights are zero, or the anonymous policy assigns none.
    """
    entries = list(flag.sorted_variants())
    total = sum(weight for _, weight in entries)
    if total == 0:
        return None

    if identifier is not None:
        selection = variant_value(flag.key, identifier) % total
    elif anonymous_policy is AnonymousVariantPolicy.FIRST_BUCKET:
        selection = 0
    else:
        return None

    cumulative = 0
    for name, weight in entries:
        cumulative += weight
        if selection < cumulative:
            return name

    # Unreachable: selection < total == final cumulative weight
    return None


__all__ = ["AnonymousVariantPolicy", "select_variant"]
