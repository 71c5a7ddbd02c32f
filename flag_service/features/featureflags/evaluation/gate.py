"""Rollout percentage gate."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .hashing import gate_bucket

if TYPE_CHECKING:
    from .types import FlagRecord


def passes_gate(flag: FlagRecord, identifier: str | None) -> bool:
    """Decide whether an identifier falls inside the flag's rollout.

    - No rollout configured: always passes.
    - Rollout configured but no identifier: fails. Anonymous traffic has no
      stable identity to bucket, so it is excluded from percentage rollouts.
    - Otherwise: passes when the gate bucket is below the rollout percentage,
      so ``0`` never passes and ``100`` always passes.

    Args:
        flag: Flag record being evaluated.
        identifier: Optional caller identity.

    Returns:
        True if the caller is inside the rollout.
    """
    if flag.rollout is None:
        return True
    if identifier is None:
        return False
    return gate_bucket(flag.key, identifier) < flag.rollout


__all__ = ["passes_gate"]
