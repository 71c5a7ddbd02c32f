"""Flag evaluator: gate first, then variant."""

from __future__ import annotations

from .gate import passes_gate
from .types import EvaluationResult, FlagRecord
from .variants import AnonymousVariantPolicy, select_variant


class FlagEvaluator:
    """Stateless evaluator for flag records.

    An evaluator only carries its anonymous-variant policy; it holds no
    per-user or per-flag state, so one instance can be shared freely across
    concurrent callers.

    Example:
        evaluator = FlagEvaluator()
        flag = FlagRecord(key="new-ui", enabled=True, rollout=50,
                          variants={"A": 1, "B": 1})
        result = evaluator.evaluate(flag, "user1")
        if result.matched:
            render(result.variant)
    """

    __slots__ = ("anonymous_policy",)

    def __init__(
        self,
        anonymous_policy: AnonymousVariantPolicy = AnonymousVariantPolicy.FIRST_BUCKET,
    ) -> None:
        """Initialize the evaluator.

        Args:
            anonymous_policy: Variant fallback for calls without an identifier.
        """
        self.anonymous_policy = AnonymousVariantPolicy(anonymous_policy)

    def evaluate(self, flag: FlagRecord, identifier: str | None = None) -> EvaluationResult:
        """Evaluate a flag for an optional identifier.

        Args:
            flag: Validated flag record.
            identifier: Optional caller identity (``""`` is a valid identity).

        Returns:
            The evaluation result for this flag and identifier.
        """
        if not flag.enabled or not passes_gate(flag, identifier):
            return EvaluationResult(key=flag.key, matched=False)

        if flag.has_variants:
            variant = select_variant(flag, identifier, self.anonymous_policy)
            return EvaluationResult(key=flag.key, matched=True, variant=variant)

        return EvaluationResult(key=flag.key, matched=True)

    def __repr__(self) -> str:
        return f"FlagEvaluator(anonymous_policy={self.anonymous_policy.value!r})"


_default_evaluator = FlagEvaluator()


def evaluate(flag: FlagRecord, identifier: str | None = None) -> EvaluationResult:
    """Evaluate with the default policy (anonymous callers get the first bucket)."""
    return _default_evaluator.evaluate(flag, identifier)


__all__ = ["FlagEvaluator", "evaluate"]
