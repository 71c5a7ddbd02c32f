"""Deterministic flag evaluation engine.

Turns a flag record and an optional identifier into a stable gate decision
and a stable weighted variant pick, without storing any per-user state.

Usage:
    from flag_service.features.featureflags.evaluation import FlagRecord, evaluate

    flag = FlagRecord(key="checkout", enabled=True, rollout=100,
                      variants={"A": 1, "B": 3})
    result = evaluate(flag, "alice")
"""

from __future__ import annotations

from .evaluator import FlagEvaluator, evaluate
from .gate import passes_gate
from .hashing import GATE_TAG, VARIANT_TAG, bucket, gate_bucket, variant_value
from .types import EvaluationResult, FlagContractError, FlagRecord
from .variants import AnonymousVariantPolicy, select_variant

__all__ = [
    "GATE_TAG",
    "VARIANT_TAG",
    "AnonymousVariantPolicy",
    "EvaluationResult",
    "FlagContractError",
    "FlagEvaluator",
    "FlagRecord",
    "bucket",
    "evaluate",
    "gate_bucket",
    "passes_gate",
    "select_variant",
    "variant_value",
]
