"""Tests for the flag evaluator."""

from __future__ import annotations

import pytest

from flag_service.features.featureflags.evaluation import (
    AnonymousVariantPolicy,
    EvaluationResult,
    FlagEvaluator,
    FlagRecord,
    evaluate,
)


def test_disabled_flag_never_matches() -> None:
    flag = FlagRecord(key="off", enabled=False, rollout=100, variants={"A": 1})

    assert evaluate(flag, "user1") == EvaluationResult(key="off", matched=False)
    assert evaluate(flag, None) == EvaluationResult(key="off", matched=False)


def test_enabled_flag_without_gating_matches_everyone() -> None:
    flag = FlagRecord(key="on", enabled=True)

    assert evaluate(flag, "user1") == EvaluationResult(key="on", matched=True)
    assert evaluate(flag, None) == EvaluationResult(key="on", matched=True)


def test_rollout_gate_blocks_user() -> None:
    flag = FlagRecord(key="new-ui", enabled=True, rollout=50, variants={"A": 1, "B": 1})

    result = evaluate(flag, "user1")

    assert result == EvaluationResult(key="new-ui", matched=False, variant=None)


def test_rollout_gate_admits_user_and_picks_variant() -> None:
    flag = FlagRecord(key="new-ui", enabled=True, rollout=54, variants={"A": 1, "B": 1})

    assert evaluate(flag, "user1") == EvaluationResult(key="new-ui", matched=True, variant="B")


def test_full_rollout_weighted_variants() -> None:
    flag = FlagRecord(key="checkout", enabled=True, rollout=100, variants={"A": 1, "B": 3})

    assert evaluate(flag, "alice").variant == "A"
    assert evaluate(flag, "bob").variant == "B"


def test_anonymous_caller_fails_rollout() -> None:
    flag = FlagRecord(key="new-ui", enabled=True, rollout=100, variants={"A": 1})

    assert evaluate(flag, None).matched is False


def test_anonymous_caller_without_rollout_gets_first_bucket() -> None:
    flag = FlagRecord(key="theme", enabled=True, variants={"dark": 1, "light": 1})

    assert evaluate(flag, None) == EvaluationResult(key="theme", matched=True, variant="dark")


def test_anonymous_policy_none() -> None:
    evaluator = FlagEvaluator(anonymous_policy=AnonymousVariantPolicy.NONE)
    flag = FlagRecord(key="theme", enabled=True, variants={"dark": 1, "light": 1})

    assert evaluator.evaluate(flag, None) == EvaluationResult(key="theme", matched=True)
    # Identified callers are unaffected
    assert evaluator.evaluate(flag, "user1").variant is not None


def test_policy_accepts_string_value() -> None:
    evaluator = FlagEvaluator(anonymous_policy="none")

    assert evaluator.anonymous_policy is AnonymousVariantPolicy.NONE
    assert repr(evaluator) == "FlagEvaluator(anonymous_policy='none')"


def test_unknown_policy_rejected() -> None:
    with pytest.raises(ValueError):
        FlagEvaluator(anonymous_policy="random")


def test_matched_without_variants_has_no_variant() -> None:
    flag = FlagRecord(key="plain", enabled=True, rollout=100)

    assert evaluate(flag, "user1") == EvaluationResult(key="plain", matched=True, variant=None)


def test_all_zero_weights_match_without_variant() -> None:
    flag = FlagRecord(key="zeros", enabled=True, variants={"A": 0, "B": 0})

    assert evaluate(flag, "user1") == EvaluationResult(key="zeros", matched=True, variant=None)


def test_result_echoes_key() -> None:
    flag = FlagRecord(key="Echo.Key_1", enabled=False)

    assert evaluate(flag, "x").key == "Echo.Key_1"


def test_unmatched_result_never_carries_variant() -> None:
    flag = FlagRecord(key="half", enabled=True, rollout=50, variants={"A": 1, "B": 1})

    for i in range(500):
        result = evaluate(flag, f"user-{i}")
        assert result.matched or result.variant is None


def test_evaluation_is_repeatable() -> None:
    flag = FlagRecord(key="stable", enabled=True, rollout=40, variants={"A": 2, "B": 1})

    first = [evaluate(flag, f"user-{i}") for i in range(200)]
    second = [evaluate(flag, f"user-{i}") for i in range(200)]

    assert first == second
