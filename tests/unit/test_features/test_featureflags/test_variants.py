"""Tests for weighted variant selection."""

from __future__ import annotations

from collections import Counter

import pytest

from flag_service.features.featureflags.evaluation import (
    AnonymousVariantPolicy,
    FlagRecord,
    select_variant,
    variant_value,
)


def _flag(variants: dict[str, int] | None, key: str = "new-ui") -> FlagRecord:
    return FlagRecord(key=key, enabled=True, variants=variants)


def test_no_variants_selects_none() -> None:
    assert select_variant(_flag(None), "user1") is None
    assert select_variant(_flag({}), "user1") is None


def test_all_zero_weights_select_none() -> None:
    assert select_variant(_flag({"A": 0, "B": 0}), "user1") is None


def test_known_selection_even_split() -> None:
    # 3023173887 % 2 == 1 -> second variant by name
    assert select_variant(_flag({"A": 1, "B": 1}), "user1") == "B"


@pytest.mark.parametrize(("user", "expected"), [("alice", "A"), ("bob", "B")])
def test_known_selection_weighted(user: str, expected: str) -> None:
    assert select_variant(_flag({"A": 1, "B": 3}, key="checkout"), user) == expected


def test_selection_ignores_insertion_order() -> None:
    forward = _flag({"A": 1, "B": 2, "C": 3}, key="order")
    backward = _flag({"C": 3, "B": 2, "A": 1}, key="order")

    for i in range(200):
        assert select_variant(forward, f"u{i}") == select_variant(backward, f"u{i}")


def test_zero_weight_variant_is_never_selected() -> None:
    flag = _flag({"A": 1, "B": 0, "C": 1}, key="zero")

    picks = {select_variant(flag, f"user-{i}") for i in range(1000)}

    assert picks == {"A", "C"}


def test_single_variant_always_selected() -> None:
    flag = _flag({"only": 5}, key="single")

    assert {select_variant(flag, f"user-{i}") for i in range(100)} == {"only"}


def test_selection_uses_cumulative_weights() -> None:
    flag = _flag({"A": 2, "B": 5, "C": 3}, key="cumulative")

    for i in range(300):
        user = f"user-{i}"
        value = variant_value("cumulative", user) % 10
        expected = "A" if value < 2 else "B" if value < 7 else "C"
        assert select_variant(flag, user) == expected


def test_anonymous_first_bucket_picks_first_weighted_name() -> None:
    flag = _flag({"B": 1, "A": 0, "C": 4})

    assert select_variant(flag, None) == "B"
    assert select_variant(flag, None, AnonymousVariantPolicy.FIRST_BUCKET) == "B"


def test_anonymous_none_policy_assigns_nothing() -> None:
    assert select_variant(_flag({"A": 1}), None, AnonymousVariantPolicy.NONE) is None


def test_weighted_distribution_matches_weights() -> None:
    flag = _flag({"A": 1, "B": 3}, key="weighted")

    counts = Counter(select_variant(flag, f"user-{i}") for i in range(10_000))

    assert counts == {"A": 2460, "B": 7540}

    # Chi-square against the 1:3 expectation, 1 degree of freedom, p = 0.05
    expected = {"A": 2500, "B": 7500}
    chi_square = sum((counts[k] - e) ** 2 / e for k, e in expected.items())
    assert chi_square < 3.841
    for name, e in expected.items():
        assert abs(counts[name] - e) / e <= 0.05
