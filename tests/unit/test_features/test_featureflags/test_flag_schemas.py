"""Tests for feature flag request and response schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from flag_service.features.featureflags.evaluation import EvaluationResult
from flag_service.features.featureflags.schemas import (
    FeatureFlagCreate,
    FeatureFlagUpdate,
    FlagBatchEvaluationRequest,
    FlagEvaluationRequest,
    FlagEvaluationResponse,
)


def test_create_defaults() -> None:
    data = FeatureFlagCreate(key="new-ui")

    assert data.enabled is False
    assert data.variants is None
    assert data.rollout is None


@pytest.mark.parametrize("key", ["new-ui", "checkout_v2", "a", "A.b-c_9"])
def test_create_accepts_valid_keys(key: str) -> None:
    assert FeatureFlagCreate(key=key).key == key


@pytest.mark.parametrize("key", ["", "-leading", "has space", "a:b", "a/b", "x" * 101, "é"])
def test_create_rejects_invalid_keys(key: str) -> None:
    with pytest.raises(ValidationError):
        FeatureFlagCreate(key=key)


@pytest.mark.parametrize("rollout", [-1, 101])
def test_create_rejects_rollout_out_of_range(rollout: int) -> None:
    with pytest.raises(ValidationError):
        FeatureFlagCreate(key="k", rollout=rollout)


@pytest.mark.parametrize("rollout", [50.0, "50", True])
def test_create_rejects_non_integer_rollout(rollout: object) -> None:
    with pytest.raises(ValidationError):
        FeatureFlagCreate.model_validate({"key": "k", "rollout": rollout})


@pytest.mark.parametrize("weight", [-1, 1.5, "1", None])
def test_create_rejects_bad_weights(weight: object) -> None:
    with pytest.raises(ValidationError):
        FeatureFlagCreate.model_validate({"key": "k", "variants": {"A": weight}})


def test_create_accepts_zero_weights() -> None:
    data = FeatureFlagCreate(key="k", variants={"A": 0, "B": 0})

    assert data.variants == {"A": 0, "B": 0}


def test_create_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        FeatureFlagCreate.model_validate({"key": "k", "percentage": 10})


def test_create_rejects_too_many_variants() -> None:
    with pytest.raises(ValidationError):
        FeatureFlagCreate(key="k", variants={f"v{i}": 1 for i in range(101)})


def test_update_tracks_sent_fields_only() -> None:
    update = FeatureFlagUpdate.model_validate({"rollout": 25})

    assert update.changes() == {"rollout": 25}


def test_update_explicit_null_clears() -> None:
    update = FeatureFlagUpdate.model_validate({"variants": None, "rollout": None})

    assert update.changes() == {"variants": None, "rollout": None}


def test_update_rejects_null_enabled() -> None:
    with pytest.raises(ValidationError, match="enabled cannot be null"):
        FeatureFlagUpdate.model_validate({"enabled": None})


def test_update_empty_body_changes_nothing() -> None:
    assert FeatureFlagUpdate().changes() == {}


def test_evaluation_request_distinguishes_empty_from_missing_user() -> None:
    assert FlagEvaluationRequest(key="k").user_id is None
    assert FlagEvaluationRequest(key="k", user_id="").user_id == ""


def test_evaluation_response_from_result() -> None:
    response = FlagEvaluationResponse.from_result(
        EvaluationResult(key="new-ui", matched=True, variant="B"),
    )

    assert response.model_dump() == {"key": "new-ui", "matched": True, "variant": "B"}


def test_batch_request_limits_keys() -> None:
    with pytest.raises(ValidationError):
        FlagBatchEvaluationRequest(keys=[f"k{i}" for i in range(1001)])
