"""Feature flags: storage, management API and deterministic evaluation.

Usage:
    from flag_service.features.featureflags import FeatureFlagService, FeatureFlagCreate

    service = FeatureFlagService(session)
    await service.create(FeatureFlagCreate(key="new-ui", enabled=True, rollout=50,
                                           variants={"A": 1, "B": 1}))
    result = await service.evaluate("new-ui", "user1")

The evaluation engine itself lives in ``.evaluation`` and has no database,
HTTP or cache dependencies.
"""

from __future__ import annotations

from .dependencies import get_feature_flag_service, get_flag_evaluator
from .evaluation import EvaluationResult, FlagEvaluator, FlagRecord
from .models import FeatureFlag
from .router import evaluation_router, router
from .schemas import (
    FeatureFlagCreate,
    FeatureFlagListResponse,
    FeatureFlagResponse,
    FeatureFlagUpdate,
    FlagBatchEvaluationRequest,
    FlagBatchEvaluationResponse,
    FlagEvaluationRequest,
    FlagEvaluationResponse,
)
from .service import FeatureFlagService, FlagAlreadyExistsError, FlagNotFoundError

__all__ = [
    # Evaluation
    "EvaluationResult",
    # Models
    "FeatureFlag",
    # Schemas
    "FeatureFlagCreate",
    "FeatureFlagListResponse",
    "FeatureFlagResponse",
    # Service
    "FeatureFlagService",
    "FeatureFlagUpdate",
    "FlagAlreadyExistsError",
    "FlagBatchEvaluationRequest",
    "FlagBatchEvaluationResponse",
    "FlagEvaluationRequest",
    "FlagEvaluationResponse",
    "FlagEvaluator",
    "FlagNotFoundError",
    "FlagRecord",
    # Routers
    "evaluation_router",
    "get_feature_flag_service",
    "get_flag_evaluator",
    "router",
]
