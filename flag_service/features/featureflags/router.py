"""Feature flag REST API endpoints.

Two routers: ``router`` manages stored flags under ``/flags``;
``evaluation_router`` answers evaluation requests under ``/evaluate``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from .dependencies import FeatureFlagServiceDep
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

router = APIRouter(prefix="/flags", tags=["flags"])
evaluation_router = APIRouter(prefix="/evaluate", tags=["evaluation"])


# Flag management endpoints


@router.get(
    "",
    response_model=FeatureFlagListResponse,
    summary="List feature flags",
)
async def list_flags(
    service: FeatureFlagServiceDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> FeatureFlagListResponse:
    """List flags ordered by key."""
    return await service.list_flags(limit=limit, offset=offset)


@router.post(
    "",
    response_model=FeatureFlagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create feature flag",
    responses={409: {"description": "A flag with this key already exists"}},
)
async def create_flag(
    data: FeatureFlagCreate,
    service: FeatureFlagServiceDep,
) -> FeatureFlagResponse:
    """Create a new feature flag."""
    flag = await service.create(data)
    return FeatureFlagResponse.model_validate(flag)


@router.get(
    "/{key}",
    response_model=FeatureFlagResponse,
    summary="Get feature flag",
    responses={404: {"description": "Flag not found"}},
)
async def get_flag(key: str, service: FeatureFlagServiceDep) -> FeatureFlagResponse:
    """Get a feature flag by key."""
    flag = await service.get(key)
    return FeatureFlagResponse.model_validate(flag)


@router.patch(
    "/{key}",
    response_model=FeatureFlagResponse,
    summary="Update feature flag",
    description="Omitted fields are kept; explicit null clears variants or rollout.",
    responses={404: {"description": "Flag not found"}},
)
async def update_flag(
    key: str,
    data: FeatureFlagUpdate,
    service: FeatureFlagServiceDep,
) -> FeatureFlagResponse:
    """Partially update a feature flag."""
    flag = await service.update(key, data)
    return FeatureFlagResponse.model_validate(flag)


@router.delete(
    "/{key}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete feature flag",
    responses={404: {"description": "Flag not found"}},
)
async def delete_flag(key: str, service: FeatureFlagServiceDep) -> Response:
    """Delete a feature flag."""
    await service.delete(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{key}/enable",
    response_model=FeatureFlagResponse,
    summary="Enable feature flag",
)
async def enable_flag(key: str, service: FeatureFlagServiceDep) -> FeatureFlagResponse:
    """Switch a flag on."""
    flag = await service.set_enabled(key, True)
    return FeatureFlagResponse.model_validate(flag)


@router.post(
    "/{key}/disable",
    response_model=FeatureFlagResponse,
    summary="Disable feature flag",
)
async def disable_flag(key: str, service: FeatureFlagServiceDep) -> FeatureFlagResponse:
    """Switch a flag off."""
    flag = await service.set_enabled(key, False)
    return FeatureFlagResponse.model_validate(flag)


# Evaluation endpoints


@evaluation_router.post(
    "",
    response_model=FlagEvaluationResponse,
    summary="Evaluate a flag",
    responses={404: {"description": "Flag not found"}},
)
async def evaluate_flag(
    data: FlagEvaluationRequest,
    service: FeatureFlagServiceDep,
) -> FlagEvaluationResponse:
    """Evaluate one flag for an optional user id."""
    result = await service.evaluate(data.key, data.user_id)
    return FlagEvaluationResponse.from_result(result)


@evaluation_router.post(
    "/batch",
    response_model=FlagBatchEvaluationResponse,
    summary="Evaluate several flags",
    description="Evaluates the given keys, or every flag when keys are omitted. Unknown keys are skipped.",
)
async def evaluate_flags(
    data: FlagBatchEvaluationRequest,
    service: FeatureFlagServiceDep,
) -> FlagBatchEvaluationResponse:
    """Evaluate several flags for one user id."""
    results = await service.evaluate_many(data.user_id, data.keys)
    return FlagBatchEvaluationResponse(
        results=[FlagEvaluationResponse.from_result(r) for r in results],
    )


__all__ = ["evaluation_router", "router"]
