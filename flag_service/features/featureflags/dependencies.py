"""Feature flag dependencies for FastAPI."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flag_service.core.dependencies.database import get_db_session
from flag_service.core.settings import get_evaluation_settings
from flag_service.infra.cache import FlagRecordCache, get_flag_cache

from .evaluation import AnonymousVariantPolicy, FlagEvaluator
from .service import FeatureFlagService


@lru_cache(maxsize=1)
def get_flag_evaluator() -> FlagEvaluator:
    """Get the shared evaluator configured from EVAL_* settings."""
    policy = AnonymousVariantPolicy(get_evaluation_settings().anonymous_variant)
    return FlagEvaluator(anonymous_policy=policy)


def get_flag_record_cache() -> FlagRecordCache | None:
    """Get the shared flag record cache (None when caching is disabled)."""
    return get_flag_cache()


async def get_feature_flag_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[FlagRecordCache | None, Depends(get_flag_record_cache)],
    evaluator: Annotated[FlagEvaluator, Depends(get_flag_evaluator)],
) -> FeatureFlagService:
    """Build a request-scoped FeatureFlagService.

    Usage:
        @router.get("/flags/{key}")
        async def get_flag(
            key: str,
            service: Annotated[FeatureFlagService, Depends(get_feature_flag_service)],
        ):
            return await service.get(key)
    """
    return FeatureFlagService(session, cache=cache, evaluator=evaluator)


FeatureFlagServiceDep = Annotated[FeatureFlagService, Depends(get_feature_flag_service)]


__all__ = [
    "FeatureFlagServiceDep",
    "get_feature_flag_service",
    "get_flag_evaluator",
    "get_flag_record_cache",
]
