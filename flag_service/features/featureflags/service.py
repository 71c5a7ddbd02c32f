"""Feature flag service.

Flag management (create, read, update, delete) and evaluation. Writes go to
the database and then invalidate the flag record cache before returning;
evaluation reads records through the cache and hands immutable snapshots to
the pure evaluator.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from flag_service.core.exceptions import ConflictException, NotFoundException
from flag_service.infra.logging import get_lazy_logger
from flag_service.infra.metrics import tracking

from .evaluation import FlagEvaluator
from .models import FeatureFlag
from .repository import get_feature_flag_repository
from .schemas import (
    FeatureFlagCreate,
    FeatureFlagListResponse,
    FeatureFlagResponse,
    FeatureFlagUpdate,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from flag_service.infra.cache import FlagRecordCache

    from .evaluation import EvaluationResult, FlagRecord
    from .repository import FeatureFlagRepository

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)


class FlagNotFoundError(NotFoundException):
    """Raised when a flag key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(
            detail=f"Flag '{key}' not found",
            type="flag-not-found",
            extra={"key": key},
        )


class FlagAlreadyExistsError(ConflictException):
    """Raised when creating a flag whose key is taken."""

    def __init__(self, key: str) -> None:
        super().__init__(
            detail=f"Flag '{key}' already exists",
            type="flag-exists",
            extra={"key": key},
        )


class FeatureFlagService:
    """Service for managing and evaluating feature flags.

    Example:
        service = FeatureFlagService(session, cache=get_flag_cache())

        await service.create(FeatureFlagCreate(key="new-ui", enabled=True, rollout=50))
        result = await service.evaluate("new-ui", "user1")
        if result.matched:
            ...
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        repository: FeatureFlagRepository | None = None,
        cache: FlagRecordCache | None = None,
        evaluator: FlagEvaluator | None = None,
    ) -> None:
        """Initialize feature flag service.

        Args:
            session: Database session.
            repository: Flag repository (defaults to the shared instance).
            cache: Flag record cache, or None to always read the database.
            evaluator: Evaluator (defaults to first-bucket anonymous policy).
        """
        self.session = session
        self.repository = repository or get_feature_flag_repository()
        self.cache = cache
        self.evaluator = evaluator or FlagEvaluator()

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    async def create(self, data: FeatureFlagCreate) -> FeatureFlag:
        """Create a new feature flag.

        Raises:
            FlagAlreadyExistsError: If the key is already in use.
        """
        if await self.repository.get_by_key(self.session, data.key) is not None:
            raise FlagAlreadyExistsError(data.key)

        flag = FeatureFlag(
            key=data.key,
            enabled=data.enabled,
            variants=dict(data.variants) if data.variants is not None else None,
            rollout=data.rollout,
        )
        try:
            await self.repository.create(self.session, flag)
            await self.session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent create of the same key
            await self.session.rollback()
            raise FlagAlreadyExistsError(data.key) from exc

        await self._invalidate(flag.key)
        tracking.track_flag_write("create")
        logger.info(
            "Flag created",
            extra={"flag_key": flag.key, "enabled": flag.enabled, "rollout": flag.rollout},
        )
        return flag

    async def get_by_key(self, key: str) -> FeatureFlag | None:
        """Get a feature flag by key, or None."""
        return await self.repository.get_by_key(self.session, key)

    async def get(self, key: str) -> FeatureFlag:
        """Get a feature flag by key.

        Raises:
            FlagNotFoundError: If the flag does not exist.
        """
        flag = await self.repository.get_by_key(self.session, key)
        if flag is None:
            raise FlagNotFoundError(key)
        return flag

    async def list_flags(self, limit: int = 100, offset: int = 0) -> FeatureFlagListResponse:
        """List flags ordered by key, with the total count."""
        flags = await self.repository.list_flags(self.session, limit=limit, offset=offset)
        total = await self.repository.count(self.session)
        return FeatureFlagListResponse(
            items=[FeatureFlagResponse.model_validate(f) for f in flags],
            total=total,
        )

    async def update(self, key: str, data: FeatureFlagUpdate) -> FeatureFlag:
        """Apply a partial update.

        Omitted fields are kept; an explicit null clears variants or rollout.

        Raises:
            FlagNotFoundError: If the flag does not exist.
        """
        flag = await self.get(key)
        changes = data.changes()

        for field, value in changes.items():
            setattr(flag, field, value)

        await self.session.commit()
        await self.session.refresh(flag)
        await self._invalidate(key)

        tracking.track_flag_write("update")
        logger.info("Flag updated", extra={"flag_key": key, "fields": sorted(changes)})
        return flag

    async def set_enabled(self, key: str, enabled: bool) -> FeatureFlag:
        """Switch a flag on or off."""
        return await self.update(key, FeatureFlagUpdate(enabled=enabled))

    async def set_rollout(self, key: str, rollout: int | None) -> FeatureFlag:
        """Change a flag's rollout percentage (None removes gating)."""
        return await self.update(key, FeatureFlagUpdate(rollout=rollout))

    async def delete(self, key: str) -> None:
        """Delete a flag.

        Raises:
            FlagNotFoundError: If the flag does not exist.
        """
        flag = await self.get(key)
        await self.repository.delete(self.session, flag)
        await self.session.commit()
        await self._invalidate(key)

        tracking.track_flag_write("delete")
        logger.info("Flag deleted", extra={"flag_key": key})

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def get_record(self, key: str) -> FlagRecord | None:
        """Return the evaluator snapshot for ``key``, through the cache if enabled."""
        if self.cache is None:
            return await self.repository.load_record(self.session, key)
        return await self.cache.get_or_load(
            key,
            lambda: self.repository.load_record(self.session, key),
        )

    async def evaluate(self, key: str, user_id: str | None = None) -> EvaluationResult:
        """Evaluate one flag for an optional user.

        Raises:
            FlagNotFoundError: If the flag does not exist.
        """
        record = await self.get_record(key)
        if record is None:
            tracking.track_unknown_flag()
            raise FlagNotFoundError(key)
        return self._evaluate_record(record, user_id)

    async def evaluate_many(
        self,
        user_id: str | None = None,
        keys: Iterable[str] | None = None,
    ) -> list[EvaluationResult]:
        """Evaluate several flags for one user, in key order.

        Args:
            user_id: Optional caller identity.
            keys: Flags to evaluate; None evaluates every stored flag.
                Keys that do not exist are skipped.

        Returns:
            One result per existing flag.
        """
        if keys is None:
            flags = await self.repository.list_flags(self.session, limit=None)
            records = [flag.to_record() for flag in flags]
        elif self.cache is None:
            wanted = set(keys)
            flags = await self.repository.get_many_by_keys(self.session, wanted)
            for _ in range(len(wanted) - len(flags)):
                tracking.track_unknown_flag()
            records = [flag.to_record() for flag in flags]
        else:
            records = []
            for key in sorted(set(keys)):
                record = await self.get_record(key)
                if record is None:
                    tracking.track_unknown_flag()
                    continue
                records.append(record)

        return [self._evaluate_record(record, user_id) for record in records]

    def _evaluate_record(self, record: FlagRecord, user_id: str | None) -> EvaluationResult:
        start = time.perf_counter()
        result = self.evaluator.evaluate(record, user_id)
        tracking.track_evaluation(result, enabled=record.enabled, duration=time.perf_counter() - start)
        _lazy.debug(
            lambda: f"evaluated {record.key} for {'anonymous' if user_id is None else 'identified'} "
            f"caller: matched={result.matched} variant={result.variant}",
        )
        return result

    async def _invalidate(self, key: str) -> None:
        if self.cache is not None:
            await self.cache.invalidate(key)


__all__ = [
    "FeatureFlagService",
    "FlagAlreadyExistsError",
    "FlagNotFoundError",
]
