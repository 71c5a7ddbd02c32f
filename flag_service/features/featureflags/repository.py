"""Feature flag repository for database operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from flag_service.core.database.repository import BaseRepository
from flag_service.infra.logging import get_lazy_logger

from .models import FeatureFlag

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from .evaluation import FlagRecord

_lazy = get_lazy_logger(__name__)


class FeatureFlagRepository(BaseRepository[FeatureFlag]):
    """Repository for FeatureFlag rows.

    Example:
        repo = get_feature_flag_repository()
        flag = await repo.get_by_key(session, "new-ui")
        record = await repo.load_record(session, "new-ui")
    """

    def __init__(self) -> None:
        super().__init__(FeatureFlag)

    async def get_by_key(self, session: AsyncSession, key: str) -> FeatureFlag | None:
        """Get a flag by its unique key."""
        return await self.get_by(session, FeatureFlag.key, key)

    async def list_flags(
        self,
        session: AsyncSession,
        *,
        limit: int | None = 100,
        offset: int = 0,
    ) -> Sequence[FeatureFlag]:
        """List flags ordered by key."""
        return await self.list(session, order_by=FeatureFlag.key, limit=limit, offset=offset)

    async def get_many_by_keys(
        self,
        session: AsyncSession,
        keys: Iterable[str],
    ) -> Sequence[FeatureFlag]:
        """Get the flags among ``keys`` that exist, ordered by key."""
        wanted = set(keys)
        if not wanted:
            return []
        stmt = select(FeatureFlag).where(FeatureFlag.key.in_(wanted)).order_by(FeatureFlag.key)
        result = await session.execute(stmt)
        flags = result.scalars().all()
        _lazy.debug(lambda: f"get_many_by_keys: {len(flags)}/{len(wanted)} found")
        return flags

    async def load_record(self, session: AsyncSession, key: str) -> FlagRecord | None:
        """Read a flag and return it as an evaluator snapshot."""
        flag = await self.get_by_key(session, key)
        return flag.to_record() if flag is not None else None


_flag_repository: FeatureFlagRepository | None = None


def get_feature_flag_repository() -> FeatureFlagRepository:
    """Get the global FeatureFlagRepository instance."""
    global _flag_repository
    if _flag_repository is None:
        _flag_repository = FeatureFlagRepository()
    return _flag_repository


__all__ = ["FeatureFlagRepository", "get_feature_flag_repository"]
