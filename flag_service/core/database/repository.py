"""Minimal generic repository for SQLAlchemy models.

Session is always passed explicitly. For queries not covered here, use the
session directly; this is a convenience layer, not an ORM wrapper.

Example:
    class FeatureFlagRepository(BaseRepository[FeatureFlag]):
        async def get_by_key(self, session, key):
            return await self.get_by(session, FeatureFlag.key, key)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select

from flag_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Generic CRUD helpers for one model class."""

    __slots__ = ("_lazy", "_logger", "model")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # DEBUG output is built only when enabled
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    async def get_by(
        self,
        session: AsyncSession,
        attr: InstrumentedAttribute[Any],
        value: Any,
    ) -> T | None:
        """Get the entity whose ``attr`` equals ``value``, if any."""
        result = await session.execute(select(self.model).where(attr == value))
        instance = result.scalar_one_or_none()
        self._lazy.debug(
            lambda: f"db.get_by: {self.model.__name__}.{attr.key}={value!r} -> "
            f"{'found' if instance is not None else 'not found'}",
        )
        return instance

    async def list(
        self,
        session: AsyncSession,
        *,
        order_by: InstrumentedAttribute[Any] | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> Sequence[T]:
        """List entities with optional ordering and pagination."""
        stmt = select(self.model)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        result = await session.execute(stmt)
        items = result.scalars().all()
        self._lazy.debug(
            lambda: f"db.list: {self.model.__name__}(limit={limit}, offset={offset}) -> {len(items)} items",
        )
        return items

    async def count(self, session: AsyncSession) -> int:
        """Count all rows of the model's table."""
        result = await session.execute(select(func.count()).select_from(self.model))
        return int(result.scalar_one())

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Add, flush and refresh a new entity so generated columns are populated."""
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        self._lazy.debug(lambda: f"db.create: {self.model.__name__}(id={getattr(instance, 'id', None)})")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        """Delete an entity and flush."""
        await session.delete(instance)
        await session.flush()
        self._lazy.debug(lambda: f"db.delete: {self.model.__name__}(id={getattr(instance, 'id', None)})")


__all__ = ["BaseRepository"]
