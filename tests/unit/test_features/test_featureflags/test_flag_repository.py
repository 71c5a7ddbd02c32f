"""Tests for FeatureFlagRepository against in-memory SQLite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from flag_service.features.featureflags.evaluation import FlagRecord
from flag_service.features.featureflags.models import FeatureFlag
from flag_service.features.featureflags.repository import (
    FeatureFlagRepository,
    get_feature_flag_repository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture
def repository() -> FeatureFlagRepository:
    return FeatureFlagRepository()


async def _seed(session: AsyncSession, *keys: str) -> None:
    for key in keys:
        session.add(FeatureFlag(key=key, enabled=True))
    await session.commit()


@pytest.mark.asyncio
async def test_create_populates_generated_columns(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    flag = await repository.create(
        db_session, FeatureFlag(key="new-ui", enabled=True, rollout=50, variants={"A": 1}),
    )

    assert flag.id is not None
    assert flag.created_at is not None
    assert flag.updated_at is not None


@pytest.mark.asyncio
async def test_get_by_key(db_session: AsyncSession, repository: FeatureFlagRepository) -> None:
    await _seed(db_session, "checkout")

    assert (await repository.get_by_key(db_session, "checkout")).key == "checkout"
    assert await repository.get_by_key(db_session, "missing") is None


@pytest.mark.asyncio
async def test_keys_are_case_sensitive(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    await _seed(db_session, "Checkout")

    assert await repository.get_by_key(db_session, "checkout") is None


@pytest.mark.asyncio
async def test_list_flags_orders_by_key_and_paginates(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    await _seed(db_session, "charlie", "alpha", "bravo", "delta")

    page = await repository.list_flags(db_session, limit=2, offset=1)
    everything = await repository.list_flags(db_session, limit=None)

    assert [f.key for f in page] == ["bravo", "charlie"]
    assert [f.key for f in everything] == ["alpha", "bravo", "charlie", "delta"]
    assert await repository.count(db_session) == 4


@pytest.mark.asyncio
async def test_get_many_by_keys_skips_missing(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    await _seed(db_session, "b", "a", "c")

    flags = await repository.get_many_by_keys(db_session, ["c", "missing", "a"])

    assert [f.key for f in flags] == ["a", "c"]
    assert await repository.get_many_by_keys(db_session, []) == []


@pytest.mark.asyncio
async def test_load_record_returns_snapshot(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    db_session.add(FeatureFlag(key="new-ui", enabled=True, rollout=50, variants={"A": 1, "B": 1}))
    await db_session.commit()

    record = await repository.load_record(db_session, "new-ui")

    assert record == FlagRecord(key="new-ui", enabled=True, rollout=50, variants={"A": 1, "B": 1})
    assert await repository.load_record(db_session, "missing") is None


@pytest.mark.asyncio
async def test_null_variants_round_trip_as_none(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    db_session.add(FeatureFlag(key="plain", enabled=False, variants=None, rollout=None))
    await db_session.commit()

    record = await repository.load_record(db_session, "plain")

    assert record.variants is None
    assert record.rollout is None


@pytest.mark.asyncio
async def test_duplicate_key_violates_unique_constraint(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    await _seed(db_session, "dup")

    with pytest.raises(IntegrityError):
        await repository.create(db_session, FeatureFlag(key="dup", enabled=False))


@pytest.mark.asyncio
async def test_rollout_check_constraint(
    db_session: AsyncSession, repository: FeatureFlagRepository,
) -> None:
    with pytest.raises(IntegrityError):
        await repository.create(db_session, FeatureFlag(key="bad", enabled=True, rollout=101))


@pytest.mark.asyncio
async def test_delete(db_session: AsyncSession, repository: FeatureFlagRepository) -> None:
    await _seed(db_session, "gone")
    flag = await repository.get_by_key(db_session, "gone")

    await repository.delete(db_session, flag)
    await db_session.commit()

    assert await repository.get_by_key(db_session, "gone") is None


def test_repository_singleton() -> None:
    assert get_feature_flag_repository() is get_feature_flag_repository()
