"""Database dependencies for FastAPI route handlers.

``get_db_session`` ties a session to the lifetime of one request. CLI
commands and scripts use ``flag_service.infra.database.get_async_session``
directly; both share the same session factory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flag_service.infra.database import get_async_session

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncSession


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency yielding a request-scoped database session.

    Example:
        @router.get("/flags")
        async def list_flags(session: Annotated[AsyncSession, Depends(get_db_session)]):
            ...
    """
    async with get_async_session() as session:
        yield session
