"""Database management commands."""

import sys

import click
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from flag_service.cli.utils import coro, error, info, success
from flag_service.core.settings import get_db_settings


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Verify connectivity and create the flag tables if missing."""
    from flag_service.features.featureflags.models import FeatureFlag
    from flag_service.infra.database import close_database, get_async_session, init_database

    settings = get_db_settings()
    info(f"Connecting to: {settings.url}")

    try:
        await init_database(create_tables=True)
        async with get_async_session() as session:
            count = await session.scalar(select(func.count()).select_from(FeatureFlag))
    except (SQLAlchemyError, OSError) as e:
        error(f"Failed to initialize database: {e}")
        sys.exit(1)
    finally:
        await close_database()

    success("Database ready")
    info(f"Flags stored: {count}")
