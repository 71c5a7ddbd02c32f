"""CLI command groups."""

from flag_service.cli.commands import database, featureflags

__all__ = ["database", "featureflags"]
