"""Main CLI entry point for flag-service management commands."""

import click

from flag_service.cli.commands import database, featureflags
from flag_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="flag-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Flag Service CLI - manage and evaluate feature flags.

    \b
    Command Groups:
      db         Database setup
      flags      Feature flag management and evaluation

    \b
    Quick Start:
      flag-service db init
      flag-service flags create new-ui --enabled --rollout 50 --variant A=1 --variant B=1
      flag-service flags evaluate new-ui --user-id user1
    """
    ctx.ensure_object(dict)


cli.add_command(database.db)
cli.add_command(featureflags.flags)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
