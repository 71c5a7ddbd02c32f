"""Feature flag management CLI commands.

This module provides CLI commands for managing feature flags:
- List, show, create and delete flags
- Enable/disable flags and change rollout or variants
- Evaluate flags for a user against the stored configuration
- Inspect the hash buckets a user lands in, without a database
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import sys
from typing import Any

import click
from pydantic import ValidationError

from flag_service.cli.utils import (
    coro,
    echo_json,
    error,
    header,
    info,
    section,
    success,
    warning,
)
from flag_service.core.exceptions import AppException
from flag_service.features.featureflags.evaluation import (
    FlagRecord,
    gate_bucket,
    passes_gate,
    variant_value,
)
from flag_service.features.featureflags.schemas import (
    FeatureFlagCreate,
    FeatureFlagResponse,
    FeatureFlagUpdate,
)


def _parse_variants(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...],
) -> dict[str, int] | None:
    """Turn repeated ``--variant NAME=WEIGHT`` options into a mapping."""
    if not values:
        return None

    variants: dict[str, int] = {}
    for raw in values:
        name, sep, weight = raw.partition("=")
        if not sep or not name:
            msg = f"expected NAME=WEIGHT, got '{raw}'"
            raise click.BadParameter(msg, ctx=ctx, param=param)
        if name in variants:
            msg = f"variant '{name}' given more than once"
            raise click.BadParameter(msg, ctx=ctx, param=param)
        try:
            variants[name] = int(weight)
        except ValueError:
            msg = f"weight for '{name}' must be an integer, got '{weight}'"
            raise click.BadParameter(msg, ctx=ctx, param=param) from None
    return variants


@asynccontextmanager
async def _flag_service() -> AsyncIterator[Any]:
    """Open the flag store and yield a FeatureFlagService.

    Application errors and validation failures are reported and turned
    into exit code 1.
    """
    from flag_service.features.featureflags.dependencies import get_flag_evaluator
    from flag_service.features.featureflags.service import FeatureFlagService
    from flag_service.infra.database import close_database, get_async_session, init_database

    try:
        await init_database()
        async with get_async_session() as session:
            yield FeatureFlagService(session, evaluator=get_flag_evaluator())
    except AppException as e:
        error(e.detail)
        sys.exit(1)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(loc) for loc in err["loc"]) or "input"
            error(f"{field}: {err['msg']}")
        sys.exit(1)
    finally:
        await close_database()


def _flag_data(flag: Any) -> dict[str, Any]:
    return FeatureFlagResponse.model_validate(flag).model_dump(mode="json")


def _describe_flag(flag: Any) -> None:
    click.echo(f"  {flag.key}")
    click.secho(
        f"    Enabled: {flag.enabled}",
        fg="green" if flag.enabled else "red",
    )
    rollout = "none (all callers)" if flag.rollout is None else f"{flag.rollout}%"
    click.echo(f"    Rollout: {rollout}")
    if flag.variants:
        weights = ", ".join(f"{name}={weight}" for name, weight in sorted(flag.variants.items()))
        click.echo(f"    Variants: {weights}")


@click.group(name="flags")
def flags() -> None:
    """Feature flag management commands."""


@flags.command(name="list")
@click.option("--limit", default=100, type=click.IntRange(1, 1000), help="Maximum flags to display")
@click.option("--offset", default=0, type=click.IntRange(0), help="Flags to skip")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@coro
async def list_flags(limit: int, offset: int, output_format: str) -> None:
    """List feature flags ordered by key."""
    async with _flag_service() as service:
        response = await service.list_flags(limit=limit, offset=offset)

    if output_format == "json":
        echo_json(response.model_dump(mode="json"))
        return

    header("Feature Flags")
    if not response.items:
        info("No feature flags found")
        return

    click.echo()
    for flag in response.items:
        _describe_flag(flag)
        click.echo()
    success(f"Total: {response.total} flags")


@flags.command(name="show")
@click.argument("key")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@coro
async def show_flag(key: str, output_format: str) -> None:
    """Show details of a feature flag.

    KEY is the unique key of the feature flag.
    """
    async with _flag_service() as service:
        flag = await service.get(key)

    if output_format == "json":
        echo_json(_flag_data(flag))
        return

    header(f"Feature Flag: {key}")
    section("Configuration")
    _describe_flag(flag)

    section("Timestamps")
    click.echo(f"  Created: {flag.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
    click.echo(f"  Updated: {flag.updated_at.strftime('%Y-%m-%d %H:%M:%S')}")


@flags.command(name="create")
@click.argument("key")
@click.option("--enabled/--disabled", default=False, help="Initial enabled state")
@click.option("--rollout", type=int, default=None, help="Percentage of identified users (0-100)")
@click.option(
    "--variant",
    "variants",
    multiple=True,
    callback=_parse_variants,
    metavar="NAME=WEIGHT",
    help="Variant and its weight; repeat for several variants",
)
@coro
async def create_flag(
    key: str, enabled: bool, rollout: int | None, variants: dict[str, int] | None,
) -> None:
    """Create a feature flag.

    \b
    Examples:
      flag-service flags create new-ui --enabled --rollout 50 --variant A=1 --variant B=1
      flag-service flags create kill-switch
    """
    async with _flag_service() as service:
        flag = await service.create(
            FeatureFlagCreate(key=key, enabled=enabled, rollout=rollout, variants=variants),
        )

    success(f"Created flag '{flag.key}'")
    _describe_flag(flag)


@flags.command(name="enable")
@click.argument("key")
@coro
async def enable_flag(key: str) -> None:
    """Enable a feature flag."""
    async with _flag_service() as service:
        await service.set_enabled(key, True)
    success(f"Flag '{key}' enabled")


@flags.command(name="disable")
@click.argument("key")
@coro
async def disable_flag(key: str) -> None:
    """Disable a feature flag."""
    async with _flag_service() as service:
        await service.set_enabled(key, False)
    success(f"Flag '{key}' disabled")


@flags.command(name="set-rollout")
@click.argument("key")
@click.argument("rollout", type=int, required=False)
@click.option("--clear", is_flag=True, help="Remove gating so every caller passes")
@coro
async def set_rollout(key: str, rollout: int | None, clear: bool) -> None:
    """Change the rollout percentage of a flag.

    \b
    Examples:
      flag-service flags set-rollout new-ui 25
      flag-service flags set-rollout new-ui --clear
    """
    if clear == (rollout is not None):
        error("Give either a ROLLOUT percentage or --clear")
        sys.exit(2)

    async with _flag_service() as service:
        flag = await service.set_rollout(key, None if clear else rollout)

    if flag.rollout is None:
        success(f"Rollout for '{key}' cleared")
    else:
        success(f"Rollout for '{key}' set to {flag.rollout}%")


@flags.command(name="set-variants")
@click.argument("key")
@click.option(
    "--variant",
    "variants",
    multiple=True,
    callback=_parse_variants,
    metavar="NAME=WEIGHT",
    help="Variant and its weight; repeat for several variants",
)
@click.option("--clear", is_flag=True, help="Remove all variants")
@coro
async def set_variants(key: str, variants: dict[str, int] | None, clear: bool) -> None:
    """Replace the variants of a flag."""
    if clear == (variants is not None):
        error("Give either --variant options or --clear")
        sys.exit(2)

    async with _flag_service() as service:
        await service.update(key, FeatureFlagUpdate(variants=None if clear else variants))

    success(f"Variants for '{key}' {'cleared' if clear else 'updated'}")


@flags.command(name="delete")
@click.argument("key")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@coro
async def delete_flag(key: str, force: bool) -> None:
    """Delete a feature flag."""
    if not force and not click.confirm(f"Delete flag '{key}'?"):
        warning("Aborted")
        return

    async with _flag_service() as service:
        await service.delete(key)
    success(f"Flag '{key}' deleted")


@flags.command(name="evaluate")
@click.argument("key")
@click.option("--user-id", "-u", default=None, help="Caller identity; omit for anonymous")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@coro
async def evaluate_flag(key: str, user_id: str | None, output_format: str) -> None:
    """Evaluate a stored flag for a user."""
    async with _flag_service() as service:
        result = await service.evaluate(key, user_id)

    if output_format == "json":
        echo_json(result.to_dict())
        return

    who = "anonymous caller" if user_id is None else f"'{user_id}'"
    click.echo(f"  Flag:    {result.key}")
    click.echo(f"  User:    {who}")
    click.secho(f"  Matched: {result.matched}", fg="green" if result.matched else "red")
    click.echo(f"  Variant: {result.variant if result.variant is not None else '-'}")


@flags.command(name="bucket")
@click.argument("key")
@click.argument("user_id")
@click.option("--rollout", type=click.IntRange(0, 100), default=None, help="Check against this rollout")
def bucket_command(key: str, user_id: str, rollout: int | None) -> None:
    """Show the hash buckets USER_ID lands in for KEY.

    Needs no database: bucketing depends only on the key and the user id.
    """
    bucket = gate_bucket(key, user_id)
    value = variant_value(key, user_id)

    click.echo(f"  Gate bucket:   {bucket}")
    click.echo(f"  Variant value: {value}")
    if rollout is not None:
        passed = passes_gate(FlagRecord(key=key, enabled=True, rollout=rollout), user_id)
        click.secho(
            f"  Rollout {rollout}%: {'in' if passed else 'out'}",
            fg="green" if passed else "red",
        )
