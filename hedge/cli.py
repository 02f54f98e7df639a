"""Command-line interface for schema migrations and integrity checks."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TypeVar

import click

from hedge.core.config import SUPPORTED_DRIVER_PREFIX, settings
from hedge.core.errors import SchemaStoreError
from hedge.core.logging import configure_logging
from hedge.db.session import get_engine, session_scope, verify_database_connection
from hedge.migrations import SchemaStore
from hedge.services.references import OrphanReport, ReferenceValidator

T = TypeVar("T")


def _run(action: Callable[[], Awaitable[T]]) -> T:
    """Check connectivity, then run ``action`` against the shared engine.

    The engine is disposed afterwards so the next command starts on a fresh pool.
    """

    async def runner() -> T:
        engine = get_engine()
        try:
            await verify_database_connection(engine)
            return await action()
        finally:
            await engine.dispose()

    try:
        return asyncio.run(runner())
    except SchemaStoreError as e:
        raise click.ClickException(f"{e.error_code}: {e}") from e
    except (RuntimeError, ValueError) as e:
        raise click.ClickException(str(e)) from e


def _format_time(epoch: int) -> str:
    return datetime.fromtimestamp(epoch, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


@click.group()
@click.option(
    "--database-url",
    default=lambda: settings.database_url,
    show_default="DATABASE_URL or sqlite+aiosqlite:///./hedge.db",
    help="Async SQLAlchemy URL of the store.",
)
def cli(database_url: str) -> None:
    """Schema management for the Hedge store."""
    if not database_url.startswith(SUPPORTED_DRIVER_PREFIX):
        raise click.BadParameter(
            f"must use the {SUPPORTED_DRIVER_PREFIX} driver", param_hint="--database-url"
        )
    configure_logging()
    settings.database_url = database_url


@cli.command()
def init() -> None:
    """Create all tables from the base migration."""
    version = _run(lambda: SchemaStore(get_engine()).create())
    click.echo(click.style(f"Schema created at version {version}", fg="green"))


@cli.command()
@click.option("--to", "target", default=None, help="Stop after this version.")
def upgrade(target: str | None) -> None:
    """Apply pending migrations in order."""
    applied = _run(lambda: SchemaStore(get_engine()).upgrade(target))
    if not applied:
        click.echo("Already up to date.")
        return
    for version in applied:
        click.echo(click.style(f"Applied {version}", fg="green"))


@cli.command()
def status() -> None:
    """List known migrations and when each was applied."""
    entries = _run(lambda: SchemaStore(get_engine()).status())
    for entry in entries:
        if entry.applied_at is None:
            click.echo(f"  {entry.version}  pending            {entry.description}")
        else:
            applied = _format_time(entry.applied_at)
            click.echo(f"  {entry.version}  {applied}  {entry.description}")


async def _check() -> tuple[OrphanReport, list[list[str]]]:
    async with session_scope() as session:
        validator = ReferenceValidator(session)
        return await validator.find_orphans(), await validator.find_thread_cycles()


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Report rows whose soft references are broken.

    Exits with status 1 when orphans or comment cycles are found.
    """
    report, cycles = _run(_check)

    problems = [
        *(f"comment {cid}: missing item" for cid in report.comments_missing_item),
        *(f"comment {cid}: missing parent comment" for cid in report.comments_missing_parent),
        *(f"item_tag ({i}, {t}): missing item" for i, t in report.item_tags_missing_item),
        *(f"item_tag ({i}, {t}): missing tag" for i, t in report.item_tags_missing_tag),
        *(f"comment cycle: {' -> '.join(cycle)}" for cycle in cycles),
    ]
    if not problems:
        click.echo(click.style("No integrity problems found", fg="green"))
        return

    for problem in problems:
        click.echo(click.style(problem, fg="yellow"))
    ctx.exit(1)


def main() -> None:
    cli()
