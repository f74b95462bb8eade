"""targethook command-line interface.

Operator tooling for inspecting the durable hook and target tables. Hooks are
deliberately not deletable from here: deletion must go through the engine so
that the hook's callback runs inside the game server.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar
from uuid import UUID

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession

# Load .env file before importing config
load_dotenv()

from targethook.config import get_settings  # noqa: E402
from targethook.db.engine import (  # noqa: E402
    create_engine_from_settings,
    dispose_engine,
    get_sessionmaker,
    init_db,
)
from targethook.schemas.targeting import ObjectType  # noqa: E402
from targethook.services.hooks import get_hook, list_hooks  # noqa: E402
from targethook.services.targets import (  # noqa: E402
    clear_targets,
    delete_target,
    list_targets,
)

T = TypeVar("T")

console = Console()


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def run_with_session(func: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run an async function inside a committed transaction on the configured database."""

    async def _run() -> T:
        try:
            async with get_sessionmaker()() as session, session.begin():
                return await func(session)
        finally:
            await dispose_engine()

    return asyncio.run(_run())


def format_filter(object_type_filter: int) -> str:
    """Render an object-type bitmask as flag names."""
    if object_type_filter == ObjectType.ALL:
        return "ALL"
    names = [
        flag.name
        for flag in ObjectType
        if flag is not ObjectType.ALL and flag.name and object_type_filter & flag
    ]
    return "|".join(names) or str(object_type_filter)


def format_uses(uses: int) -> str:
    return "unlimited" if uses == -1 else str(uses)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """targethook - targeting hook registry administration."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command("init-db")
def init_db_cmd() -> None:
    """Create the targeting tables if they do not exist."""

    async def _init() -> None:
        engine = create_engine_from_settings()
        try:
            await init_db(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    click.echo(f"Initialized {get_settings().database_url}")


@cli.group()
def hooks() -> None:
    """Inspect targeting hooks."""
    pass


@hooks.command("ls")
@click.option("--owner", "-o", type=click.UUID, help="Only show hooks for this owner")
@click.option("--limit", "-n", type=int, help="Max hooks to show")
def hooks_ls(owner: UUID | None, limit: int | None) -> None:
    """List targeting hooks."""
    limit = limit or get_settings().list_limit
    rows = run_with_session(lambda session: list_hooks(session, owner=owner, limit=limit))

    if not rows:
        click.echo("No hooks found.")
        return

    table = Table(title="Targeting hooks")
    table.add_column("ID", justify="right")
    table.add_column("Owner")
    table.add_column("Slot")
    table.add_column("Filter")
    table.add_column("Uses", justify="right")
    table.add_column("Callback")
    for hook in rows:
        table.add_row(
            str(hook.hook_id),
            str(hook.owner),
            hook.slot_name,
            format_filter(hook.object_type_filter),
            format_uses(hook.uses_remaining),
            hook.callback or "-",
        )
    console.print(table)


@hooks.command("show")
@click.argument("hook_id", type=int)
def hooks_show(hook_id: int) -> None:
    """Show one hook."""
    hook = run_with_session(lambda session: get_hook(session, hook_id))
    if not hook.exists:
        raise click.ClickException(f"Hook {hook_id} not found")

    click.echo(f"Hook:     {hook.hook_id}")
    click.echo(f"Owner:    {hook.owner}")
    click.echo(f"Slot:     {hook.slot_name}")
    click.echo(f"Filter:   {format_filter(hook.object_type_filter)}")
    click.echo(f"Uses:     {format_uses(hook.uses_remaining)}")
    click.echo(f"Callback: {hook.callback or '-'}")


@cli.group()
def targets() -> None:
    """Inspect and clear captured targets."""
    pass


@targets.command("ls")
@click.argument("owner", type=click.UUID)
@click.argument("slot_name")
def targets_ls(owner: UUID, slot_name: str) -> None:
    """List captured targets of OWNER's SLOT_NAME in capture order."""
    rows = run_with_session(lambda session: list_targets(session, owner, slot_name))
    if not rows:
        click.echo("No targets found.")
        return

    table = Table(title=f"Targets in {slot_name}")
    table.add_column("#", justify="right")
    table.add_column("ID", justify="right")
    table.add_column("Entity")
    table.add_column("Region")
    table.add_column("Position")
    for index, target in enumerate(rows):
        table.add_row(
            str(index),
            str(target.target_id),
            str(target.entity or "-"),
            str(target.region or "-"),
            str(target.position),
        )
    console.print(table)


@targets.command("rm")
@click.argument("target_id", type=int)
def targets_rm(target_id: int) -> None:
    """Delete one captured target."""
    deleted = run_with_session(lambda session: delete_target(session, target_id))
    if not deleted:
        raise click.ClickException(f"Target {target_id} not found")
    click.echo(f"Deleted target {target_id}")


@targets.command("clear")
@click.argument("owner", type=click.UUID)
@click.argument("slot_name")
@click.confirmation_option(prompt="Delete every captured target in this slot?")
def targets_clear(owner: UUID, slot_name: str) -> None:
    """Delete all captured targets of OWNER's SLOT_NAME."""
    count = run_with_session(lambda session: clear_targets(session, owner, slot_name))
    click.echo(f"Deleted {count} targets")


if __name__ == "__main__":
    cli()
