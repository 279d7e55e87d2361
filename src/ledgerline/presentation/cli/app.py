"""Ledgerline CLI application using Typer.

Operational commands around the sync pipeline: schema management, dry-run
window planning and enrichment cache maintenance.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from ledgerline.application.services import EnrichmentLedger
from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.services import SyncWindowPlanner
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.exceptions import EntryNotFoundError
from ledgerline.domain.shared.exceptions import DomainException
from ledgerline.domain.shared.time import today_utc
from ledgerline.infrastructure.persistence.sqlalchemy import init_db
from ledgerline.infrastructure.persistence.sqlalchemy.database import (
    dispose_engine,
    get_session_maker,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyRepositoryFactory,
)
from ledgerline.presentation.logging_config import configure_logging
from ledgerline_config.settings import get_settings

T = TypeVar("T")

app = typer.Typer(
    name="ledgerline",
    help="Ledgerline - transaction ingestion and enrichment CLI",
    no_args_is_help=True,
)
console = Console()

db_app = typer.Typer(name="db", help="Database schema management", no_args_is_help=True)
sync_app = typer.Typer(name="sync", help="Sync pipeline utilities", no_args_is_help=True)
enrichment_app = typer.Typer(
    name="enrichment",
    help="Enrichment cache and lock maintenance",
    no_args_is_help=True,
)
app.add_typer(db_app)
app.add_typer(sync_app)
app.add_typer(enrichment_app)


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    configure_logging()


def _run(coro: Awaitable[T]) -> T:
    """Run a coroutine, mapping domain errors to a red message and exit 1."""

    async def _wrapped() -> T:
        try:
            return await coro
        finally:
            await dispose_engine()

    try:
        return asyncio.run(_wrapped())
    except DomainException as e:
        console.print(f"[red]Error ({e.code.value}):[/red] {e.message}")
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# db
# ---------------------------------------------------------------------------


@db_app.command("init")
def db_init() -> None:
    """Create all missing tables."""
    _run(init_db.create_tables())
    console.print("[green]Database schema is up to date.[/green]")


@db_app.command("drop")
def db_drop(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Drop all tables (destroys every entry and enrichment record)."""
    if not yes:
        typer.confirm("Drop all ledgerline tables?", abort=True)
    _run(init_db.drop_tables())
    console.print("[yellow]All tables dropped.[/yellow]")


# ---------------------------------------------------------------------------
# sync
# ---------------------------------------------------------------------------


@sync_app.command("plan")
def sync_plan(
    days: int = typer.Option(90, "--days", "-d", help="Days of history to request"),
    window_days: Optional[int] = typer.Option(
        None,
        "--window-days",
        "-w",
        help="Provider's maximum window size (defaults to settings)",
    ),
    today: Optional[str] = typer.Option(
        None,
        "--today",
        help="Plan as of this ISO date instead of today",
    ),
) -> None:
    """Print the sync windows a run would fetch, newest first."""
    settings = get_settings()
    as_of = date.fromisoformat(today) if today else today_utc()
    planner = SyncWindowPlanner(settings.sync_lookback_cap_days)

    if window_days is None:
        window_days = settings.sync_default_window_days

    try:
        plan = planner.plan(
            as_of - timedelta(days=days),
            window_days,
            as_of,
        )
    except DomainException as e:
        console.print(f"[red]Error ({e.code.value}):[/red] {e.message}")
        raise typer.Exit(code=1) from e

    table = Table(title=f"Sync plan as of {as_of}")
    table.add_column("#", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Days", justify="right")
    for number, window in enumerate(plan, start=1):
        table.add_row(
            str(number),
            window.start.isoformat(),
            window.end.isoformat(),
            str(window.span_days),
        )
    console.print(table)

    if plan.truncated:
        console.print(
            f"[yellow]Lookback truncated to {plan.effective_start} "
            f"(cap: {settings.sync_lookback_cap_days} days).[/yellow]",
        )


# ---------------------------------------------------------------------------
# enrichment
# ---------------------------------------------------------------------------


async def _clear_cache(
    source: EnrichmentSource,
    enrichable_type: str,
    entry_id: Optional[UUID],
) -> int:
    async with get_session_maker()() as session:
        factory = SQLAlchemyRepositoryFactory(session)
        ledger = EnrichmentLedger.from_factory(factory)
        if entry_id is None:
            deleted = await ledger.clear_source_cache_for_type(enrichable_type, source)
        else:
            entry = await factory.entry_repository().find_by_id(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            deleted = await ledger.clear_source_cache(entry, source)
        await factory.commit()
        return deleted


async def _unlock(entry_id: UUID, attribute: str) -> bool:
    async with get_session_maker()() as session:
        factory = SQLAlchemyRepositoryFactory(session)
        entry = await factory.entry_repository().find_by_id(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        unlocked = await EnrichmentLedger.from_factory(factory).unlock_attr(
            entry,
            attribute,
        )
        await factory.commit()
        return unlocked


@enrichment_app.command("clear-cache")
def clear_cache(
    source: EnrichmentSource = typer.Option(
        EnrichmentSource.AI,
        "--source",
        "-s",
        help="Source whose records are forgotten",
    ),
    enrichable_type: str = typer.Option(
        Entry.enrichable_type,
        "--type",
        "-t",
        help="Enrichable entity type",
    ),
    entry_id: Optional[str] = typer.Option(
        None,
        "--entry",
        help="Restrict to one entry",
    ),
) -> None:
    """Delete a source's enrichment records and release its locks."""
    deleted = _run(
        _clear_cache(source, enrichable_type, UUID(entry_id) if entry_id else None),
    )
    console.print(
        f"[green]Cleared {deleted} {source.value} record(s) "
        f"on {enrichable_type}.[/green]",
    )


@enrichment_app.command("unlock")
def unlock(
    entry_id: str = typer.Argument(..., help="Entry ID"),
    attribute: str = typer.Argument(..., help="Attribute name, e.g. category"),
) -> None:
    """Release the lock on one attribute of an entry."""
    if _run(_unlock(UUID(entry_id), attribute)):
        console.print(f"[green]Unlocked {attribute} on entry {entry_id}.[/green]")
    else:
        console.print(f"[dim]{attribute} on entry {entry_id} was not locked.[/dim]")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
