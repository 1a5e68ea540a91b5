"""CLI entry point for the trade journal."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from .core.config import Settings, load_settings
from .core.enums import StorageBackend
from .core.errors import IngestionError, TradebookError, UnrecognizedFormatError
from .observability.logger import setup_logging


def _settings(config: str | None) -> Settings:
    try:
        settings = load_settings(config)
    except TradebookError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings.observability.log_level, settings.observability.log_format)
    return settings


async def _with_store(settings: Settings, work):
    """Run ``work(store)`` against the configured execution store."""
    if settings.storage.backend == StorageBackend.POSTGRES:
        from .storage.postgres.connection import Database
        from .storage.postgres.repos import PostgresExecutionStore

        db = Database.from_config(settings.storage)
        try:
            if settings.storage.create_tables:
                await db.create_all()
            return await work(PostgresExecutionStore(db))
        finally:
            await db.dispose()

    from .storage.memory_store import MemoryExecutionStore

    return await work(MemoryExecutionStore())


@click.group()
def main() -> None:
    """Brokerage orderbook journal."""


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--symbol", default=None, help="Only analyse this symbol")
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON")
@click.option("--export-csv", default=None, help="Write tagged round-trips to this CSV file")
def analyse(
    file: str,
    symbol: str | None,
    config: str | None,
    as_json: bool,
    export_csv: str | None,
) -> None:
    """Pair, tag and summarise an orderbook export."""
    from .journal.export import ReportExporter
    from .journal.service import JournalService

    settings = _settings(config)

    async def _run(store):
        service = JournalService(store, config=settings.tagger)
        return await service.upload("cli", file, symbol=symbol)

    try:
        result = asyncio.run(_with_store(settings, _run))
    except IngestionError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    exporter = ReportExporter()
    if export_csv:
        Path(export_csv).write_text(exporter.to_csv(result.stats.trades), encoding="utf-8")

    if as_json:
        click.echo(exporter.to_json(result.stats))
        return

    _print_summary(result)


def _print_summary(result) -> None:
    stats = result.stats
    click.echo(f"\n{'=' * 60}")
    click.echo(f"  Orderbook ({result.parse.schema.value})")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Trades parsed:       {len(result.parse.trades)}")
    click.echo(f"  Rows skipped:        {result.parse.skipped_rows}")
    click.echo(f"  Round-trips:         {len(stats.trades)}")
    click.echo(f"  Net P&L (paired):    {stats.net_pnl:,.2f}")
    click.echo(f"  Net P&L (trips):     {stats.round_trip_net_pnl:,.2f}")
    click.echo(f"  Win rate:            {stats.trade_win_percent:.2f}%")
    click.echo(f"  Day win rate:        {stats.day_win_percent:.2f}%")
    click.echo(f"  Profit factor:       {stats.profit_factor:.2f}")
    click.echo(f"  Score:               {stats.score}")
    if stats.demon_finder:
        click.echo(f"  Top demons:          {', '.join(stats.demon_finder)}")
    for remedy in stats.remedies:
        click.echo(f"    - {remedy}")
    if stats.open_positions:
        click.echo("  Open positions:")
        for pos in stats.open_positions:
            click.echo(f"    {pos.symbol:<24} {pos.side.value:<4} {pos.quantity:>6} @ {pos.avg_price:,.2f}")
    if stats.data_quality_warnings:
        click.echo(f"  Date warnings:       {len(stats.data_quality_warnings)}")
    click.echo(f"  {result.message}")
    click.echo(f"{'=' * 60}\n")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def detect(file: str) -> None:
    """Print which orderbook layout a file uses."""
    from .ingestion.formats import detect_schema

    lines = Path(file).read_text(encoding="utf-8-sig", errors="replace").splitlines()
    try:
        index, schema = detect_schema(lines, source=Path(file).name)
    except UnrecognizedFormatError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"{schema.value} (header on line {index + 1})")


@main.command()
@click.argument("plan", type=click.Path(exists=True, dir_okay=False))
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path (TOML)")
def compare(plan: str, file: str, config: str | None) -> None:
    """Compare a daily plan (JSON) with the executions in an orderbook."""
    from pydantic import ValidationError

    from .journal.service import JournalService
    from .planning.comparison import DailyPlan, compare_plan

    settings = _settings(config)
    try:
        daily_plan = DailyPlan.model_validate_json(Path(plan).read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid plan file {plan}: {exc}") from exc

    async def _run(store):
        service = JournalService(store, config=settings.tagger)
        await service.upload("cli", file)
        return await store.executions_on(daily_plan.date)

    try:
        executed = asyncio.run(_with_store(settings, _run))
    except IngestionError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    outcome = compare_plan(daily_plan, executed)
    click.echo(json.dumps(outcome.model_dump(), indent=2))
