"""Multi-day commands backed by a snapshot store."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from datetime import date
from typing import TypeVar

import typer

from bhavscope.core.config import BhavscopeConfig
from bhavscope.core.models.snapshots import SnapshotDiagnostic, SnapshotMeta, VolumeSurgeReport
from bhavscope.core.services.history import VolumeSurgeService
from bhavscope.core.services.sorting import SortKey, sort_results
from bhavscope.core.store import HttpSnapshotStore, SnapshotStore

from .utils import build_store, get_config, handle_errors, open_output

T = TypeVar("T")

SNAPSHOT_COLUMNS = ["id", "filename", "trading_date"]

SURGE_COLUMNS = [
    "symbol",
    "date",
    "current_volume",
    "trailing_average_volume",
    "percent_above_average",
    "current_turnover",
    "trailing_average_turnover",
    "history_depth",
]

snapshots_app = typer.Typer(help="Inspect the snapshot store.")


def register(app: typer.Typer) -> None:
    """Register store-backed commands on the root CLI application."""

    app.add_typer(snapshots_app, name="snapshots")
    app.command("surge")(surge_command)


def _run_with_store(
    location: str | None,
    config: BhavscopeConfig,
    action: Callable[[SnapshotStore], Awaitable[T]],
) -> T:
    store = build_store(location, config)

    async def _runner() -> T:
        try:
            return await action(store)
        finally:
            if isinstance(store, HttpSnapshotStore):
                await store.close()

    return asyncio.run(_runner())


def _emit_diagnostics(diagnostics: tuple[SnapshotDiagnostic, ...]) -> None:
    for diagnostic in diagnostics:
        payload = {
            "code": diagnostic.error_code,
            "message": diagnostic.message,
            "snapshot": diagnostic.filename,
        }
        typer.echo(json.dumps(payload, ensure_ascii=False), err=True)


@snapshots_app.command("list")
def list_command(
    ctx: typer.Context,
    store: str | None = typer.Option(None, "--store", "-s", help="Snapshot directory or backend URL."),
) -> None:
    """List available snapshots, oldest first."""

    async def _list(target: SnapshotStore) -> list[SnapshotMeta]:
        return await target.list_snapshots()

    with handle_errors():
        metas = _run_with_store(store, get_config(), _list)

    ordered = sorted(metas, key=lambda meta: (meta.trading_date is None, meta.trading_date or date.min, meta.filename))
    rows = [meta.model_dump(include=set(SNAPSHOT_COLUMNS)) for meta in ordered]
    with open_output(ctx) as (formatter, stream):
        formatter.render(rows, stream=stream, columns=SNAPSHOT_COLUMNS, title="snapshots")


def surge_command(
    ctx: typer.Context,
    store: str | None = typer.Option(None, "--store", "-s", help="Snapshot directory or backend URL."),
    as_of: str | None = typer.Option(None, "--as-of", help="Target snapshot id, filename or ISO date."),
    sort: SortKey = typer.Option(SortKey.PERCENT, "--sort", help="Result ordering."),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1, help="Maximum rows to show."),
    window: int | None = typer.Option(None, "--window", min=1, help="Trailing window length in trading days."),
) -> None:
    """Show symbols whose volume is above their trailing average."""

    with handle_errors():
        config = get_config()
        service_window = window or config.history.window_days

        async def _surge(target: SnapshotStore) -> VolumeSurgeReport:
            service = VolumeSurgeService(
                target,
                window=service_window,
                max_concurrency=config.history.max_concurrency,
            )
            return await service.report(as_of)

        report = _run_with_store(store, config, _surge)

    _emit_diagnostics(report.diagnostics)
    results = sort_results(report.results, sort)
    if limit is not None:
        results = results[:limit]
    rows = [record.model_dump() for record in results]

    with open_output(ctx) as (formatter, stream):
        formatter.render(rows, stream=stream, columns=SURGE_COLUMNS, title=report.as_of.filename)


__all__ = ["SNAPSHOT_COLUMNS", "SURGE_COLUMNS", "list_command", "register", "snapshots_app", "surge_command"]
