"""Single-day commands: market summary and top-N rankings."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from pathlib import Path

import typer

from bhavscope.core.models.records import RankedRecord, StockRecord
from bhavscope.core.services.daily import (
    rank_record,
    summarize,
    top_by_traded_quantity,
    top_by_turnover,
    top_gainers,
    top_losers,
)
from bhavscope.core.services.normalizer import parse_csv

from .utils import get_config, handle_errors, open_output, read_snapshot_file

SUMMARY_COLUMNS = ["total_stocks", "gainers", "losers", "total_turnover_crores"]

RANKING_COLUMNS = [
    "symbol",
    "date",
    "prev_close",
    "close",
    "rate_of_change_percent",
    "total_traded_quantity",
    "turnover_lakhs",
]


class RankingKind(str, Enum):
    """Available top-N rankings."""

    GAINERS = "gainers"
    LOSERS = "losers"
    TURNOVER = "turnover"
    TRADED = "traded"


_RANKERS: dict[RankingKind, Callable[[Sequence[StockRecord], int], Sequence[StockRecord]]] = {
    RankingKind.GAINERS: top_gainers,
    RankingKind.LOSERS: top_losers,
    RankingKind.TURNOVER: top_by_turnover,
    RankingKind.TRADED: top_by_traded_quantity,
}


def register(app: typer.Typer) -> None:
    """Register single-day commands on the root CLI application."""

    app.command("summary")(summary_command)
    app.command("top")(top_command)


def summary_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Bhavcopy CSV file for one trading day."),
) -> None:
    """Show gainers, losers and total turnover for one day."""

    summary = summarize(parse_csv(read_snapshot_file(file)))
    with open_output(ctx) as (formatter, stream):
        formatter.render([summary.model_dump()], stream=stream, columns=SUMMARY_COLUMNS, title=file.name)


def top_command(
    ctx: typer.Context,
    kind: RankingKind = typer.Argument(..., help="Ranking to compute."),
    file: Path = typer.Argument(..., help="Bhavcopy CSV file for one trading day."),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1, help="Number of rows (default: configured top_n)."),
) -> None:
    """Rank one day's equities by rate of change, turnover or traded quantity."""

    with handle_errors():
        n = limit if limit is not None else get_config().history.top_n
    ranked = _RANKERS[kind](parse_csv(read_snapshot_file(file)), n)
    with open_output(ctx) as (formatter, stream):
        formatter.render(_ranking_rows(ranked), stream=stream, columns=RANKING_COLUMNS, title=f"top {kind.value}")


def _ranking_rows(records: Sequence[StockRecord]) -> list[Mapping[str, object]]:
    rows: list[Mapping[str, object]] = []
    for record in records:
        # turnover and quantity rankings return plain records
        ranked = record if isinstance(record, RankedRecord) else rank_record(record)
        rows.append(ranked.model_dump())
    return rows


__all__ = ["RANKING_COLUMNS", "SUMMARY_COLUMNS", "RankingKind", "register", "summary_command", "top_command"]
