"""Tests for single-day summaries and rankings."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from bhavscope.core.models.records import StockRecord
from bhavscope.core.services.daily import (
    rate_of_change_percent,
    summarize,
    top_by_traded_quantity,
    top_by_turnover,
    top_gainers,
    top_losers,
)


def _record(symbol: str, prev_close: str, close: str, *, volume: int = 0, turnover: str = "0") -> StockRecord:
    return StockRecord(
        symbol=symbol,
        series="EQ",
        date=date(2026, 1, 15),
        prev_close=Decimal(prev_close),
        close=Decimal(close),
        total_traded_quantity=volume,
        turnover_lakhs=Decimal(turnover),
    )


def test_rate_of_change_percent() -> None:
    assert rate_of_change_percent(_record("A", "100", "110")) == Decimal("10")
    assert rate_of_change_percent(_record("A", "200", "150")) == Decimal("-25")


def test_rate_of_change_with_zero_previous_close_is_finite() -> None:
    assert rate_of_change_percent(_record("NEW", "0", "12.5")) == Decimal("1250")


def test_summarize_counts_and_converts_turnover() -> None:
    records = [
        _record("A", "100", "110", turnover="150"),
        _record("B", "100", "90", turnover="50"),
        _record("C", "100", "100", turnover="25.5"),
        _record("A", "110", "120", turnover="0"),
    ]

    summary = summarize(records)

    assert summary.total_stocks == 3
    assert summary.gainers == 2
    assert summary.losers == 1
    assert summary.total_turnover_crores == Decimal("2.255")


def test_summarize_empty() -> None:
    summary = summarize([])

    assert summary.total_stocks == 0
    assert summary.gainers == 0
    assert summary.losers == 0
    assert summary.total_turnover_crores == Decimal("0")


def test_top_gainers_and_losers_order() -> None:
    records = [
        _record("FLAT", "100", "100"),
        _record("UP5", "100", "105"),
        _record("DOWN10", "100", "90"),
        _record("UP20", "100", "120"),
    ]

    gainers = top_gainers(records, 2)
    losers = top_losers(records, 2)

    assert [item.symbol for item in gainers] == ["UP20", "UP5"]
    assert gainers[0].rate_of_change_percent == Decimal("20")
    assert [item.symbol for item in losers] == ["DOWN10", "FLAT"]


def test_rankings_are_stable_for_ties() -> None:
    records = [_record(symbol, "100", "110", volume=5, turnover="1") for symbol in ("X", "Y", "Z")]

    assert [item.symbol for item in top_gainers(records, 3)] == ["X", "Y", "Z"]
    assert [item.symbol for item in top_losers(records, 3)] == ["X", "Y", "Z"]
    assert [item.symbol for item in top_by_turnover(records, 3)] == ["X", "Y", "Z"]
    assert [item.symbol for item in top_by_traded_quantity(records, 3)] == ["X", "Y", "Z"]


def test_top_by_turnover_and_quantity() -> None:
    records = [
        _record("LOW", "1", "1", volume=10, turnover="5"),
        _record("HIGH", "1", "1", volume=5, turnover="500"),
        _record("MID", "1", "1", volume=50, turnover="50"),
    ]

    assert [item.symbol for item in top_by_turnover(records, 2)] == ["HIGH", "MID"]
    assert [item.symbol for item in top_by_traded_quantity(records, 2)] == ["MID", "LOW"]


@pytest.mark.parametrize("ranker", [top_gainers, top_losers, top_by_turnover, top_by_traded_quantity])
def test_rankers_handle_small_limits(ranker) -> None:
    records = [_record("A", "1", "2"), _record("B", "2", "1")]

    assert ranker(records, 0) == []
    assert ranker(records, -1) == []
    assert len(ranker(records, 10)) == 2
    assert ranker([], 5) == []


def test_summaries_of_disjoint_days_combine() -> None:
    first = [_record("A", "100", "110", turnover="10"), _record("B", "100", "90", turnover="20")]
    second = [_record("B", "90", "95", turnover="5"), _record("C", "50", "40", turnover="15")]

    combined = summarize(first + second)
    left, right = summarize(first), summarize(second)

    assert combined.gainers == left.gainers + right.gainers
    assert combined.losers == left.losers + right.losers
    assert combined.total_turnover_crores == left.total_turnover_crores + right.total_turnover_crores
    assert combined.total_stocks == len({"A", "B", "C"})


def test_rankings_do_not_mutate_input() -> None:
    records = [_record("A", "100", "90"), _record("B", "100", "120")]
    before = list(records)

    top_gainers(records, 2)
    top_by_turnover(records, 2)

    assert records == before
