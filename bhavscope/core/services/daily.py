"""Single-day market summary and top-N rankings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from bhavscope.core.models.records import MarketSummary, RankedRecord, StockRecord

DEFAULT_TOP_N = 20
LAKHS_PER_CRORE = Decimal(100)


def rate_of_change_percent(record: StockRecord) -> Decimal:
    """Day-over-day close change in percent.

    A zero previous close divides by 1 instead, so the result is always finite.
    """

    denominator = record.prev_close if record.prev_close != 0 else Decimal(1)
    return (record.close - record.prev_close) / denominator * 100


def rank_record(record: StockRecord) -> RankedRecord:
    return RankedRecord(**record.model_dump(), rate_of_change_percent=rate_of_change_percent(record))


def summarize(records: Iterable[StockRecord]) -> MarketSummary:
    """Count distinct symbols, gainers and losers and total the turnover in crores."""

    symbols: set[str] = set()
    gainers = 0
    losers = 0
    turnover_lakhs = Decimal(0)
    for record in records:
        symbols.add(record.symbol)
        if record.close > record.prev_close:
            gainers += 1
        elif record.close < record.prev_close:
            losers += 1
        turnover_lakhs += record.turnover_lakhs
    return MarketSummary(
        total_stocks=len(symbols),
        gainers=gainers,
        losers=losers,
        total_turnover_crores=turnover_lakhs / LAKHS_PER_CRORE,
    )


def top_gainers(records: Sequence[StockRecord], n: int = DEFAULT_TOP_N) -> list[RankedRecord]:
    """Highest rate of change first; ties keep input order."""

    if n <= 0:
        return []
    ranked = [rank_record(record) for record in records]
    ranked.sort(key=lambda item: item.rate_of_change_percent, reverse=True)
    return ranked[:n]


def top_losers(records: Sequence[StockRecord], n: int = DEFAULT_TOP_N) -> list[RankedRecord]:
    """Lowest rate of change first; ties keep input order."""

    if n <= 0:
        return []
    ranked = [rank_record(record) for record in records]
    ranked.sort(key=lambda item: item.rate_of_change_percent)
    return ranked[:n]


def top_by_turnover(records: Sequence[StockRecord], n: int = DEFAULT_TOP_N) -> list[StockRecord]:
    if n <= 0:
        return []
    return sorted(records, key=lambda item: item.turnover_lakhs, reverse=True)[:n]


def top_by_traded_quantity(records: Sequence[StockRecord], n: int = DEFAULT_TOP_N) -> list[StockRecord]:
    if n <= 0:
        return []
    return sorted(records, key=lambda item: item.total_traded_quantity, reverse=True)[:n]


__all__ = [
    "DEFAULT_TOP_N",
    "LAKHS_PER_CRORE",
    "rank_record",
    "rate_of_change_percent",
    "summarize",
    "top_by_traded_quantity",
    "top_by_turnover",
    "top_gainers",
    "top_losers",
]
