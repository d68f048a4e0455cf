"""Trailing-average volume comparison across pooled daily snapshots."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from bhavscope.core.exceptions import ConfigurationError
from bhavscope.core.logging import get_logger
from bhavscope.core.models.records import AboveAverageRecord, StockRecord

logger = get_logger(__name__)

TRAILING_WINDOW_DAYS = 21


def group_by_symbol(records: Iterable[StockRecord]) -> dict[str, list[StockRecord]]:
    """Group records by symbol, each group sorted by trading date."""

    groups: dict[str, list[StockRecord]] = {}
    for record in records:
        groups.setdefault(record.symbol, []).append(record)
    for history in groups.values():
        history.sort(key=lambda item: item.date)
    return groups


def _mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, Decimal(0)) / Decimal(len(values))


def evaluate_history(history: Sequence[StockRecord], window: int = TRAILING_WINDOW_DAYS) -> AboveAverageRecord | None:
    """Compare the latest record of a date-sorted history with its trailing window.

    Returns ``None`` when the history is shorter than ``window + 1`` records,
    when the trailing average volume is zero, or when the latest volume does
    not strictly exceed the average.
    """

    if len(history) < window + 1:
        return None

    today = history[-1]
    trailing = history[-(window + 1) : -1]
    average_volume = _mean([Decimal(item.total_traded_quantity) for item in trailing])
    average_turnover = _mean([item.turnover_lakhs for item in trailing])

    if average_volume == 0:
        logger.debug("Skipping symbol with zero trailing volume", symbol=today.symbol)
        return None

    current_volume = today.total_traded_quantity
    if current_volume <= average_volume:
        return None

    percent_above = (Decimal(current_volume) - average_volume) / average_volume * 100
    return AboveAverageRecord(
        **today.model_dump(),
        trailing_average_volume=average_volume,
        trailing_average_turnover=average_turnover,
        current_volume=current_volume,
        current_turnover=today.turnover_lakhs,
        percent_above_average=percent_above,
        history_depth=len(history),
    )


def compute_above_average(
    pooled_records: Iterable[StockRecord],
    window: int = TRAILING_WINDOW_DAYS,
) -> list[AboveAverageRecord]:
    """Symbols whose latest volume beats their trailing ``window``-day average.

    Args:
        pooled_records: Records from every snapshot in the pool, any order.
        window: Trailing days averaged, excluding the latest day.

    Returns:
        Qualifying records sorted by percent above average, highest first.
    """

    if window < 1:
        raise ConfigurationError("Trailing window must be at least 1 day.", setting="window", details={"window": window})

    results: list[AboveAverageRecord] = []
    skipped_short = 0
    for history in group_by_symbol(pooled_records).values():
        if len(history) < window + 1:
            skipped_short += 1
            continue
        result = evaluate_history(history, window)
        if result is not None:
            results.append(result)

    results.sort(key=lambda item: item.percent_above_average, reverse=True)
    logger.debug(
        "Computed trailing volume averages",
        window=window,
        above_average=len(results),
        insufficient_history=skipped_short,
    )
    return results


__all__ = [
    "TRAILING_WINDOW_DAYS",
    "compute_above_average",
    "evaluate_history",
    "group_by_symbol",
]
