"""Stable reorderings of above-average result sets."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum

from bhavscope.core.models.records import AboveAverageRecord


class SortKey(str, Enum):
    """Orderings offered for above-average results."""

    PERCENT = "percent"
    TURNOVER_ASC = "turnover-asc"
    TURNOVER_DESC = "turnover-desc"
    VOLUME_ASC = "volume-asc"
    VOLUME_DESC = "volume-desc"


def sort_by_percent_above(results: Sequence[AboveAverageRecord]) -> list[AboveAverageRecord]:
    return sorted(results, key=lambda item: item.percent_above_average, reverse=True)


def sort_by_turnover_asc(results: Sequence[AboveAverageRecord]) -> list[AboveAverageRecord]:
    return sorted(results, key=lambda item: item.current_turnover)


def sort_by_turnover_desc(results: Sequence[AboveAverageRecord]) -> list[AboveAverageRecord]:
    return sorted(results, key=lambda item: item.current_turnover, reverse=True)


def sort_by_volume_asc(results: Sequence[AboveAverageRecord]) -> list[AboveAverageRecord]:
    return sorted(results, key=lambda item: item.current_volume)


def sort_by_volume_desc(results: Sequence[AboveAverageRecord]) -> list[AboveAverageRecord]:
    return sorted(results, key=lambda item: item.current_volume, reverse=True)


_SORTERS: dict[SortKey, Callable[[Sequence[AboveAverageRecord]], list[AboveAverageRecord]]] = {
    SortKey.PERCENT: sort_by_percent_above,
    SortKey.TURNOVER_ASC: sort_by_turnover_asc,
    SortKey.TURNOVER_DESC: sort_by_turnover_desc,
    SortKey.VOLUME_ASC: sort_by_volume_asc,
    SortKey.VOLUME_DESC: sort_by_volume_desc,
}


def sort_results(results: Sequence[AboveAverageRecord], key: SortKey | str = SortKey.PERCENT) -> list[AboveAverageRecord]:
    """Return a new list ordered by ``key``; the input is left untouched."""

    return _SORTERS[SortKey(key)](results)


__all__ = [
    "SortKey",
    "sort_by_percent_above",
    "sort_by_turnover_asc",
    "sort_by_turnover_desc",
    "sort_by_volume_asc",
    "sort_by_volume_desc",
    "sort_results",
]
