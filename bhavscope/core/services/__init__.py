"""Normalization and aggregation services."""

from bhavscope.core.services.daily import (
    rate_of_change_percent,
    summarize,
    top_by_traded_quantity,
    top_by_turnover,
    top_gainers,
    top_losers,
)
from bhavscope.core.services.history import HistoryLoader, VolumeSurgeService, select_history_window
from bhavscope.core.services.normalizer import parse_csv, parse_number, parse_snapshot, parse_trade_date
from bhavscope.core.services.rolling import compute_above_average
from bhavscope.core.services.sorting import SortKey, sort_results

__all__ = [
    "HistoryLoader",
    "SortKey",
    "VolumeSurgeService",
    "compute_above_average",
    "parse_csv",
    "parse_number",
    "parse_snapshot",
    "parse_trade_date",
    "rate_of_change_percent",
    "select_history_window",
    "sort_results",
    "summarize",
    "top_by_traded_quantity",
    "top_by_turnover",
    "top_gainers",
    "top_losers",
]
