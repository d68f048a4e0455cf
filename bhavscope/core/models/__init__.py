"""Data models module."""

from bhavscope.core.models.records import (
    EQUITY_SERIES,
    AboveAverageRecord,
    MarketSummary,
    RankedRecord,
    StockRecord,
)
from bhavscope.core.models.snapshots import (
    DailySnapshot,
    PooledHistory,
    SnapshotDiagnostic,
    SnapshotMeta,
    VolumeSurgeReport,
)

__all__ = [
    "EQUITY_SERIES",
    "AboveAverageRecord",
    "DailySnapshot",
    "MarketSummary",
    "PooledHistory",
    "RankedRecord",
    "SnapshotDiagnostic",
    "SnapshotMeta",
    "StockRecord",
    "VolumeSurgeReport",
]
