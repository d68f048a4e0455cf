"""bhavscope - end-of-day equity snapshot analytics.

Parses daily bhavcopy CSV exports into canonical records and derives
market summaries, top-N rankings and trailing 21-day volume surges.
"""

import asyncio
from datetime import date

from bhavscope.core.models import (
    AboveAverageRecord,
    MarketSummary,
    RankedRecord,
    SnapshotMeta,
    StockRecord,
    VolumeSurgeReport,
)
from bhavscope.core.services import (
    HistoryLoader,
    SortKey,
    VolumeSurgeService,
    compute_above_average,
    parse_csv,
    sort_results,
    summarize,
    top_by_traded_quantity,
    top_by_turnover,
    top_gainers,
    top_losers,
)
from bhavscope.core.store import SnapshotStore

__version__ = "0.1.0"


async def volume_surge_async(
    store: SnapshotStore,
    as_of: str | date | None = None,
    *,
    window: int = 21,
    max_concurrency: int = 8,
) -> VolumeSurgeReport:
    """Compute the above-average volume report for the window ending at ``as_of``.

    Examples:
        >>> import bhavscope
        >>> from bhavscope.core.store import LocalDirectorySnapshotStore
        >>> store = LocalDirectorySnapshotStore("~/bhavcopy")
        >>> report = await bhavscope.volume_surge_async(store, as_of="2026-02-02")
    """
    service = VolumeSurgeService(store, window=window, max_concurrency=max_concurrency)
    return await service.report(as_of)


def volume_surge(
    store: SnapshotStore,
    as_of: str | date | None = None,
    *,
    window: int = 21,
    max_concurrency: int = 8,
) -> VolumeSurgeReport:
    """Synchronous wrapper around :func:`volume_surge_async`."""
    return asyncio.run(volume_surge_async(store, as_of, window=window, max_concurrency=max_concurrency))


__all__ = [
    "AboveAverageRecord",
    "HistoryLoader",
    "MarketSummary",
    "RankedRecord",
    "SnapshotMeta",
    "SnapshotStore",
    "SortKey",
    "StockRecord",
    "VolumeSurgeReport",
    "VolumeSurgeService",
    "__version__",
    "compute_above_average",
    "parse_csv",
    "sort_results",
    "summarize",
    "top_by_traded_quantity",
    "top_by_turnover",
    "top_gainers",
    "top_losers",
    "volume_surge",
    "volume_surge_async",
]
