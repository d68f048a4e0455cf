"""Pooled snapshot history: window selection and concurrent loading."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import date
from time import perf_counter

from bhavscope.core.exceptions import (
    BhavscopeError,
    ConfigurationError,
    HistoryLoadError,
    SnapshotNotFoundError,
)
from bhavscope.core.logging import bind, log_context
from bhavscope.core.models.records import StockRecord
from bhavscope.core.models.snapshots import (
    DailySnapshot,
    PooledHistory,
    SnapshotDiagnostic,
    SnapshotMeta,
    VolumeSurgeReport,
)
from bhavscope.core.services.normalizer import parse_snapshot
from bhavscope.core.services.rolling import TRAILING_WINDOW_DAYS, compute_above_average
from bhavscope.core.store.base import SnapshotStore

DEFAULT_MAX_CONCURRENCY = 8


def _matches(meta: SnapshotMeta, as_of: str | date) -> bool:
    if isinstance(as_of, date):
        return meta.trading_date == as_of
    return as_of in (meta.id, meta.filename) or (
        meta.trading_date is not None and meta.trading_date.isoformat() == as_of
    )


def select_history_window(
    snapshots: Sequence[SnapshotMeta],
    as_of: str | date | None = None,
    depth: int = TRAILING_WINDOW_DAYS + 1,
) -> list[SnapshotMeta]:
    """Pick the ``depth`` dated snapshots ending at ``as_of``.

    Snapshots without a trading date are ignored, and each trading date
    contributes one snapshot: the target for its own date, otherwise the last
    one listed. ``as_of`` may be a snapshot id, a filename, an ISO date string
    or a :class:`date`; when omitted the most recent snapshot is the target.

    Raises:
        SnapshotNotFoundError: No dated snapshot exists or none matches ``as_of``.
    """

    if depth < 1:
        raise ValueError("depth must be at least 1")
    latest_per_day: dict[date, SnapshotMeta] = {}
    for meta in snapshots:
        if meta.trading_date is not None:
            latest_per_day[meta.trading_date] = meta
    if not latest_per_day:
        raise SnapshotNotFoundError("No dated snapshots available")

    if as_of is not None:
        dated = [meta for meta in snapshots if meta.trading_date is not None]
        target = next((meta for meta in reversed(dated) if _matches(meta, as_of)), None)
        if target is None:
            raise SnapshotNotFoundError(f"No snapshot matches '{as_of}'", details={"as_of": str(as_of)})
        latest_per_day[target.trading_date] = target
        last_day = target.trading_date
    else:
        last_day = max(latest_per_day)

    days = sorted(day for day in latest_per_day if day <= last_day)
    return [latest_per_day[day] for day in days[-depth:]]


class HistoryLoader:
    """Fetch and parse many snapshots concurrently, tolerating per-file failures."""

    def __init__(self, store: SnapshotStore, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store
        self.max_concurrency = max_concurrency

    async def load_snapshot(self, meta: SnapshotMeta) -> DailySnapshot:
        """Fetch and parse a single snapshot; errors propagate."""

        text = await self.store.fetch_content(meta.locator)
        return parse_snapshot(meta, text)

    async def load(self, metas: Sequence[SnapshotMeta]) -> PooledHistory:
        """Load every snapshot and flatten the records that made it.

        Failed snapshots become :class:`SnapshotDiagnostic` entries.

        Raises:
            HistoryLoadError: ``metas`` is non-empty and every snapshot failed.
        """

        logger = bind(component="HistoryLoader", snapshot_count=len(metas))
        semaphore = asyncio.Semaphore(self.max_concurrency)
        start = perf_counter()

        async def _bounded(meta: SnapshotMeta) -> DailySnapshot:
            async with semaphore:
                return await self.load_snapshot(meta)

        outcomes = await asyncio.gather(*(_bounded(meta) for meta in metas), return_exceptions=True)

        records: list[StockRecord] = []
        loaded: list[SnapshotMeta] = []
        diagnostics: list[SnapshotDiagnostic] = []
        for meta, outcome in zip(metas, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                diagnostic = SnapshotDiagnostic(
                    snapshot_id=meta.id,
                    filename=meta.filename,
                    message=str(outcome),
                    error_code=outcome.error_code if isinstance(outcome, BhavscopeError) else type(outcome).__name__,
                )
                diagnostics.append(diagnostic)
                logger.warning(
                    "Snapshot load failed",
                    snapshot=meta.filename,
                    error_code=diagnostic.error_code,
                    reason=diagnostic.message,
                )
                continue
            records.extend(outcome.records)
            loaded.append(meta)

        logger.info(
            "Snapshot history loaded",
            loaded=len(loaded),
            failed=len(diagnostics),
            records=len(records),
            duration_ms=round((perf_counter() - start) * 1000, 2),
        )

        if metas and not loaded:
            raise HistoryLoadError("All snapshots in the batch failed to load", diagnostics)

        return PooledHistory(records=tuple(records), loaded=tuple(loaded), diagnostics=tuple(diagnostics))


class VolumeSurgeService:
    """Above-average volume report for the trailing window ending at a snapshot."""

    def __init__(
        self,
        store: SnapshotStore,
        *,
        window: int = TRAILING_WINDOW_DAYS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        loader: HistoryLoader | None = None,
    ) -> None:
        if window < 1:
            raise ConfigurationError("Trailing window must be at least 1 day.", setting="window", details={"window": window})
        self.store = store
        self.window = window
        self.loader = loader or HistoryLoader(store, max_concurrency=max_concurrency)

    async def report(self, as_of: str | date | None = None) -> VolumeSurgeReport:
        with log_context(component="VolumeSurgeService", window=self.window):
            snapshots = await self.store.list_snapshots()
            selected = select_history_window(snapshots, as_of, depth=self.window + 1)
            pooled = await self.loader.load(selected)
            results = compute_above_average(pooled.records, window=self.window)
        return VolumeSurgeReport(
            as_of=selected[-1],
            results=tuple(results),
            snapshots_used=pooled.loaded,
            diagnostics=pooled.diagnostics,
        )


__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "HistoryLoader",
    "VolumeSurgeService",
    "select_history_window",
]
