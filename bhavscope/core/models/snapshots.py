"""Snapshot metadata and pooled-history containers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel
from pydantic import ConfigDict as PydanticConfigDict

from bhavscope.core.models.records import AboveAverageRecord, StockRecord


class SnapshotMeta(BaseModel):
    """Store listing entry describing one uploaded daily file."""

    id: str
    filename: str
    trading_date: date | None = None
    locator: str = ""

    model_config = PydanticConfigDict(frozen=True)


@dataclass(slots=True, frozen=True)
class DailySnapshot:
    """Parsed equity records of a single snapshot file."""

    meta: SnapshotMeta
    records: tuple[StockRecord, ...]


@dataclass(slots=True, frozen=True)
class SnapshotDiagnostic:
    """Why one snapshot of a pooled batch contributed no records."""

    snapshot_id: str
    filename: str
    message: str
    error_code: str = "SNAPSHOT_LOAD_ERROR"


@dataclass(slots=True, frozen=True)
class PooledHistory:
    """Records flattened from every snapshot that loaded successfully."""

    records: tuple[StockRecord, ...]
    loaded: tuple[SnapshotMeta, ...]
    diagnostics: tuple[SnapshotDiagnostic, ...] = ()

    @property
    def failed_count(self) -> int:
        return len(self.diagnostics)


@dataclass(slots=True, frozen=True)
class VolumeSurgeReport:
    """Above-average volume results for the snapshot window ending at ``as_of``."""

    as_of: SnapshotMeta
    results: tuple[AboveAverageRecord, ...]
    snapshots_used: tuple[SnapshotMeta, ...]
    diagnostics: tuple[SnapshotDiagnostic, ...] = ()


__all__ = [
    "DailySnapshot",
    "PooledHistory",
    "SnapshotDiagnostic",
    "SnapshotMeta",
    "VolumeSurgeReport",
]
