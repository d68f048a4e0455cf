"""Snapshot store interface shared by all storage adapters."""

from __future__ import annotations

import re
from datetime import date
from typing import Protocol, runtime_checkable

from bhavscope.core.models.snapshots import SnapshotMeta

_FILENAME_DATE = re.compile(r"(\d{8})")


@runtime_checkable
class SnapshotStore(Protocol):
    """Lists uploaded daily snapshots and returns their raw CSV text."""

    async def list_snapshots(self) -> list[SnapshotMeta]:
        """Return metadata for every available snapshot."""
        ...

    async def fetch_content(self, locator: str) -> str:
        """Return the CSV text behind ``locator``.

        Raises:
            SnapshotNotFoundError: If the locator is unknown or unreachable.
        """
        ...


def extract_date_from_filename(filename: str) -> date | None:
    """Read the ``DDMMYYYY`` stamp of names like ``sec_bhavdata_full_01012026.csv``."""

    match = _FILENAME_DATE.search(filename)
    if match is None:
        return None
    stamp = match.group(1)
    day, month, year = int(stamp[0:2]), int(stamp[2:4]), int(stamp[4:8])
    if not (1 <= day <= 31 and 1 <= month <= 12 and 1900 <= year <= 2100):
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


__all__ = ["SnapshotStore", "extract_date_from_filename"]
