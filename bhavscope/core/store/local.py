"""Directory-backed snapshot store."""

from __future__ import annotations

import asyncio
from pathlib import Path

from bhavscope.core.exceptions import SnapshotFetchError, SnapshotNotFoundError
from bhavscope.core.models.snapshots import SnapshotMeta
from bhavscope.core.store.base import extract_date_from_filename


class LocalDirectorySnapshotStore:
    """Serve every CSV file of a directory as one snapshot.

    The locator of a snapshot is its file name relative to ``root``; the
    trading date is taken from the ``DDMMYYYY`` stamp in the name.
    """

    def __init__(self, root: str | Path, pattern: str = "*.csv") -> None:
        self.root = Path(root).expanduser()
        self.pattern = pattern

    async def list_snapshots(self) -> list[SnapshotMeta]:
        if not self.root.is_dir():
            raise SnapshotNotFoundError(f"Snapshot directory '{self.root}' does not exist", locator=str(self.root))
        paths = await asyncio.to_thread(lambda: sorted(self.root.glob(self.pattern)))
        return [
            SnapshotMeta(
                id=path.stem,
                filename=path.name,
                trading_date=extract_date_from_filename(path.name),
                locator=path.name,
            )
            for path in paths
            if path.is_file()
        ]

    async def fetch_content(self, locator: str) -> str:
        path = self._resolve(locator)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8-sig")
        except FileNotFoundError as exc:
            raise SnapshotNotFoundError(f"Snapshot file '{locator}' not found", locator=locator) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise SnapshotFetchError(f"Unable to read snapshot '{locator}': {exc}", locator=locator) from exc

    def _resolve(self, locator: str) -> Path:
        if not locator:
            raise SnapshotNotFoundError("Empty snapshot locator", locator=locator)
        root = self.root.resolve()
        path = (root / locator).resolve()
        if not path.is_relative_to(root):
            raise SnapshotNotFoundError(f"Locator '{locator}' points outside the snapshot directory", locator=locator)
        return path


__all__ = ["LocalDirectorySnapshotStore"]
