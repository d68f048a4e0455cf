"""In-memory snapshot store."""

from __future__ import annotations

from collections.abc import Iterable

from bhavscope.core.exceptions import SnapshotNotFoundError
from bhavscope.core.models.snapshots import SnapshotMeta


class InMemorySnapshotStore:
    """Snapshot store backed by a dictionary of CSV texts keyed by locator."""

    def __init__(self, entries: Iterable[tuple[SnapshotMeta, str]] = ()) -> None:
        self._metas: list[SnapshotMeta] = []
        self._contents: dict[str, str] = {}
        for meta, text in entries:
            self.add(meta, text)

    def add(self, meta: SnapshotMeta, text: str) -> None:
        self._metas.append(meta)
        self._contents[meta.locator] = text

    async def list_snapshots(self) -> list[SnapshotMeta]:
        return list(self._metas)

    async def fetch_content(self, locator: str) -> str:
        try:
            return self._contents[locator]
        except KeyError:
            raise SnapshotNotFoundError(f"No snapshot content for locator '{locator}'", locator=locator) from None


__all__ = ["InMemorySnapshotStore"]
