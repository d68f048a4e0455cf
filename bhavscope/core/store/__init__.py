"""Snapshot store adapters."""

from bhavscope.core.store.base import SnapshotStore, extract_date_from_filename
from bhavscope.core.store.http import HttpSnapshotStore, HttpStoreConfig
from bhavscope.core.store.local import LocalDirectorySnapshotStore
from bhavscope.core.store.memory import InMemorySnapshotStore

__all__ = [
    "HttpSnapshotStore",
    "HttpStoreConfig",
    "InMemorySnapshotStore",
    "LocalDirectorySnapshotStore",
    "SnapshotStore",
    "extract_date_from_filename",
]
