"""Exception handling module."""

from bhavscope.core.exceptions.base import (
    BhavscopeError,
    ConfigurationError,
    HistoryLoadError,
    SnapshotFetchError,
    SnapshotNotFoundError,
    SnapshotStoreError,
)

__all__ = [
    "BhavscopeError",
    "ConfigurationError",
    "HistoryLoadError",
    "SnapshotFetchError",
    "SnapshotNotFoundError",
    "SnapshotStoreError",
]
