"""bhavscope core exception classes."""

from collections.abc import Sequence
from typing import Any


class BhavscopeError(Exception):
    """Base exception for all bhavscope failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: Human readable error message
            error_code: Stable machine readable code
            details: Extra context for structured output
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {
            "code": self.error_code,
            "message": self.message,
            "details": dict(self.details),
        }


class ConfigurationError(BhavscopeError):
    """Invalid runtime configuration."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if setting:
            super_details["setting"] = setting
        super().__init__(message, "CONFIG_ERROR", super_details)
        self.setting = setting


class SnapshotStoreError(BhavscopeError):
    """Snapshot store related failures."""

    def __init__(
        self,
        message: str,
        locator: str | None = None,
        error_code: str = "STORE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if locator is not None:
            super_details["locator"] = locator
        super().__init__(message, error_code, super_details)
        self.locator = locator


class SnapshotNotFoundError(SnapshotStoreError):
    """The requested snapshot or content locator does not exist."""

    def __init__(
        self,
        message: str,
        locator: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, locator, "SNAPSHOT_NOT_FOUND", details)


class SnapshotFetchError(SnapshotStoreError):
    """Snapshot content could not be retrieved."""

    def __init__(
        self,
        message: str,
        locator: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, locator, "SNAPSHOT_FETCH_ERROR", super_details)
        self.status_code = status_code


class HistoryLoadError(BhavscopeError):
    """Every snapshot in a pooled batch failed to load."""

    def __init__(
        self,
        message: str,
        diagnostics: Sequence[Any] = (),
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if diagnostics:
            super_details["failed_snapshots"] = [
                f"{diagnostic.filename}: {diagnostic.message}" for diagnostic in diagnostics
            ]
        super().__init__(message, "HISTORY_LOAD_ERROR", super_details)
        self.diagnostics = tuple(diagnostics)
