"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Sequence, TextIO

import typer

from bhavscope.core.config import BhavscopeConfig, ConfigManager
from bhavscope.core.exceptions import (
    BhavscopeError,
    ConfigurationError,
    HistoryLoadError,
    SnapshotStoreError,
)
from bhavscope.core.store import HttpSnapshotStore, HttpStoreConfig, LocalDirectorySnapshotStore, SnapshotStore

from .constants import DATA_UNAVAILABLE_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import OutputFormatter, create_formatter


@dataclass(slots=True)
class CLIOptions:
    """Resolved options derived from the Typer context."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    """Extract :class:`CLIOptions` from the Typer context object."""

    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        format=str(data.get("format", "table")),
        output_path=data.get("output_path"),
        no_color=bool(data.get("no_color", False)),
    )


def get_config() -> BhavscopeConfig:
    """Factory hook returning the effective configuration."""

    return ConfigManager().get_config()


@contextmanager
def open_output(ctx: typer.Context) -> Iterator[tuple[OutputFormatter, TextIO]]:
    """Yield the formatter and target stream chosen by the global options.

    A file given with ``--output`` is opened for the duration of the block
    and closed afterwards; otherwise stdout is used.
    """

    options = get_cli_options(ctx)
    try:
        formatter = create_formatter(options.format, no_color=options.no_color)
    except ValueError as exc:  # pragma: no cover - validated at callback
        emit_error(str(exc), "INVALID_FORMAT")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    if options.output_path is None:
        yield formatter, sys.stdout
        return

    try:
        stream = open(options.output_path, "w", encoding="utf-8")
    except OSError as exc:
        emit_error(f"Unable to open '{options.output_path}': {exc}", "OUTPUT_WRITE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    with stream:
        yield formatter, stream


def read_snapshot_file(path: Path) -> str:
    """Read a CSV file given on the command line, exiting on failure."""

    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        emit_error(f"Snapshot file '{path}' not found", "SNAPSHOT_NOT_FOUND")
        raise typer.Exit(code=DATA_UNAVAILABLE_EXIT_CODE) from exc
    except (OSError, UnicodeDecodeError) as exc:
        emit_error(f"Unable to read '{path}': {exc}", "SNAPSHOT_FETCH_ERROR")
        raise typer.Exit(code=DATA_UNAVAILABLE_EXIT_CODE) from exc


def build_store(location: str | None, config: BhavscopeConfig) -> SnapshotStore:
    """Create a store from a directory path or ``http(s)://`` URL.

    Falls back to the configured backend URL, then the configured snapshot directory.
    """

    target = location or config.store.base_url or config.store.snapshot_dir
    if target.startswith(("http://", "https://")):
        return HttpSnapshotStore(
            HttpStoreConfig(
                base_url=target,
                timeout=config.store.timeout,
                max_retries=config.store.max_retries,
                backoff_factor=config.store.backoff_factor,
                cloud_name=config.store.cloud_name,
            )
        )
    return LocalDirectorySnapshotStore(target)


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = _sanitize_details(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def emit_bhavscope_error(error: BhavscopeError) -> None:
    emit_error(error.message, error.error_code, details=error.details)


def exit_code_for(error: BhavscopeError) -> int:
    """Map a domain error onto the CLI exit code contract."""

    if isinstance(error, (SnapshotStoreError, HistoryLoadError)):
        return DATA_UNAVAILABLE_EXIT_CODE
    if isinstance(error, ConfigurationError):
        return VALIDATION_EXIT_CODE
    return SYSTEM_EXIT_CODE


@contextmanager
def handle_errors() -> Iterator[None]:
    """Translate domain errors raised inside a command into structured exits."""

    try:
        yield
    except BhavscopeError as exc:
        emit_bhavscope_error(exc)
        raise typer.Exit(code=exit_code_for(exc)) from exc


def _sanitize_details(details: Mapping[str, object]) -> Mapping[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            sanitized[key] = value
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            sanitized[key] = [str(item) for item in value]
        else:
            sanitized[key] = str(value)
    return sanitized


__all__ = [
    "CLIOptions",
    "build_store",
    "emit_bhavscope_error",
    "emit_error",
    "exit_code_for",
    "get_cli_options",
    "get_config",
    "handle_errors",
    "open_output",
    "read_snapshot_file",
]
