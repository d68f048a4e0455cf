"""Structured JSON logging on top of loguru.

Every event is written as one JSON object per line. A loguru patcher fills
in the active trace id and whatever was bound through :func:`log_context`,
so library code only has to call ``logger.warning(...)`` with keyword
context. ``snapshot`` and ``error_code`` are lifted to the top level of the
payload; everything else lands under ``context``.
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger
from loguru._logger import Logger as _LoguruLogger

from bhavscope.core.logging.config import LogConfig

_TRACE_ID: ContextVar[str | None] = ContextVar("bhavscope_trace_id", default=None)
_BOUND_CONTEXT: ContextVar[dict[str, Any]] = ContextVar("bhavscope_log_context", default={})

_PROMOTED_KEYS = ("snapshot", "error_code")
_RESERVED_KEYS = frozenset({"trace_id", *_PROMOTED_KEYS})


def current_trace_id() -> str:
    """Return the active trace id, starting a new trace when none is set."""

    trace_id = _TRACE_ID.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _TRACE_ID.set(trace_id)
    return trace_id


def _inject_context(record: dict[str, Any]) -> None:
    extra = record.setdefault("extra", {})
    if extra.get("trace_id"):
        _TRACE_ID.set(extra["trace_id"])
    else:
        extra["trace_id"] = current_trace_id()

    for key, value in _BOUND_CONTEXT.get().items():
        if key == "trace_id":
            continue
        # explicit keyword arguments win over bound context
        if key in _PROMOTED_KEYS and extra.get(key) is None:
            extra[key] = value
        else:
            extra.setdefault(key, value)

    for key in _PROMOTED_KEYS:
        extra.setdefault(key, None)


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _to_payload(record: dict[str, Any]) -> dict[str, Any]:
    extra = record.get("extra", {})
    level = record.get("level")
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat() if "time" in record else datetime.now().isoformat(),
        "level": getattr(level, "name", None) or (str(level) if level is not None else "INFO"),
        "message": record.get("message"),
        "trace_id": extra.get("trace_id"),
    }
    for key in _PROMOTED_KEYS:
        payload[key] = extra.get(key)

    context = {key: value for key, value in extra.items() if key not in _RESERVED_KEYS}
    if context:
        payload["context"] = context

    exception = record.get("exception")
    if exception is not None and exception.type is not None:
        payload["exception"] = f"{exception.type.__name__}: {exception.value}"
    return payload


class _JsonLineSink:
    """Loguru sink writing one JSON payload per line to a stream or a file path."""

    def __init__(self, target: IO[str] | str) -> None:
        self._stream: IO[str] | None = None
        self._path: Path | None = None
        if isinstance(target, str):
            self._path = Path(target).expanduser()
            self._path.parent.mkdir(parents=True, exist_ok=True)
        else:
            self._stream = target

    def __call__(self, message: Any) -> None:
        line = json.dumps(_to_payload(message.record), default=_serialize) + "\n"
        if self._stream is not None:
            self._stream.write(line)
            self._stream.flush()
            return
        with open(self._path, "a", encoding="utf-8") as handle:  # pragma: no cover - plain file IO
            handle.write(line)


def _install(config: LogConfig) -> None:
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        handlers.append({"sink": _JsonLineSink(config.console_stream or sys.stderr), "level": config.level})
    if config.file_output and config.file_path:
        handlers.append({"sink": _JsonLineSink(config.file_path), "level": config.level})
    logger.configure(handlers=handlers, patcher=_inject_context, extra=dict(config.extra))


def configure_logging(level: str = "WARNING", **kwargs: Any) -> LogConfig:
    """Reset loguru to the JSON sinks described by ``level`` and ``kwargs``."""

    config = LogConfig(level=level.upper(), **kwargs)
    _install(config)
    return config


class StructuredLogger:
    """Owns a :class:`LogConfig` and the loguru logger configured from it."""

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        self.logger: _LoguruLogger = logger
        _install(self.config)

    def configure(self, **kwargs: Any) -> None:
        self.config = self.config.model_copy(update=kwargs)
        _install(self.config)

    @contextmanager
    def context(self, *, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
        with log_context(trace_id=trace_id, **extra) as active_trace:
            yield active_trace


def get_logger(name: str | None = None) -> _LoguruLogger:
    """Return the shared logger, bound to ``name`` when given."""

    return logger.bind(logger_name=name) if name else logger


def bind(**kwargs: Any) -> _LoguruLogger:
    return logger.bind(**kwargs)


@contextmanager
def log_context(*, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Start a trace and bind ``extra`` to every event logged inside the block."""

    context_token = _BOUND_CONTEXT.set({**_BOUND_CONTEXT.get(), **extra})
    active_trace = trace_id or uuid4().hex
    trace_token = _TRACE_ID.set(active_trace)
    try:
        yield active_trace
    finally:
        _TRACE_ID.reset(trace_token)
        _BOUND_CONTEXT.reset(context_token)


configure_logging()


__all__ = [
    "StructuredLogger",
    "bind",
    "configure_logging",
    "current_trace_id",
    "get_logger",
    "log_context",
    "logger",
]
