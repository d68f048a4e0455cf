"""Logging utilities for monitoring and debugging."""

from bhavscope.core.logging.config import LogConfig
from bhavscope.core.logging.logger import (
    StructuredLogger,
    bind,
    configure_logging,
    current_trace_id,
    get_logger,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "bind",
    "current_trace_id",
    "get_logger",
    "configure_logging",
    "log_context",
    "logger",
]
