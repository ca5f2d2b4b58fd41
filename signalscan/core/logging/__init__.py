"""Logging utilities for monitoring and debugging."""

from signalscan.core.logging.config import LogConfig
from signalscan.core.logging.logger import (
    StructuredLogger,
    configure_logging,
    current_trace_id,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "current_trace_id",
    "configure_logging",
    "log_context",
    "logger",
]
