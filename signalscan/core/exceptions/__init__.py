"""Exception handling module."""

from signalscan.core.exceptions.base import (
    ConfigurationError,
    HttpStatusError,
    InsufficientDataError,
    NetworkError,
    ParseError,
    QuoteSourceError,
    RateLimitedError,
    SignalScanError,
    TaskFaultError,
)
from signalscan.core.exceptions.codes import ErrorCode

__all__ = [
    "SignalScanError",
    "QuoteSourceError",
    "RateLimitedError",
    "HttpStatusError",
    "NetworkError",
    "ParseError",
    "InsufficientDataError",
    "TaskFaultError",
    "ConfigurationError",
    "ErrorCode",
]
