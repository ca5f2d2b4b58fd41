"""Data models module."""

from signalscan.core.models.analysis import AnalysisResult, BollingerPosition, FetchOutcome
from signalscan.core.models.market import VixSnapshot
from signalscan.core.models.series import NormalizedSeries, RawQuoteSeries

__all__ = [
    "RawQuoteSeries",
    "NormalizedSeries",
    "BollingerPosition",
    "AnalysisResult",
    "FetchOutcome",
    "VixSnapshot",
]
