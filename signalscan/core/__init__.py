"""signalscan 核心模块"""

from signalscan.core.config.settings import ConfigManager, SignalScanConfig
from signalscan.core.models import (
    AnalysisResult,
    BollingerPosition,
    FetchOutcome,
    NormalizedSeries,
    RawQuoteSeries,
    VixSnapshot,
)
from signalscan.core.providers import YahooChartClient
from signalscan.core.services import SignalComposer, reevaluate
from signalscan.core.services.batch import BatchScheduler
from signalscan.core.services.market import fetch_vix_snapshot

__all__ = [
    "ConfigManager",
    "SignalScanConfig",
    "AnalysisResult",
    "BollingerPosition",
    "FetchOutcome",
    "NormalizedSeries",
    "RawQuoteSeries",
    "VixSnapshot",
    "YahooChartClient",
    "SignalComposer",
    "BatchScheduler",
    "fetch_vix_snapshot",
    "reevaluate",
]
