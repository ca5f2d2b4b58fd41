"""Services module - analysis pipeline.

Batch scheduling and market snapshots live in ``signalscan.core.services.batch``
and ``signalscan.core.services.market``; they depend on the quote providers and
are exported from ``signalscan.core``.
"""

from signalscan.core.services.indicators import (
    BollingerBands,
    calculate_bollinger_bands,
    calculate_mfi,
    calculate_rsi,
)
from signalscan.core.services.normalizer import epoch_to_date, normalize_series, raw_from_series
from signalscan.core.services.signals import (
    SignalComposer,
    classify_position,
    error_result,
    reevaluate,
)

__all__ = [
    "BollingerBands",
    "calculate_rsi",
    "calculate_mfi",
    "calculate_bollinger_bands",
    "epoch_to_date",
    "normalize_series",
    "raw_from_series",
    "SignalComposer",
    "classify_position",
    "error_result",
    "reevaluate",
]
