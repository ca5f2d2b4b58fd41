"""Quote source providers."""

from signalscan.core.providers.yahoo import (
    USER_AGENTS,
    YahooChartClient,
    normalize_symbol,
    parse_chart_payload,
)

__all__ = ["YahooChartClient", "USER_AGENTS", "normalize_symbol", "parse_chart_payload"]
