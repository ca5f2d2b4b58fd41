"""Pytest configuration for the signalscan test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from signalscan.core.config import BatchConfig, ProviderConfig, SignalScanConfig

DAY = 86_400
BASE_TS = 1_704_067_200  # 2024-01-01T00:00:00Z


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--signalscan-run-integration",
        action="store_true",
        default=False,
        help="Run signalscan integration tests that reach the live chart API.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: marks signalscan tests requiring network access",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--signalscan-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --signalscan-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def build_chart_payload(
    closes: list[float | None],
    *,
    highs: list[float | None] | None = None,
    lows: list[float | None] | None = None,
    volumes: list[int | None] | None = None,
    adj_closes: list[float | None] | None = None,
    include_adjclose: bool = True,
) -> dict[str, Any]:
    """Build a Yahoo v8 chart payload with one bar per day from 2024-01-01."""

    size = len(closes)
    quote = {
        "open": list(closes),
        "high": highs if highs is not None else [None if c is None else c + 1.0 for c in closes],
        "low": lows if lows is not None else [None if c is None else c - 1.0 for c in closes],
        "close": list(closes),
        "volume": volumes if volumes is not None else [1_000_000] * size,
    }
    indicators: dict[str, Any] = {"quote": [quote]}
    if include_adjclose:
        indicators["adjclose"] = [{"adjclose": adj_closes if adj_closes is not None else list(closes)}]
    return {
        "chart": {
            "result": [
                {
                    "meta": {"currency": "USD", "symbol": "TEST"},
                    "timestamp": [BASE_TS + i * DAY for i in range(size)],
                    "indicators": indicators,
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def chart_payload() -> Callable[..., dict[str, Any]]:
    return build_chart_payload


@pytest.fixture
def fast_config() -> SignalScanConfig:
    """Configuration without backoff or jitter sleeps."""

    return SignalScanConfig(
        providers=ProviderConfig(base_url="https://chart.test", backoff_base=0.0),
        batch=BatchConfig(jitter_min=0.0, jitter_max=0.0, round_delay=0.0),
    )
