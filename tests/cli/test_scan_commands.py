from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from signalscan import __version__
from signalscan.cli import scan as scan_module
from signalscan.cli.main import create_app
from signalscan.core.config import SignalScanConfig
from signalscan.core.exceptions import RateLimitedError
from signalscan.core.models import AnalysisResult, BollingerPosition, FetchOutcome, NormalizedSeries, VixSnapshot
from signalscan.core.services.signals import error_result


class StubScheduler:
    def __init__(self, config: SignalScanConfig) -> None:
        self.config = config
        self.calls: list[dict[str, object]] = []

    async def __aenter__(self) -> StubScheduler:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def analyze_many(self, tickers, *, concurrency=None, retry_rounds=None):
        self.calls.append({"tickers": list(tickers), "concurrency": concurrency, "retry_rounds": retry_rounds})
        results = []
        for ticker in tickers:
            if ticker == "FAIL":
                results.append(error_result(ticker, RateLimitedError(ticker)))
            else:
                results.append(
                    AnalysisResult(
                        ticker=ticker,
                        current_price=90.0,
                        rsi=30.12,
                        mfi=25.5,
                        bollinger_position=BollingerPosition.BELOW,
                        bollinger_lower=91.0,
                        bollinger_middle=95.0,
                        bollinger_upper=99.0,
                        triple_signal=True,
                    )
                )
        return results

    async def fetch_many(self, tickers, *, concurrency=None):
        self.calls.append({"tickers": list(tickers), "concurrency": concurrency})
        outcomes = []
        for ticker in tickers:
            if ticker == "FAIL":
                outcomes.append(FetchOutcome(ticker=ticker, error=RateLimitedError(ticker)))
            else:
                series = NormalizedSeries(
                    symbol=ticker,
                    dates=("2024-01-01", "2024-01-02"),
                    opens=(1.0, 2.0),
                    highs=(1.0, 2.0),
                    lows=(1.0, 2.0),
                    closes=(1.0, 2.5),
                    adj_closes=(1.0, 2.5),
                    volumes=(10, 20),
                )
                outcomes.append(FetchOutcome(ticker=ticker, series=series))
        return outcomes


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def schedulers(monkeypatch: pytest.MonkeyPatch) -> list[StubScheduler]:
    created: list[StubScheduler] = []

    def factory(config: SignalScanConfig) -> StubScheduler:
        scheduler = StubScheduler(config)
        created.append(scheduler)
        return scheduler

    monkeypatch.setattr(scan_module, "get_config", lambda: SignalScanConfig())
    monkeypatch.setattr(scan_module, "get_scheduler", factory)
    return created


def _jsonl(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_analyze_jsonl_output(runner: CliRunner, schedulers: list[StubScheduler]) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "--log-level", "ERROR", "analyze", "AAPL", "FAIL"])

    assert result.exit_code == 0, result.output
    rows = _jsonl(result.stdout)
    assert [row["ticker"] for row in rows] == ["AAPL", "FAIL"]
    assert rows[0]["triple_signal"] is True
    assert rows[0]["bollinger_position"] == "below"
    assert rows[1]["error"] == "API_RATE_LIMIT"
    assert rows[1]["rsi"] == 0.0


def test_analyze_table_output(runner: CliRunner, schedulers: list[StubScheduler]) -> None:
    result = runner.invoke(create_app(), ["--no-color", "--log-level", "ERROR", "analyze", "AAPL"])

    assert result.exit_code == 0, result.output
    assert "AAPL" in result.stdout


def test_analyze_applies_overrides(runner: CliRunner, schedulers: list[StubScheduler]) -> None:
    result = runner.invoke(
        create_app(),
        [
            "--format",
            "jsonl",
            "--log-level",
            "ERROR",
            "analyze",
            "AAPL",
            "--rsi-threshold",
            "30",
            "--bb-multiplier",
            "2",
            "--concurrency",
            "1",
            "--retry-rounds",
            "3",
        ],
    )

    assert result.exit_code == 0, result.output
    scheduler = schedulers[0]
    assert scheduler.config.signals.rsi_threshold == 30.0
    assert scheduler.config.signals.mfi_threshold == 35.0
    assert scheduler.config.signals.bb_multiplier == 2.0
    assert scheduler.calls[0]["concurrency"] == 1
    assert scheduler.calls[0]["retry_rounds"] == 3


def test_analyze_invalid_override(runner: CliRunner, schedulers: list[StubScheduler]) -> None:
    result = runner.invoke(create_app(), ["analyze", "AAPL", "--bb-multiplier", "-1"])

    assert result.exit_code == 2
    assert "CONFIG_ERROR" in result.output
    assert schedulers == []


def test_analyze_without_symbols(runner: CliRunner, schedulers: list[StubScheduler]) -> None:
    result = runner.invoke(create_app(), ["analyze"])

    assert result.exit_code == 2
    assert "SYMBOLS_MISSING" in result.output


def test_analyze_symbols_from_file(runner: CliRunner, schedulers: list[StubScheduler], tmp_path: Path) -> None:
    path = tmp_path / "tickers.txt"
    path.write_text("MSFT\n\n# watchlist\nBRK.B  # berkshire\n", encoding="utf-8")

    result = runner.invoke(
        create_app(),
        ["--format", "jsonl", "--log-level", "ERROR", "analyze", "AAPL", "--symbols-from", str(path)],
    )

    assert result.exit_code == 0, result.output
    assert schedulers[0].calls[0]["tickers"] == ["AAPL", "MSFT", "BRK.B"]


def test_missing_symbols_file(runner: CliRunner, schedulers: list[StubScheduler], tmp_path: Path) -> None:
    result = runner.invoke(create_app(), ["analyze", "--symbols-from", str(tmp_path / "nope.txt")])

    assert result.exit_code == 2
    assert "SYMBOL_FILE_ERROR" in result.output


def test_output_file(runner: CliRunner, schedulers: list[StubScheduler], tmp_path: Path) -> None:
    target = tmp_path / "out.jsonl"

    result = runner.invoke(
        create_app(),
        ["--format", "jsonl", "--output", str(target), "--log-level", "ERROR", "analyze", "AAPL"],
    )

    assert result.exit_code == 0, result.output
    assert _jsonl(target.read_text(encoding="utf-8"))[0]["ticker"] == "AAPL"


def test_fetch_summary(runner: CliRunner, schedulers: list[StubScheduler]) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "--log-level", "ERROR", "fetch", "AAPL", "FAIL"])

    assert result.exit_code == 0, result.output
    rows = _jsonl(result.stdout)
    assert rows[0] == {
        "ticker": "AAPL",
        "rows": 2,
        "first_date": "2024-01-01",
        "last_date": "2024-01-02",
        "last_close": 2.5,
        "error_code": None,
    }
    assert rows[1]["rows"] == 0
    assert rows[1]["error_code"] == "API_RATE_LIMIT"


def test_vix(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_snapshot(client):
        return VixSnapshot(current=18.2, fifty_day_avg=16.5, rating="Neutral")

    class DummyClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

    monkeypatch.setattr(scan_module, "get_config", lambda: SignalScanConfig())
    monkeypatch.setattr(scan_module, "get_quote_client", lambda config: DummyClient())
    monkeypatch.setattr(scan_module, "fetch_vix_snapshot", fake_snapshot)

    result = runner.invoke(create_app(), ["--format", "jsonl", "--log-level", "ERROR", "vix"])

    assert result.exit_code == 0, result.output
    assert _jsonl(result.stdout) == [{"current": 18.2, "fifty_day_avg": 16.5, "rating": "Neutral"}]


def test_vix_failure(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_snapshot(client):
        raise RateLimitedError("^VIX")

    class DummyClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

    monkeypatch.setattr(scan_module, "get_config", lambda: SignalScanConfig())
    monkeypatch.setattr(scan_module, "get_quote_client", lambda config: DummyClient())
    monkeypatch.setattr(scan_module, "fetch_vix_snapshot", failing_snapshot)

    result = runner.invoke(create_app(), ["vix"])

    assert result.exit_code == 3
    assert "API_RATE_LIMIT" in result.output


def test_invalid_format(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--format", "xml", "version"])

    assert result.exit_code != 0


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
