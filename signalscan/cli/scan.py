"""Analysis and fetch commands for the signalscan CLI."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path

import typer

from signalscan.core.config import ConfigManager, SignalScanConfig
from signalscan.core.exceptions import ConfigurationError, SignalScanError
from signalscan.core.models import AnalysisResult, FetchOutcome
from signalscan.core.providers import YahooChartClient
from signalscan.core.services.batch import BatchScheduler
from signalscan.core.services.market import fetch_vix_snapshot

from .constants import PROVIDER_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import collect_symbols, emit_error, prepare_output

ANALYZE_COLUMNS = [
    "ticker",
    "current_price",
    "rsi",
    "mfi",
    "bollinger_position",
    "bollinger_lower",
    "bollinger_middle",
    "bollinger_upper",
    "triple_signal",
    "error",
]

FETCH_COLUMNS = ["ticker", "rows", "first_date", "last_date", "last_close", "error_code"]

VIX_COLUMNS = ["current", "fifty_day_avg", "rating"]


def register(app: typer.Typer) -> None:
    """Register the scan commands on the provided application."""

    app.command("analyze")(analyze_command)
    app.command("fetch")(fetch_command)
    app.command("vix")(vix_command)


def get_config() -> SignalScanConfig:
    """Factory hook for the effective configuration (file + environment)."""

    return ConfigManager().get_config()


def get_scheduler(config: SignalScanConfig) -> BatchScheduler:
    """Factory hook for obtaining a :class:`BatchScheduler`."""

    return BatchScheduler(config=config)


def get_quote_client(config: SignalScanConfig) -> YahooChartClient:
    """Factory hook for obtaining a :class:`YahooChartClient`."""

    return YahooChartClient(config.providers)


def _resolve_symbols(symbols: list[str] | None, symbols_from: Path | None) -> list[str]:
    try:
        collected = collect_symbols(symbols, symbols_from)
    except OSError as exc:
        emit_error(str(exc), "SYMBOL_FILE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    if not collected:
        emit_error("No symbols supplied.", "SYMBOLS_MISSING")
        raise typer.Exit(code=VALIDATION_EXIT_CODE)
    return collected


def analyze_command(
    ctx: typer.Context,
    symbols: list[str] | None = typer.Argument(None, help="Tickers to analyze."),
    symbols_from: Path | None = typer.Option(
        None,
        "--symbols-from",
        help="Read newline-delimited tickers from a file.",
    ),
    rsi_threshold: float | None = typer.Option(None, "--rsi-threshold", help="RSI oversold cutoff."),
    mfi_threshold: float | None = typer.Option(None, "--mfi-threshold", help="MFI oversold cutoff."),
    bb_multiplier: float | None = typer.Option(None, "--bb-multiplier", help="Bollinger band width multiplier."),
    concurrency: int | None = typer.Option(None, "--concurrency", min=1, help="Maximum concurrent tickers."),
    retry_rounds: int | None = typer.Option(
        None,
        "--retry-rounds",
        min=1,
        help="Rounds to repeat for rate-limited tickers.",
    ),
) -> None:
    """Analyze tickers and flag triple oversold signals."""

    collected = _resolve_symbols(symbols, symbols_from)

    config = get_config()
    overrides = {
        key: value
        for key, value in (
            ("rsi_threshold", rsi_threshold),
            ("mfi_threshold", mfi_threshold),
            ("bb_multiplier", bb_multiplier),
        )
        if value is not None
    }
    try:
        config = replace(config, signals=replace(config.signals, **overrides))
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    async def run() -> list[AnalysisResult]:
        async with get_scheduler(config) as scheduler:
            return await scheduler.analyze_many(collected, concurrency=concurrency, retry_rounds=retry_rounds)

    results = asyncio.run(run())

    rows = [result.model_dump(mode="json") for result in results]
    formatter, stream, stack = prepare_output(ctx)
    with stack:
        formatter.render(
            rows,
            stream=stream,
            columns=ANALYZE_COLUMNS,
            highlight=lambda row: bool(row.get("triple_signal")),
        )


def fetch_command(
    ctx: typer.Context,
    symbols: list[str] | None = typer.Argument(None, help="Tickers to fetch."),
    symbols_from: Path | None = typer.Option(
        None,
        "--symbols-from",
        help="Read newline-delimited tickers from a file.",
    ),
    concurrency: int | None = typer.Option(None, "--concurrency", min=1, help="Maximum concurrent tickers."),
) -> None:
    """Fetch daily history and summarize what was retrieved per ticker."""

    collected = _resolve_symbols(symbols, symbols_from)
    config = get_config()

    async def run() -> list[FetchOutcome]:
        async with get_scheduler(config) as scheduler:
            return await scheduler.fetch_many(collected, concurrency=concurrency)

    outcomes = asyncio.run(run())

    formatter, stream, stack = prepare_output(ctx)
    with stack:
        formatter.render([_outcome_to_row(outcome) for outcome in outcomes], stream=stream, columns=FETCH_COLUMNS)


def vix_command(ctx: typer.Context) -> None:
    """Show the current VIX level, its 50-day average and rating."""

    config = get_config()

    async def run():
        async with get_quote_client(config) as client:
            return await fetch_vix_snapshot(client)

    try:
        snapshot = asyncio.run(run())
    except SignalScanError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=PROVIDER_EXIT_CODE) from error

    formatter, stream, stack = prepare_output(ctx)
    with stack:
        formatter.render([snapshot.model_dump(mode="json")], stream=stream, columns=VIX_COLUMNS)


def _outcome_to_row(outcome: FetchOutcome) -> dict[str, object]:
    if not outcome.ok or outcome.series is None:
        return {
            "ticker": outcome.ticker,
            "rows": 0,
            "error_code": outcome.error.error_code if outcome.error else None,
        }
    series = outcome.series
    return {
        "ticker": outcome.ticker,
        "rows": len(series),
        "first_date": series.dates[0] if len(series) else None,
        "last_date": series.dates[-1] if len(series) else None,
        "last_close": series.last_close,
        "error_code": None,
    }


__all__ = ["register", "analyze_command", "fetch_command", "vix_command", "get_scheduler", "get_quote_client"]
