"""
Yahoo chart API client.

One GET per ticker against the v8 chart endpoint with User-Agent rotation,
a bounded retry loop and classification of upstream failures into the
``QuoteSourceError`` hierarchy. A single ``httpx.AsyncClient`` is shared by
every concurrent request made through the client.
"""

from __future__ import annotations

import asyncio
import json
import random
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from signalscan.core.config import ProviderConfig
from signalscan.core.exceptions import (
    HttpStatusError,
    NetworkError,
    ParseError,
    QuoteSourceError,
    RateLimitedError,
)
from signalscan.core.models import NormalizedSeries, RawQuoteSeries
from signalscan.core.services.normalizer import normalize_series

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:120.0) Gecko/20100101 Firefox/120.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36 Edg/119.0.0.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 OPR/106.0.0.0",
)

_rng = random.SystemRandom()


def normalize_symbol(ticker: str) -> str:
    """Map share-class separators to the upstream form (``BRK.B`` -> ``BRK-B``)."""
    return ticker.strip().replace(".", "-")


def pick_user_agent() -> str:
    return _rng.choice(USER_AGENTS)


def _first_block(value: Any) -> dict[str, Any] | None:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None


def parse_chart_payload(payload: Any, symbol: str) -> RawQuoteSeries:
    """Extract the first chart result of a v8 payload into a raw series.

    Structural absence is not retried: the upstream answered, it simply has
    nothing for this symbol. Blocks of an unexpected shape count as absent.
    """
    chart = payload.get("chart") if isinstance(payload, dict) else None
    result = _first_block(chart.get("result")) if isinstance(chart, dict) else None
    if result is None:
        raise ParseError(symbol, "no chart result", retryable=False)

    timestamps = result.get("timestamp")
    if not isinstance(timestamps, list) or not timestamps:
        raise ParseError(symbol, "missing timestamp array", retryable=False)

    indicators = result.get("indicators")
    if not isinstance(indicators, dict):
        indicators = {}
    quote = _first_block(indicators.get("quote"))
    if not quote:
        raise ParseError(symbol, "missing quote block", retryable=False)

    adj_block = _first_block(indicators.get("adjclose"))
    adj_closes = adj_block.get("adjclose") if adj_block else None

    size = len(timestamps)
    try:
        return RawQuoteSeries(
            timestamps=timestamps,
            opens=quote.get("open") or [None] * size,
            highs=quote.get("high") or [None] * size,
            lows=quote.get("low") or [None] * size,
            closes=quote.get("close") or [None] * size,
            volumes=quote.get("volume") or [None] * size,
            adj_closes=adj_closes,
        )
    except ValidationError as e:
        raise ParseError(symbol, f"inconsistent quote arrays: {e.error_count()} errors", retryable=False) from e


class YahooChartClient:
    """Async client for the Yahoo v8 chart endpoint."""

    def __init__(
        self,
        config: ProviderConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ProviderConfig()
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> YahooChartClient:
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                limits=httpx.Limits(
                    max_connections=self.config.max_connections,
                    keepalive_expiry=self.config.keepalive_expiry,
                ),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def build_url(self, ticker: str) -> str:
        symbol = normalize_symbol(ticker)
        base = self.config.base_url.rstrip("/")
        return f"{base}/v8/finance/chart/{symbol}"

    def build_params(self) -> dict[str, str]:
        return {
            "range": self.config.chart_range,
            "interval": self.config.interval,
            "includeAdjustedClose": "true",
        }

    async def _attempt(self, ticker: str) -> NormalizedSeries:
        client = self._ensure_client()
        headers = {"User-Agent": pick_user_agent(), "Accept": "application/json"}
        try:
            response = await client.get(self.build_url(ticker), params=self.build_params(), headers=headers)
        except httpx.TransportError as e:
            raise NetworkError(ticker, f"{type(e).__name__}: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError(ticker)
        if not response.is_success:
            raise HttpStatusError(ticker, response.status_code)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(ticker, f"invalid JSON body: {e}") from e

        raw = parse_chart_payload(payload, ticker)
        return normalize_series(raw, ticker)

    async def fetch_series(self, ticker: str) -> NormalizedSeries:
        """Fetch the trailing daily window for ``ticker``.

        Retries rate limits, non-2xx statuses, transport failures and
        malformed JSON up to ``max_attempts`` times, sleeping
        ``backoff_base * (attempt - 1)`` seconds before each attempt. The
        last error is re-raised once attempts are exhausted.
        """
        max_attempts = self.config.max_attempts
        attempt = 1
        while True:
            delay = self.config.backoff_base * (attempt - 1)
            if delay > 0:
                await asyncio.sleep(delay)
            try:
                return await self._attempt(ticker)
            except QuoteSourceError as e:
                if not e.retryable or attempt >= max_attempts:
                    raise
                logger.bind(ticker=ticker, error_code=e.error_code).warning(
                    "Attempt {}/{} failed: {}", attempt, max_attempts, e.message
                )
            attempt += 1
