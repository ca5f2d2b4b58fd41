"""批量调度 - 有界并发的获取与分析管道."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from loguru import logger

from signalscan.core.config import SignalScanConfig
from signalscan.core.exceptions import ErrorCode, SignalScanError, TaskFaultError
from signalscan.core.logging import log_context
from signalscan.core.models import AnalysisResult, FetchOutcome
from signalscan.core.providers import YahooChartClient
from signalscan.core.services.signals import SignalComposer, error_result

T = TypeVar("T")

ProgressCallback = Callable[[int, int, str], None]


class BatchScheduler:
    """批量调度器.

    每次批量调用创建一个独立的 ``asyncio.Semaphore``; 每个股票一个任务,
    获得许可后先随机抖动再执行. 输出与输入一一对应且顺序一致.
    """

    def __init__(
        self,
        client: YahooChartClient | None = None,
        config: SignalScanConfig | None = None,
        composer: SignalComposer | None = None,
        rng: random.Random | None = None,
    ):
        """初始化批量调度器.

        Args:
            client: 行情客户端, 为None时按配置创建并由调度器负责关闭
            config: 主配置
            composer: 信号合成器, 默认使用配置中的信号参数
            rng: 抖动随机源, 默认使用系统熵源
        """
        self.config = config or SignalScanConfig()
        self._owns_client = client is None
        self.client = client or YahooChartClient(self.config.providers)
        self.composer = composer or SignalComposer(self.config.signals)
        self._rng = rng or random.SystemRandom()

    async def __aenter__(self) -> BatchScheduler:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _jitter(self) -> float:
        low = self.config.batch.jitter_min
        high = self.config.batch.jitter_max
        return low + self._rng.random() * (high - low)

    async def _run_bounded(
        self,
        tickers: Sequence[str],
        limit: int,
        work: Callable[[str], Awaitable[T]],
        on_progress: ProgressCallback | None,
    ) -> list[T]:
        semaphore = asyncio.Semaphore(limit)
        total = len(tickers)
        done = 0

        async def unit(ticker: str) -> T:
            nonlocal done
            async with semaphore:
                delay = self._jitter()
                if delay > 0:
                    await asyncio.sleep(delay)
                result = await work(ticker)
            done += 1
            if on_progress is not None:
                try:
                    on_progress(done, total, ticker)
                except Exception as e:
                    logger.bind(ticker=ticker).opt(exception=e).error("Progress callback failed")
            return result

        return list(await asyncio.gather(*(unit(ticker) for ticker in tickers)))

    async def _fetch_one(self, ticker: str) -> FetchOutcome:
        try:
            series = await self.client.fetch_series(ticker)
        except SignalScanError as e:
            logger.bind(ticker=ticker, error_code=e.error_code).warning("Fetch failed: {}", e.message)
            return FetchOutcome(ticker=ticker, error=e)
        except Exception as e:
            fault = TaskFaultError(ticker, e)
            logger.bind(ticker=ticker, error_code=fault.error_code).opt(exception=e).error("Fetch task fault")
            return FetchOutcome(ticker=ticker, error=fault)
        return FetchOutcome(ticker=ticker, series=series)

    async def _analyze_one(self, ticker: str) -> AnalysisResult:
        try:
            series = await self.client.fetch_series(ticker)
            return self.composer.compose(ticker, series)
        except SignalScanError as e:
            logger.bind(ticker=ticker, error_code=e.error_code).warning("Analysis degraded: {}", e.message)
            return error_result(ticker, e)
        except Exception as e:
            fault = TaskFaultError(ticker, e)
            logger.bind(ticker=ticker, error_code=fault.error_code).opt(exception=e).error("Analysis task fault")
            return error_result(ticker, fault)

    async def fetch_many(
        self,
        tickers: Sequence[str],
        *,
        concurrency: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[FetchOutcome]:
        """批量获取日线序列, 每个输入股票返回一个FetchOutcome."""
        limit = concurrency or self.config.batch.fetch_concurrency
        with log_context(operation="fetch_many"):
            logger.info("Fetching {} tickers with concurrency {}", len(tickers), limit)
            outcomes = await self._run_bounded(tickers, limit, self._fetch_one, on_progress)
            failed = sum(1 for outcome in outcomes if not outcome.ok)
            logger.info("Fetch completed: {} ok, {} failed", len(outcomes) - failed, failed)
        return outcomes

    async def analyze_many(
        self,
        tickers: Sequence[str],
        *,
        concurrency: int | None = None,
        retry_rounds: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[AnalysisResult]:
        """批量分析, 每个输入股票返回一个AnalysisResult.

        ``retry_rounds`` 大于1时, 被限流的股票会在 ``round_delay`` 秒后重新分析,
        结果按原位置合并.
        """
        limit = concurrency or self.config.batch.analyze_concurrency
        rounds = retry_rounds or self.config.batch.retry_rounds
        with log_context(operation="analyze_many"):
            logger.info("Analyzing {} tickers with concurrency {}", len(tickers), limit)
            results = await self._run_bounded(tickers, limit, self._analyze_one, on_progress)

            for round_number in range(2, rounds + 1):
                pending = [
                    i for i, result in enumerate(results) if result.error_code == ErrorCode.RATE_LIMITED.value
                ]
                if not pending:
                    break
                logger.info(
                    "Round {}: retrying {} rate-limited tickers after {}s",
                    round_number,
                    len(pending),
                    self.config.batch.round_delay,
                )
                await asyncio.sleep(self.config.batch.round_delay)
                retried = await self._run_bounded(
                    [tickers[i] for i in pending], limit, self._analyze_one, on_progress
                )
                for i, result in zip(pending, retried):
                    results[i] = result

            failed = sum(1 for result in results if result.failed)
            signals = sum(1 for result in results if result.triple_signal)
            logger.info(
                "Analysis completed: {} ok, {} failed, {} triple signals",
                len(results) - failed,
                failed,
                signals,
            )
        return results

    async def rerun_failed(
        self,
        results: Sequence[AnalysisResult],
        *,
        concurrency: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[AnalysisResult]:
        """只重新分析失败的结果, 并按原位置合并."""
        merged = list(results)
        pending = [i for i, result in enumerate(merged) if result.failed]
        if not pending:
            return merged

        retried = await self.analyze_many(
            [merged[i].ticker for i in pending],
            concurrency=concurrency,
            retry_rounds=1,
            on_progress=on_progress,
        )
        for i, result in zip(pending, retried):
            merged[i] = result
        return merged
