"""signalscan - 技术指标批量扫描库

从Yahoo图表接口获取日线数据, 计算RSI、MFI、布林带与三重超卖信号.
所有入口均为异步, 单个股票的失败不会影响整批结果.
"""

from collections.abc import Sequence

from signalscan.core import (
    AnalysisResult,
    BatchScheduler,
    BollingerPosition,
    FetchOutcome,
    NormalizedSeries,
    SignalScanConfig,
    VixSnapshot,
    YahooChartClient,
    fetch_vix_snapshot,
    reevaluate,
)

__version__ = "0.1.0"


async def fetch_many(tickers: Sequence[str], config: SignalScanConfig | None = None) -> list[FetchOutcome]:
    """批量获取日线数据

    Args:
        tickers: 股票代码列表
        config: 配置, 默认使用内置默认值

    Returns:
        与输入等长且顺序一致的FetchOutcome列表

    Examples:
        >>> import asyncio, signalscan
        >>> outcomes = asyncio.run(signalscan.fetch_many(["AAPL", "BRK.B"]))
    """
    async with BatchScheduler(config=config) as scheduler:
        return await scheduler.fetch_many(tickers)


async def analyze_many(tickers: Sequence[str], config: SignalScanConfig | None = None) -> list[AnalysisResult]:
    """批量分析股票, 返回与输入等长且顺序一致的结果列表"""
    async with BatchScheduler(config=config) as scheduler:
        return await scheduler.analyze_many(tickers)


__all__ = [
    "__version__",
    "fetch_many",
    "analyze_many",
    "AnalysisResult",
    "BatchScheduler",
    "BollingerPosition",
    "FetchOutcome",
    "NormalizedSeries",
    "SignalScanConfig",
    "VixSnapshot",
    "YahooChartClient",
    "fetch_vix_snapshot",
    "reevaluate",
]
