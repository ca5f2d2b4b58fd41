"""市场指标 - VIX波动率快照"""

from loguru import logger

from signalscan.core.exceptions import InsufficientDataError
from signalscan.core.models import VixSnapshot
from signalscan.core.providers import YahooChartClient
from signalscan.core.services.indicators import round2

VIX_SYMBOL = "^VIX"
AVERAGE_WINDOW = 50


def rate_vix(value: float) -> str:
    if value < 15:
        return "Low"
    if value < 20:
        return "Neutral"
    if value < 30:
        return "Elevated"
    return "High"


async def fetch_vix_snapshot(client: YahooChartClient) -> VixSnapshot:
    """获取VIX序列, 计算最新值与50日均值

    上游缺失的收盘价会被跳过.
    """
    series = await client.fetch_series(VIX_SYMBOL)
    valid = [close for close in series.closes if close > 0]
    if not valid:
        raise InsufficientDataError(VIX_SYMBOL, 0, 1)

    current = round2(valid[-1])
    window = valid[-AVERAGE_WINDOW:]
    average = round2(sum(window) / len(window))
    snapshot = VixSnapshot(current=current, fifty_day_avg=average, rating=rate_vix(current))
    logger.bind(ticker=VIX_SYMBOL).debug("VIX {} ({}), 50-day average {}", current, snapshot.rating, average)
    return snapshot
