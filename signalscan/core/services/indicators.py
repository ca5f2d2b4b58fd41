"""技术指标计算 - 基于普通浮点序列的纯函数

运算顺序固定, 相同输入得到逐位一致的结果.
"""

import math
from collections.abc import Sequence
from typing import NamedTuple


class BollingerBands(NamedTuple):
    upper: float
    middle: float
    lower: float


def round2(value: float) -> float:
    """保留两位小数, 中间值远离零舍入 (0.125 -> 0.13)."""
    return math.copysign(math.floor(abs(value) * 100 + 0.5), value) / 100


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be at least 1, got {period}")


def calculate_rsi(prices: Sequence[float], period: int = 14) -> float:
    """相对强弱指数 (Wilder平滑)

    价格少于 ``period + 1`` 个时返回 ``0.0``, 平均损失为0时返回 ``100.0``.
    """
    _check_period(period)
    if len(prices) < period + 1:
        return 0.0

    gains: list[float] = []
    losses: list[float] = []
    for i in range(1, len(prices)):
        change = prices[i] - prices[i - 1]
        gains.append(change if change > 0 else 0.0)
        losses.append(-change if change < 0 else 0.0)

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for i in range(period, len(gains)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def calculate_mfi(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    period: int = 14,
) -> float:
    """资金流量指数, 只统计最近 ``period`` 天

    每天的典型价格与前一天比较. 收盘价少于 ``period + 1`` 个时返回 ``0.0``,
    没有负向资金流时返回 ``100.0``.
    """
    _check_period(period)
    if len(closes) < period + 1:
        return 0.0

    typical = [(highs[i] + lows[i] + closes[i]) / 3.0 for i in range(len(closes))]

    positive_flow = 0.0
    negative_flow = 0.0
    start = max(1, len(closes) - period)
    for i in range(start, len(closes)):
        money_flow = typical[i] * volumes[i]
        if typical[i] > typical[i - 1]:
            positive_flow += money_flow
        elif typical[i] < typical[i - 1]:
            negative_flow += money_flow

    if negative_flow == 0:
        return 100.0

    ratio = positive_flow / negative_flow
    return 100.0 - 100.0 / (1.0 + ratio)


def calculate_bollinger_bands(
    prices: Sequence[float],
    period: int = 20,
    multiplier: float = 1.0,
) -> BollingerBands:
    """布林带: 最近 ``period`` 个价格的均值与总体标准差"""
    _check_period(period)
    if len(prices) < period:
        return BollingerBands(0.0, 0.0, 0.0)

    window = prices[len(prices) - period :]
    mean = sum(window) / period
    variance = sum((price - mean) ** 2 for price in window) / period
    std = math.sqrt(variance)

    return BollingerBands(
        upper=mean + std * multiplier,
        middle=mean,
        lower=mean - std * multiplier,
    )
