"""数据规范化 - 将上游原始报价数组转换为日线序列"""

from datetime import UTC, datetime

from signalscan.core.models import NormalizedSeries, RawQuoteSeries


def epoch_to_date(timestamp: int) -> str:
    """将Unix秒转换为UTC日期 ``YYYY-MM-DD``"""
    return datetime.fromtimestamp(timestamp, tz=UTC).date().isoformat()


def _prices(values: list[float | None]) -> tuple[float, ...]:
    return tuple(0.0 if value is None else float(value) for value in values)


def normalize_series(raw: RawQuoteSeries, symbol: str) -> NormalizedSeries:
    """由原始序列构建 :class:`NormalizedSeries`

    缺失值保持原位置: 价格记为 ``0.0``, 成交量记为 ``0``.
    上游没有复权收盘价时使用收盘价代替.
    """
    closes = _prices(raw.closes)
    adj_closes = _prices(raw.adj_closes) if raw.adj_closes is not None else closes
    return NormalizedSeries(
        symbol=symbol,
        dates=tuple(epoch_to_date(ts) for ts in raw.timestamps),
        opens=_prices(raw.opens),
        highs=_prices(raw.highs),
        lows=_prices(raw.lows),
        closes=closes,
        adj_closes=adj_closes,
        volumes=tuple(0 if volume is None else int(volume) for volume in raw.volumes),
    )


def raw_from_series(series: NormalizedSeries) -> RawQuoteSeries:
    """由规范化序列还原原始序列 (时间戳取UTC零点)"""
    timestamps = [
        int(datetime.fromisoformat(date).replace(tzinfo=UTC).timestamp()) for date in series.dates
    ]
    return RawQuoteSeries(
        timestamps=timestamps,
        opens=list(series.opens),
        highs=list(series.highs),
        lows=list(series.lows),
        closes=list(series.closes),
        volumes=list(series.volumes),
        adj_closes=list(series.adj_closes),
    )
