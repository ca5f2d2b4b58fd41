"""信号合成 - 由指标与最新价格生成分析结果"""

from loguru import logger

from signalscan.core.config import SignalConfig
from signalscan.core.exceptions import InsufficientDataError, SignalScanError
from signalscan.core.models import AnalysisResult, BollingerPosition, NormalizedSeries
from signalscan.core.services.indicators import (
    calculate_bollinger_bands,
    calculate_mfi,
    calculate_rsi,
    round2,
)


def error_result(ticker: str, error: SignalScanError, current_price: float = 0.0) -> AnalysisResult:
    """由异常构造降级结果: 指标全部为0.0, 位置为inside."""
    return AnalysisResult(
        ticker=ticker,
        current_price=current_price,
        error=error.message,
        error_code=error.error_code,
    )


def classify_position(price: float, lower: float, upper: float) -> BollingerPosition:
    """判断价格相对布林带的位置, 边界值归入below/above."""
    if price <= lower:
        return BollingerPosition.BELOW
    if price >= upper:
        return BollingerPosition.ABOVE
    return BollingerPosition.INSIDE


class SignalComposer:
    """信号合成器"""

    def __init__(self, config: SignalConfig | None = None):
        self.config = config or SignalConfig()

    def compose(self, ticker: str, series: NormalizedSeries) -> AnalysisResult:
        """计算指标并生成三重信号

        Args:
            ticker: 股票代码
            series: 规范化后的日线序列

        Returns:
            AnalysisResult: 历史数据不足时返回带错误的降级结果, 不抛出异常
        """
        cfg = self.config
        if len(series.closes) < cfg.min_history:
            error = InsufficientDataError(ticker, len(series.closes), cfg.min_history)
            logger.bind(ticker=ticker, error_code=error.error_code).info(
                "Only {} closes available, need {}", error.available, error.required
            )
            return error_result(ticker, error, current_price=series.last_close)

        adj_closes = series.adj_closes
        rsi = calculate_rsi(adj_closes, cfg.rsi_period)
        mfi = calculate_mfi(series.highs, series.lows, adj_closes, series.volumes, cfg.mfi_period)
        bands = calculate_bollinger_bands(adj_closes, cfg.bb_period, cfg.bb_multiplier)

        latest_adj = adj_closes[-1]
        position = classify_position(latest_adj, bands.lower, bands.upper)
        triple = rsi < cfg.rsi_threshold and mfi < cfg.mfi_threshold and latest_adj <= bands.lower

        return AnalysisResult(
            ticker=ticker,
            current_price=series.last_close,
            rsi=round2(rsi),
            mfi=round2(mfi),
            bollinger_position=position,
            bollinger_lower=round2(bands.lower),
            bollinger_middle=round2(bands.middle),
            bollinger_upper=round2(bands.upper),
            triple_signal=triple,
        )


def reevaluate(result: AnalysisResult, config: SignalConfig) -> AnalysisResult:
    """以新的阈值重新判定三重信号, 无需重新获取数据

    使用结果中保存的 (已取两位小数的) RSI/MFI 与布林带位置. 失败结果保持False.
    """
    if result.failed:
        return result.model_copy(update={"triple_signal": False})

    triple = (
        result.rsi < config.rsi_threshold
        and result.mfi < config.mfi_threshold
        and result.bollinger_position == BollingerPosition.BELOW
    )
    return result.model_copy(update={"triple_signal": triple})
