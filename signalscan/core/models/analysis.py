"""Analysis result models."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from signalscan.core.exceptions import SignalScanError
from signalscan.core.models.series import NormalizedSeries


class BollingerPosition(str, Enum):
    """最新价格相对布林带的位置."""

    BELOW = "below"
    INSIDE = "inside"
    ABOVE = "above"


class AnalysisResult(BaseModel):
    """单个股票的分析结果.

    失败的结果同样返回: 指标字段为0.0, 位置为inside, triple_signal为False.
    """

    ticker: str
    current_price: float = 0.0
    rsi: float = 0.0
    mfi: float = 0.0
    bollinger_position: BollingerPosition = BollingerPosition.INSIDE
    bollinger_lower: float = 0.0
    bollinger_middle: float = 0.0
    bollinger_upper: float = 0.0
    triple_signal: bool = False
    error: str | None = None
    error_code: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class FetchOutcome:
    """批量获取中单个股票的结果."""

    ticker: str
    series: NormalizedSeries | None = None
    error: SignalScanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.series is not None
