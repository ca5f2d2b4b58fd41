"""
Web API 数据模型
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from signalscan.core.models import AnalysisResult, FetchOutcome, VixSnapshot


class TickersRequest(BaseModel):
    """批量请求模型"""

    tickers: list[str] = Field(..., min_length=1, max_length=500, description="股票代码列表, 如 AAPL, BRK.B")

    def cleaned(self) -> list[str]:
        """去除空白项, 保留顺序与重复项"""
        return [ticker.strip() for ticker in self.tickers if ticker.strip()]


class AnalyzeResponse(BaseModel):
    results: list[AnalysisResult]


class FetchRow(BaseModel):
    """单个股票的获取结果"""

    ticker: str
    dates: list[str] = Field(default_factory=list)
    closes: list[float] = Field(default_factory=list)
    adj_closes: list[float] = Field(default_factory=list)
    volumes: list[int] = Field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def from_outcome(cls, outcome: FetchOutcome) -> "FetchRow":
        if outcome.series is None:
            return cls(
                ticker=outcome.ticker,
                error=outcome.error.message if outcome.error else None,
                error_code=outcome.error.error_code if outcome.error else None,
            )
        series = outcome.series
        return cls(
            ticker=outcome.ticker,
            dates=list(series.dates),
            closes=list(series.closes),
            adj_closes=list(series.adj_closes),
            volumes=list(series.volumes),
        )


class FetchResponse(BaseModel):
    results: list[FetchRow]


class MarketIndicatorsResponse(BaseModel):
    vix: VixSnapshot


class ErrorResponse(BaseModel):
    """错误响应格式"""

    code: str = Field(..., description="错误代码")
    message: str = Field(..., description="错误消息")
    details: dict[str, Any] | None = Field(None, description="详细错误信息")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), description="错误时间戳")
