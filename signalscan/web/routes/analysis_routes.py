"""
分析相关 API 路由
"""

from fastapi import APIRouter, HTTPException, Request
from loguru import logger

from signalscan.core.providers import YahooChartClient
from signalscan.core.services.batch import BatchScheduler
from signalscan.core.services.market import fetch_vix_snapshot
from signalscan.web.models import (
    AnalyzeResponse,
    FetchResponse,
    FetchRow,
    MarketIndicatorsResponse,
    TickersRequest,
)

router = APIRouter()


def _require_tickers(payload: TickersRequest) -> list[str]:
    tickers = payload.cleaned()
    if not tickers:
        raise HTTPException(status_code=400, detail="Tickers array is required")
    return tickers


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(payload: TickersRequest, request: Request) -> AnalyzeResponse:
    """
    批量分析股票

    每个请求的股票都会返回一个结果; 失败的股票带有 error 字段, 不会导致整个请求失败.
    """
    tickers = _require_tickers(payload)
    scheduler: BatchScheduler = request.app.state.scheduler
    results = await scheduler.analyze_many(tickers)
    logger.bind(endpoint="/api/analyze").info("Analyzed {} tickers", len(results))
    return AnalyzeResponse(results=results)


@router.post("/fetch", response_model=FetchResponse)
async def fetch(payload: TickersRequest, request: Request) -> FetchResponse:
    """批量获取日线数据"""
    tickers = _require_tickers(payload)
    scheduler: BatchScheduler = request.app.state.scheduler
    outcomes = await scheduler.fetch_many(tickers)
    return FetchResponse(results=[FetchRow.from_outcome(outcome) for outcome in outcomes])


@router.get("/market-indicators", response_model=MarketIndicatorsResponse)
async def market_indicators(request: Request) -> MarketIndicatorsResponse:
    """VIX 快照"""
    client: YahooChartClient = request.app.state.quote_client
    snapshot = await fetch_vix_snapshot(client)
    return MarketIndicatorsResponse(vix=snapshot)
