"""
FastAPI 应用工厂
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from signalscan import __version__
from signalscan.core.config import ConfigManager, SignalScanConfig
from signalscan.core.exceptions import InsufficientDataError, SignalScanError
from signalscan.core.logging import configure_logging
from signalscan.core.providers import YahooChartClient
from signalscan.core.services.batch import BatchScheduler
from signalscan.web.models import ErrorResponse
from signalscan.web.routes import analysis_router, health_router


def create_app(
    config: SignalScanConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """创建 FastAPI 应用实例

    Args:
        config: 配置, 默认由 ConfigManager 加载
        http_client: 可选的外部 httpx 客户端, 由调用方负责关闭
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        resolved = config or ConfigManager().get_config()
        quote_client = YahooChartClient(resolved.providers, http_client=http_client)
        app.state.config = resolved
        app.state.quote_client = quote_client
        app.state.scheduler = BatchScheduler(client=quote_client, config=resolved)
        logger.info("signalscan web service started")
        try:
            yield
        finally:
            await quote_client.aclose()

    app = FastAPI(
        title="signalscan",
        description="Batch RSI / MFI / Bollinger oversold scanner",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(analysis_router, prefix="/api", tags=["analysis"])

    _setup_exception_handlers(app)
    return app


def _setup_exception_handlers(app: FastAPI) -> None:
    """配置异常处理器"""

    @app.exception_handler(SignalScanError)
    async def signalscan_exception_handler(request: Request, exc: SignalScanError) -> JSONResponse:
        status_code = 404 if isinstance(exc, InsufficientDataError) else 502
        logger.bind(error_code=exc.error_code).warning("{} failed: {}", request.url.path, exc.message)
        content = ErrorResponse(code=exc.error_code, message=exc.message, details=exc.details)
        return JSONResponse(status_code=status_code, content=content.model_dump(mode="json"))


def build_default_app() -> FastAPI:
    """按环境配置日志并创建应用, 供 uvicorn 工厂模式使用"""
    config = ConfigManager().get_config()
    configure_logging(
        config.logging.level,
        serialize=config.logging.serialize,
        file_output=bool(config.logging.file),
        file_path=config.logging.file,
    )
    return create_app(config)
