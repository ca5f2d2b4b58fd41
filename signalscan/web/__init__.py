"""
Web API 模块 - FastAPI 网络服务实现
"""

from signalscan.web.app import create_app
from signalscan.web.models import ErrorResponse
from signalscan.web.routes import analysis_router, health_router

__all__ = ["create_app", "analysis_router", "health_router", "ErrorResponse"]
