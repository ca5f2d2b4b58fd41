"""
Web API 路由模块
"""

from signalscan.web.routes.analysis_routes import router as analysis_router
from signalscan.web.routes.health_routes import router as health_router

__all__ = ["analysis_router", "health_router"]
