"""
健康检查路由
"""

from fastapi import APIRouter

from signalscan import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """基础健康检查"""
    return {"status": "ok", "version": __version__}
