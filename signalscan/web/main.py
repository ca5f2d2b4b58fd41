"""
Web 服务启动脚本
"""

import os

import uvicorn


def signalscan_web_main() -> None:
    """启动 FastAPI Web 服务"""

    host = os.getenv("SIGNALSCAN_HOST", "0.0.0.0")
    port = int(os.getenv("SIGNALSCAN_PORT", "8000"))
    reload = os.getenv("SIGNALSCAN_RELOAD", "false").lower() == "true"

    uvicorn.run(
        "signalscan.web.app:build_default_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    signalscan_web_main()
