"""
FastAPI 应用入口
"""
import sys
import logging
from contextlib import asynccontextmanager
from pathlib import Path

# 确保项目根目录在 Python 路径中，支持直接运行此文件
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from app.core.config import settings

# 配置日志系统
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# 设置 uvicorn 日志级别
logging.getLogger("uvicorn").setLevel(logging.INFO)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import router
from app.core.exceptions import BusinessException
from app.middleware.logging import LoggingMiddleware
from app.middleware.exception_handler import (
    business_exception_handler,
    exception_handler,
    http_exception_handler,
    pydantic_validation_handler,
    validation_exception_handler,
)
from domain.tools.registry import TOOL_REGISTRY
from infrastructure.database.connection import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理

    Args:
        app: FastAPI 应用实例
    """
    logger.info(f"正在启动应用: {settings.APP_NAME} v{settings.APP_VERSION}")
    try:
        if settings.DB_AUTO_CREATE:
            await init_db()
            logger.info("数据库表已创建")

        logger.info(f"已注册 MCP 工具: {list(TOOL_REGISTRY.keys())}")

        display_host = "localhost" if settings.APP_HOST == "0.0.0.0" else settings.APP_HOST
        logger.info(f"应用启动完成 （http://{display_host}:{settings.APP_PORT}{settings.API_PREFIX}/health）")

        yield

    finally:
        logger.info("正在关闭应用...")
        try:
            await close_db()
        except Exception as e:
            logger.error(f"关闭数据库连接时出错: {e}", exc_info=True)
        logger.info("应用已关闭")


# 创建 FastAPI 应用
app = FastAPI(
    title=settings.APP_NAME,
    description="用户管理、AI 聊天代理与 MCP 工具服务",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 添加日志中间件
app.add_middleware(LoggingMiddleware)

# 注册异常处理器
app.add_exception_handler(BusinessException, business_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, pydantic_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, exception_handler)

# 注册路由
app.include_router(router, prefix=settings.API_PREFIX)


def run_server() -> None:
    """
    通过 uvicorn 启动服务，端口与主机从 .env 读取
    """
    uvicorn.run(
        "app.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run_server()
