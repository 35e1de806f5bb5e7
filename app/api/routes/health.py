"""
健康检查接口
"""
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter

from app.core.config import settings
from app.schemas.response import ApiResponse

router = APIRouter(tags=["健康检查"])


@router.get("/health", response_model=ApiResponse[Dict[str, Any]])
async def health_check():
    """
    健康检查接口

    Returns:
        应用状态信息
    """
    health_info = {
        "status": "UP",
        "timestamp": datetime.now().isoformat(),
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }
    return ApiResponse.success(health_info, "应用运行正常")
