"""
API 路由汇总
"""
from fastapi import APIRouter

from app.api.routes import chat, health, mcp, users

router = APIRouter()
router.include_router(users.router)
router.include_router(chat.router)
router.include_router(health.router)
router.include_router(mcp.router)

__all__ = ["router"]
