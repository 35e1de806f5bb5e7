"""
路由依赖
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from domain.services.chat_service import ChatService
from domain.services.user_service import UserService
from infrastructure.database.connection import get_async_session


async def get_user_service(session: AsyncSession = Depends(get_async_session)) -> UserService:
    """每个请求使用独立会话的用户服务"""
    return UserService(session)


def get_chat_service() -> ChatService:
    """聊天服务，配置通过构造函数注入"""
    return ChatService(config=settings)
