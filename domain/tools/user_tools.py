"""
用户查询工具

复用 UserService 读取用户数据，供 AI Agent 通过工具接口调用。
"""
import json
import logging

from pydantic import BaseModel, Field
from langchain_core.tools import ToolException, tool

from app.core.exceptions import BusinessException, ErrorKind
from domain.services.user_service import UserService
from infrastructure.database.connection import get_async_session_factory

logger = logging.getLogger(__name__)


class GetUserByIdInput(BaseModel):
    """查询用户工具的输入参数"""
    userId: int = Field(
        ge=1,
        description="用户ID（数字类型）",
        examples=[1, 2]
    )


class ListUsersInput(BaseModel):
    """用户列表工具的输入参数"""
    limit: int = Field(
        default=10,
        ge=1,
        description="返回的最大用户数量，默认10",
        examples=[5, 10]
    )


class GetDatabaseStatsInput(BaseModel):
    """数据库统计工具无输入参数"""


@tool("getUserById", args_schema=GetUserByIdInput)
async def get_user_by_id(userId: int) -> str:
    """从数据库中根据用户ID查询用户信息。返回用户的详细信息，包括用户名、真实姓名、邮箱、手机号、状态等。"""
    logger.debug(f"[getUserById] 工具调用开始 - userId={userId}")
    session_factory = get_async_session_factory()
    async with session_factory() as session:
        try:
            user = await UserService(session).get_user_by_id(userId)
        except BusinessException as e:
            if e.kind != ErrorKind.NOT_FOUND:
                raise
            message = f"未找到ID为 {userId} 的用户"
            logger.warning(f"[getUserById] {message}")
            raise ToolException(message) from e

    result = {
        "id": user.id,
        "username": user.username,
        "realName": user.real_name,
        "email": user.email,
        "phone": user.phone,
        "status": user.status,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }
    logger.debug(f"[getUserById] 查询成功 - userId={userId}")
    return json.dumps(result, ensure_ascii=False)


@tool("listUsers", args_schema=ListUsersInput)
async def list_users(limit: int = 10) -> str:
    """查询数据库中的所有用户列表。可以指定返回的最大数量。"""
    session_factory = get_async_session_factory()
    async with session_factory() as session:
        users = await UserService(session).get_all_users()

    limited = [
        {
            "id": user.id,
            "username": user.username,
            "realName": user.real_name,
            "email": user.email,
            "status": user.status,
        }
        for user in users[:limit]
    ]
    logger.debug(f"[listUsers] 查询成功，返回 {len(limited)} 个用户")
    return json.dumps(
        {"total": len(users), "returned": len(limited), "users": limited},
        ensure_ascii=False,
    )


@tool("getDatabaseStats", args_schema=GetDatabaseStatsInput)
async def get_database_stats() -> str:
    """获取数据库统计信息，包括用户总数、激活用户数、用户资料完整度等。"""
    session_factory = get_async_session_factory()
    async with session_factory() as session:
        stats = await UserService(session).get_user_stats()
    logger.debug(f"[getDatabaseStats] 统计结果: {stats}")
    return json.dumps(stats, ensure_ascii=False)
