"""
用户业务服务

负责用户的唯一性校验、部分更新合并、状态切换与响应转换（不含密码）。
每个方法在一个数据库会话内完成并自行提交事务。
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessException
from app.schemas.response import PageResponse
from app.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest, normalize_email
from infrastructure.database.base import utc_now
from infrastructure.database.models.user import User, UserStatus
from infrastructure.database.repository.user_repository import UserRepository
from infrastructure.security.password import hash_password

logger = logging.getLogger(__name__)

RESOURCE_NAME = "用户"

# 允许排序的字段（同时接受驼峰和下划线命名）
SORTABLE_FIELDS: Dict[str, ColumnElement] = {
    "id": User.id,
    "username": User.username,
    "email": User.email,
    "real_name": User.real_name,
    "realName": User.real_name,
    "phone": User.phone,
    "status": User.status,
    "created_at": User.created_at,
    "createdAt": User.created_at,
    "updated_at": User.updated_at,
    "updatedAt": User.updated_at,
}


def merge_user_update(user: User, request: UserUpdateRequest) -> None:
    """
    将更新请求中的非空字段逐个合并到用户实体

    id、username、password 和时间戳不在更新请求中，不会被覆盖。

    Args:
        user: 用户实体
        request: 更新请求
    """
    if request.email is not None:
        user.email = request.email
    if request.real_name is not None:
        user.real_name = request.real_name
    if request.phone is not None:
        user.phone = request.phone
    if request.status is not None:
        user.status = request.status


class UserService:
    """用户业务服务"""

    def __init__(self, session: AsyncSession):
        """
        初始化用户服务

        Args:
            session: 数据库会话
        """
        self.session = session
        self.repository = UserRepository(session)

    async def create_user(self, request: UserCreateRequest) -> UserResponse:
        """
        创建用户

        Args:
            request: 创建用户请求

        Returns:
            创建的用户

        Raises:
            BusinessException: 用户名或邮箱已存在（CONFLICT）
        """
        logger.info(f"[用户创建] username={request.username}")

        if await self.repository.exists_by_username(request.username):
            raise BusinessException.conflict(RESOURCE_NAME, "用户名", request.username)
        if await self.repository.exists_by_email(request.email):
            raise BusinessException.conflict(RESOURCE_NAME, "邮箱", request.email)

        conflict = BusinessException.conflict(RESOURCE_NAME, "用户名或邮箱", f"{request.username}/{request.email}")
        now = utc_now()
        try:
            user = await self.repository.create(
                username=request.username,
                email=request.email,
                password=hash_password(request.password),
                real_name=request.real_name,
                phone=request.phone,
                status=int(UserStatus.ENABLED),
                created_at=now,
                updated_at=now,
            )
        except IntegrityError as e:
            raise await self._rollback_conflict(conflict, e) from e
        await self._commit(conflict)

        logger.info(f"[用户创建成功] id={user.id}, username={user.username}")
        return UserResponse.from_user(user)

    async def get_user_by_id(self, user_id: int) -> UserResponse:
        """
        根据ID获取用户

        Raises:
            BusinessException: 用户不存在（NOT_FOUND）
        """
        logger.debug(f"[用户查询] id={user_id}")
        return UserResponse.from_user(await self._get_or_raise(user_id))

    async def get_user_by_username(self, username: str) -> UserResponse:
        """
        根据用户名获取用户

        Raises:
            BusinessException: 用户不存在（NOT_FOUND）
        """
        logger.debug(f"[用户查询] username={username}")
        user = await self.repository.get_by_username(username)
        if user is None:
            raise BusinessException.not_found(RESOURCE_NAME, "用户名", username)
        return UserResponse.from_user(user)

    async def update_user(self, user_id: int, request: UserUpdateRequest) -> UserResponse:
        """
        更新用户（只更新提供的非空字段）

        Args:
            user_id: 用户ID
            request: 更新请求

        Returns:
            更新后的用户

        Raises:
            BusinessException: 用户不存在（NOT_FOUND）或邮箱已被其他用户使用（CONFLICT）
        """
        logger.info(f"[用户更新] id={user_id}")

        user = await self._get_or_raise(user_id)

        if request.email is not None and request.email != user.email:
            if await self.repository.exists_by_email(request.email):
                raise BusinessException.conflict(RESOURCE_NAME, "邮箱", request.email)

        merge_user_update(user, request)
        user.updated_at = utc_now()
        await self._commit(BusinessException.conflict(RESOURCE_NAME, "邮箱", request.email))

        logger.info(f"[用户更新成功] id={user.id}")
        return UserResponse.from_user(user)

    async def delete_user(self, user_id: int) -> None:
        """
        删除用户（物理删除）

        Raises:
            BusinessException: 用户不存在（NOT_FOUND）
        """
        logger.info(f"[用户删除] id={user_id}")

        if not await self.repository.delete(user_id):
            raise BusinessException.not_found(RESOURCE_NAME, "ID", user_id)
        await self.session.commit()

        logger.info(f"[用户删除成功] id={user_id}")

    async def get_all_users(self) -> List[UserResponse]:
        """获取所有用户（按ID升序）"""
        logger.debug("[用户列表] 获取所有用户")
        users = await self.repository.get_all()
        return [UserResponse.from_user(user) for user in users]

    async def get_users(
        self,
        page: int,
        size: int,
        sort: str = "id",
        direction: str = "asc",
    ) -> PageResponse[UserResponse]:
        """
        分页获取用户列表

        Args:
            page: 页码（从0开始）
            size: 每页大小
            sort: 排序字段
            direction: 排序方向，desc（不区分大小写）为降序，其它为升序

        Returns:
            分页结果

        Raises:
            BusinessException: 排序字段不支持（INVALID_ARGUMENT）
        """
        logger.debug(f"[用户分页] page={page}, size={size}, sort={sort}, direction={direction}")

        column = SORTABLE_FIELDS.get(sort)
        if column is None:
            raise BusinessException.invalid_argument(f"不支持的排序字段: {sort}")
        descending = (direction or "").lower() == "desc"
        order_by = [column.desc() if descending else column.asc()]
        if column is not User.id:
            order_by.append(User.id.desc() if descending else User.id.asc())

        users, total = await self.repository.find_page(size, page * size, order_by=order_by)
        return self._to_page(users, page, size, total)

    async def get_users_by_status(self, status: int, page: int, size: int) -> PageResponse[UserResponse]:
        """根据状态分页获取用户（按创建时间倒序）"""
        logger.debug(f"[用户分页] status={status}, page={page}, size={size}")
        users, total = await self.repository.find_page_by_status(status, size, page * size)
        return self._to_page(users, page, size, total)

    async def search_users(self, keyword: str, page: int, size: int) -> PageResponse[UserResponse]:
        """按关键字搜索用户名、邮箱或真实姓名（按创建时间倒序）"""
        logger.debug(f"[用户搜索] keyword={keyword}, page={page}, size={size}")
        users, total = await self.repository.find_page_by_keyword(keyword, size, page * size)
        return self._to_page(users, page, size, total)

    async def exists_by_username(self, username: str) -> bool:
        """用户名是否已存在"""
        return await self.repository.exists_by_username(username)

    async def exists_by_email(self, email: str) -> bool:
        """邮箱是否已存在（与创建时相同的规范化规则）"""
        return await self.repository.exists_by_email(normalize_email(email))

    async def enable_user(self, user_id: int) -> UserResponse:
        """启用用户"""
        logger.info(f"[用户启用] id={user_id}")
        response = await self._change_status(user_id, UserStatus.ENABLED)
        logger.info(f"[用户启用成功] id={user_id}")
        return response

    async def disable_user(self, user_id: int) -> UserResponse:
        """禁用用户"""
        logger.info(f"[用户禁用] id={user_id}")
        response = await self._change_status(user_id, UserStatus.DISABLED)
        logger.info(f"[用户禁用成功] id={user_id}")
        return response

    async def get_user_stats(self) -> Dict[str, int]:
        """
        用户统计信息

        Returns:
            totalUsers；有用户时还包含 activeUsers、inactiveUsers、usersWithRealName、usersWithPhone
        """
        total = await self.repository.count()
        stats = {"totalUsers": total}
        if total == 0:
            return stats

        active = await self._count_where(User.status == int(UserStatus.ENABLED))
        stats["activeUsers"] = active
        stats["inactiveUsers"] = total - active
        stats["usersWithRealName"] = await self._count_where(
            User.real_name.is_not(None), User.real_name != ""
        )
        stats["usersWithPhone"] = await self._count_where(
            User.phone.is_not(None), User.phone != ""
        )
        return stats

    async def _get_or_raise(self, user_id: int) -> User:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise BusinessException.not_found(RESOURCE_NAME, "ID", user_id)
        return user

    async def _change_status(self, user_id: int, status: UserStatus) -> UserResponse:
        user = await self._get_or_raise(user_id)
        user.status = int(status)
        user.updated_at = utc_now()
        await self.session.commit()
        return UserResponse.from_user(user)

    async def _count_where(self, *conditions: ColumnElement) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(User).where(*conditions)
        )
        return result.scalar_one()

    async def _commit(self, conflict: BusinessException) -> None:
        """提交事务；唯一约束冲突时回滚并转换为 CONFLICT"""
        try:
            await self.session.commit()
        except IntegrityError as e:
            raise await self._rollback_conflict(conflict, e) from e

    async def _rollback_conflict(self, conflict: BusinessException, error: IntegrityError) -> BusinessException:
        await self.session.rollback()
        logger.warning(f"[唯一约束冲突] {conflict.message}, error={error.orig}")
        return conflict

    @staticmethod
    def _to_page(users: List[User], page: int, size: int, total: int) -> PageResponse[UserResponse]:
        return PageResponse.of(
            [UserResponse.from_user(user) for user in users],
            page=page,
            size=size,
            total_elements=total,
        )
