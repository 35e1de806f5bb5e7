"""
用户仓储实现
"""
from typing import List, Optional, Tuple
from sqlalchemy import ColumnElement, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.repository.base import BaseRepository
from infrastructure.database.models.user import User


class UserRepository(BaseRepository[User]):
    """用户仓储类"""

    def __init__(self, session: AsyncSession):
        """
        初始化用户仓储

        Args:
            session: 数据库会话
        """
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> Optional[User]:
        """
        根据用户名查询

        Args:
            username: 用户名

        Returns:
            用户实例或None
        """
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def exists_by_username(self, username: str) -> bool:
        """判断用户名是否已存在"""
        result = await self.session.execute(select(exists().where(User.username == username)))
        return bool(result.scalar())

    async def exists_by_email(self, email: str) -> bool:
        """判断邮箱是否已存在"""
        result = await self.session.execute(select(exists().where(User.email == email)))
        return bool(result.scalar())

    async def find_page(
        self,
        limit: int,
        offset: int,
        order_by: List[ColumnElement],
        where: Optional[ColumnElement] = None,
    ) -> Tuple[List[User], int]:
        """
        分页查询

        Args:
            limit: 每页数量
            offset: 偏移量
            order_by: 排序表达式列表
            where: 过滤条件（可选）

        Returns:
            (当前页用户列表, 满足条件的总数)
        """
        count_stmt = select(func.count()).select_from(User)
        stmt = select(User)
        if where is not None:
            count_stmt = count_stmt.where(where)
            stmt = stmt.where(where)

        total = (await self.session.execute(count_stmt)).scalar_one()
        result = await self.session.execute(
            stmt.order_by(*order_by).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total

    async def find_page_by_status(
        self,
        status: int,
        limit: int,
        offset: int,
    ) -> Tuple[List[User], int]:
        """
        根据状态分页查询（按创建时间倒序）

        Args:
            status: 用户状态
            limit: 每页数量
            offset: 偏移量

        Returns:
            (当前页用户列表, 总数)
        """
        return await self.find_page(
            limit,
            offset,
            order_by=[User.created_at.desc(), User.id.desc()],
            where=User.status == status,
        )

    async def find_page_by_keyword(
        self,
        keyword: str,
        limit: int,
        offset: int,
    ) -> Tuple[List[User], int]:
        """
        根据关键字模糊查询用户名、邮箱或真实姓名（按创建时间倒序）

        Args:
            keyword: 关键字（子串匹配）
            limit: 每页数量
            offset: 偏移量

        Returns:
            (当前页用户列表, 总数)
        """
        pattern = f"%{keyword}%"
        return await self.find_page(
            limit,
            offset,
            order_by=[User.created_at.desc(), User.id.desc()],
            where=or_(
                User.username.like(pattern),
                User.email.like(pattern),
                User.real_name.like(pattern),
            ),
        )
