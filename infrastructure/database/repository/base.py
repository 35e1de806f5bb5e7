"""
基础仓储实现
"""
from typing import Any, Generic, List, Optional, Type, TypeVar
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    基础仓储类

    封装单表的通用 CRUD 操作，只执行 flush，事务提交由业务层控制。
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """
        初始化仓储

        Args:
            session: 数据库会话
            model: 模型类
        """
        self.session = session
        self.model = model

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """
        根据ID查询

        Args:
            id: 主键

        Returns:
            模型实例或None
        """
        return await self.session.get(self.model, id)

    async def get_all(self, limit: Optional[int] = None, offset: int = 0) -> List[ModelType]:
        """
        查询所有记录（按主键升序）

        Args:
            limit: 限制数量，None 表示不限制
            offset: 偏移量

        Returns:
            模型实例列表
        """
        stmt = select(self.model).order_by(self.model.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """
        统计记录总数

        Returns:
            记录数
        """
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def create(self, **kwargs) -> ModelType:
        """
        创建记录

        Args:
            **kwargs: 字段值

        Returns:
            创建的模型实例
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()  # 立即执行 SQL 以获取自增 ID，但不提交事务
        return instance

    async def delete(self, id: Any) -> bool:
        """
        删除记录

        Args:
            id: 主键

        Returns:
            是否删除成功
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True
