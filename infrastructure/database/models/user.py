"""
用户模型
"""
from enum import IntEnum

from sqlalchemy import Column, Integer, String, DateTime

from infrastructure.database.base import Base, utc_now


class UserStatus(IntEnum):
    """用户状态"""
    DISABLED = 0
    ENABLED = 1


class User(Base):
    """用户模型"""

    __tablename__ = "users"

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="用户ID（自增）"
    )
    username = Column(String(50), nullable=False, unique=True, index=True, comment="用户名（唯一）")
    email = Column(String(100), nullable=False, unique=True, index=True, comment="邮箱（唯一）")
    password = Column(String(255), nullable=False, comment="密码哈希")
    real_name = Column(String(50), nullable=True, comment="真实姓名")
    phone = Column(String(20), nullable=True, comment="手机号")
    status = Column(
        Integer,
        nullable=False,
        default=int(UserStatus.ENABLED),
        comment="状态：0-禁用，1-启用"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="更新时间"
    )

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
