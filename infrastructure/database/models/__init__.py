"""
数据库模型
"""
from infrastructure.database.models.user import User, UserStatus

__all__ = [
    "User",
    "UserStatus",
]
