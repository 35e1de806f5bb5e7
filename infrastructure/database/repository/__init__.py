"""
仓储模式实现
"""
from infrastructure.database.repository.base import BaseRepository
from infrastructure.database.repository.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
