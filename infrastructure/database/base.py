"""
SQLAlchemy Base 定义
"""
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    """
    获取当前 UTC 时间（带时区）

    用于 created_at / updated_at 等时间戳字段，由应用层统一赋值，
    保证同一次写入中的多个时间字段取值一致。

    Returns:
        datetime: 当前 UTC 时间
    """
    return datetime.now(timezone.utc)
