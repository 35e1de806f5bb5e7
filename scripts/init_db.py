#!/usr/bin/env python
"""
数据库初始化脚本

功能：
- PostgreSQL：连接 postgres 库，目标库不存在时创建
- 验证目标库连接
- --create-tables：按模型直接建表（开发环境；生产环境请使用 alembic upgrade head）

使用方式：
    python scripts/init_db.py
    python scripts/init_db.py --create-tables
"""
import argparse
import asyncio
import sys
import os

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import OperationalError, ProgrammingError

# 添加项目根目录到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from infrastructure.database.connection import close_db, init_db
from infrastructure.database.models import User  # noqa: F401

SYNC_DRIVER = "postgresql+psycopg"


def to_sync_url(database_url: str) -> URL:
    """
    转换为同步连接 URL

    psycopg3 同时支持同步和异步，PostgreSQL 统一使用 postgresql+psycopg 驱动。
    """
    url = make_url(database_url)
    if url.get_backend_name() == "postgresql":
        url = url.set(drivername=SYNC_DRIVER)
    return url


def create_database(url: URL) -> bool:
    """
    创建数据库（如果不存在）

    Args:
        url: 目标数据库的同步连接 URL

    Returns:
        bool: 成功返回 True，失败返回 False
    """
    if not url.database:
        print("✗ 数据库 URL 中未指定数据库名")
        return False
    print(f"目标数据库: {url.database}")

    engine = create_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT")
    try:
        with engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": url.database},
            ).scalar() is not None
            if exists:
                print(f"✓ 数据库 '{url.database}' 已存在")
            else:
                conn.execute(text(f'CREATE DATABASE "{url.database}"'))
                print(f"✓ 数据库 '{url.database}' 创建成功")
    except OperationalError as e:
        print(f"✗ 无法连接数据库服务器: {e}")
        print("  请检查服务器是否已启动、连接信息是否正确、用户是否有建库权限")
        return False
    except ProgrammingError as e:
        print(f"✗ 创建数据库失败: {e}")
        return False
    finally:
        engine.dispose()
    return True


def check_database_connection(url: URL) -> bool:
    """执行 SELECT 1 验证连接"""
    engine = create_engine(url)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as e:
        print(f"✗ 数据库连接失败: {e}")
        return False
    finally:
        engine.dispose()
    print("✓ 数据库连接验证成功")
    return True


async def create_tables() -> None:
    try:
        await init_db()
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="数据库初始化脚本")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="根据模型直接创建数据表（开发环境使用）"
    )
    args = parser.parse_args()

    try:
        database_url = settings.ASYNC_DB_URI
    except ValueError as e:
        print(f"✗ 配置错误: {e}")
        print("请在 .env 中配置 DATABASE_URL，或 DB_HOST/DB_PORT/DB_USER/DB_PASSWORD/DB_NAME")
        sys.exit(1)

    url = to_sync_url(database_url)
    if url.get_backend_name() == "postgresql":
        if not create_database(url) or not check_database_connection(url):
            sys.exit(1)
    else:
        print(f"{url.get_backend_name()} 数据库，跳过建库步骤")

    if args.create_tables:
        asyncio.run(create_tables())
        print("✓ 数据表创建完成")
    else:
        print("下一步：运行 alembic upgrade head 创建数据表")


if __name__ == "__main__":
    main()
