#!/usr/bin/env python
"""
用户初始化脚本

功能：
- 写入演示用户数据
- 用户名已存在则跳过，不覆盖已有数据

使用方式：
    python scripts/init_user.py
    python scripts/init_user.py --password demo123456
"""

import argparse
import asyncio
import sys
import os
from typing import Dict, List

# 添加项目根目录到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.exceptions import BusinessException
from app.schemas.user import UserCreateRequest
from domain.services.user_service import UserService
from infrastructure.database.connection import close_db, get_async_session_factory

DEMO_USERS: List[Dict[str, str]] = [
    {"username": "admin", "email": "admin@example.com", "real_name": "管理员", "phone": "13800000000"},
    {"username": "zhangsan", "email": "zhangsan@example.com", "real_name": "张三", "phone": "13800000001"},
    {"username": "lisi", "email": "lisi@example.com", "real_name": "李四", "phone": "13800000002"},
    {"username": "wangwu", "email": "wangwu@example.com", "real_name": "王五"},
]


async def init_users(password: str) -> None:
    """
    初始化演示用户

    Args:
        password: 演示用户统一密码
    """
    created_count = 0
    skipped_count = 0
    error_count = 0

    session_factory = get_async_session_factory()
    try:
        for user_data in DEMO_USERS:
            username = user_data["username"]
            async with session_factory() as session:
                service = UserService(session)
                if await service.exists_by_username(username):
                    skipped_count += 1
                    print(f"- 跳过已存在用户: {username}")
                    continue
                try:
                    await service.create_user(UserCreateRequest(password=password, **user_data))
                    created_count += 1
                    print(f"✓ 创建用户: {username}")
                except BusinessException as e:
                    error_count += 1
                    print(f"✗ 处理用户 {username} 时出错: {e.message}")
    finally:
        await close_db()

    print()
    print("=" * 60)
    print("用户初始化完成")
    print("=" * 60)
    print(f"总计: {len(DEMO_USERS)} 个用户")
    print(f"创建: {created_count} 个")
    print(f"跳过: {skipped_count} 个")
    print(f"错误: {error_count} 个")


def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="用户初始化脚本")
    parser.add_argument(
        "--password",
        type=str,
        default="password123",
        help="演示用户统一密码（默认: password123）"
    )
    args = parser.parse_args()

    print("=" * 60)
    print("用户初始化脚本")
    print("=" * 60)
    print()

    asyncio.run(init_users(args.password))


if __name__ == "__main__":
    main()
