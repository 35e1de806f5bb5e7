"""
Repository 测试

Pytest 命令示例：
================

# 运行整个测试文件
pytest cursor_test/infrastructure/test_user_repository.py -v

# 运行特定的测试类
pytest cursor_test/infrastructure/test_user_repository.py::TestBaseRepository
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from infrastructure.database.models import User, UserStatus
from infrastructure.database.repository import BaseRepository, UserRepository


def build_user(index: int, **overrides) -> dict:
    data = {
        "username": f"repo_user_{index}",
        "email": f"repo_user_{index}@example.com",
        "password": "hashed",
        "real_name": f"用户{index}",
        "status": int(UserStatus.ENABLED),
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=index),
        "updated_at": datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=index),
    }
    data.update(overrides)
    return data


@pytest_asyncio.fixture
async def repository(test_db_session):
    return UserRepository(test_db_session)


class TestBaseRepository:
    """BaseRepository 测试类"""

    @pytest.mark.asyncio
    async def test_create_and_get_by_id(self, test_db_session):
        """
        测试用例：create + get_by_id

        验证：
        - create 后立即获得自增 ID
        - get_by_id 返回同一记录
        """
        # Arrange（准备）
        repository = BaseRepository(test_db_session, User)

        # Act（执行）
        user = await repository.create(**build_user(1))
        result = await repository.get_by_id(user.id)

        # Assert（断言）
        assert user.id is not None
        assert result is user

    @pytest.mark.asyncio
    async def test_get_by_id_not_exists(self, test_db_session):
        """查询不存在的记录时返回 None"""
        repository = BaseRepository(test_db_session, User)

        assert await repository.get_by_id(99999) is None

    @pytest.mark.asyncio
    async def test_get_all_ordered_by_id(self, test_db_session):
        """get_all 按主键升序，支持 limit/offset"""
        repository = BaseRepository(test_db_session, User)
        created = [await repository.create(**build_user(i)) for i in range(3)]

        all_users = await repository.get_all()
        limited = await repository.get_all(limit=1, offset=1)

        assert [u.id for u in all_users] == [u.id for u in created]
        assert [u.id for u in limited] == [created[1].id]
        assert await repository.count() == 3

    @pytest.mark.asyncio
    async def test_delete(self, test_db_session):
        """delete 删除记录，不存在时返回 False"""
        repository = BaseRepository(test_db_session, User)
        user = await repository.create(**build_user(1))

        deleted = await repository.delete(user.id)

        assert deleted is True
        assert await repository.get_by_id(user.id) is None
        assert await repository.delete(user.id) is False


class TestUserRepository:
    """UserRepository 测试类"""

    @pytest.mark.asyncio
    async def test_get_by_username(self, repository):
        """按用户名查询"""
        user = await repository.create(**build_user(1))

        assert await repository.get_by_username("repo_user_1") is user
        assert await repository.get_by_username("missing") is None

    @pytest.mark.asyncio
    async def test_exists(self, repository):
        """exists_by_username / exists_by_email"""
        await repository.create(**build_user(1))

        assert await repository.exists_by_username("repo_user_1") is True
        assert await repository.exists_by_username("repo_user_2") is False
        assert await repository.exists_by_email("repo_user_1@example.com") is True
        assert await repository.exists_by_email("nobody@example.com") is False

    @pytest.mark.asyncio
    async def test_find_page_by_status_newest_first(self, repository):
        """
        测试用例：按状态分页

        验证：
        - 只返回指定状态的用户
        - 按创建时间倒序
        - 总数为过滤后的数量
        """
        for i in range(5):
            status = UserStatus.DISABLED if i % 2 else UserStatus.ENABLED
            await repository.create(**build_user(i, status=int(status)))

        users, total = await repository.find_page_by_status(int(UserStatus.ENABLED), limit=2, offset=0)

        assert total == 3
        assert [u.username for u in users] == ["repo_user_4", "repo_user_2"]

    @pytest.mark.asyncio
    async def test_find_page_by_keyword_matches_any_field(self, repository):
        """关键字匹配用户名、邮箱或真实姓名"""
        await repository.create(**build_user(1, username="alice", email="a@example.com", real_name=None))
        await repository.create(**build_user(2, username="bob", email="alice.b@example.com", real_name=None))
        await repository.create(**build_user(3, username="carol", email="c@example.com", real_name="Alice Carol"))
        await repository.create(**build_user(4, username="dave", email="d@example.com", real_name="Dave"))

        users, total = await repository.find_page_by_keyword("lice", limit=10, offset=0)

        assert total == 3
        assert [u.username for u in users] == ["carol", "bob", "alice"]
