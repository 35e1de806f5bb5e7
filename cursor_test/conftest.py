"""
测试配置和共享 Fixtures

测试使用内存 SQLite（sqlite+aiosqlite + StaticPool），每个测试独立建表，
不依赖外部数据库和外部 LLM 接口。
"""
import sys
import os
from pathlib import Path

# 将项目根目录添加到 Python 路径
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# 必须在导入应用配置之前设置
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["DB_AUTO_CREATE"] = "false"
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("OPENAI_BASE_URL", "http://llm.test/v1")

import uuid
from typing import Callable, Dict

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.main import app
from app.schemas.user import UserCreateRequest
from domain.services.user_service import UserService
from domain.tools import user_tools
from infrastructure.database.base import Base
from infrastructure.database.connection import get_async_session


def create_test_engine():
    """内存数据库引擎，StaticPool 保证所有会话共享同一连接"""
    return create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def test_settings() -> Settings:
    """测试用配置（不读取 .env 中的 LLM 配置）"""
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        OPENAI_API_KEY="test-key",
        OPENAI_BASE_URL="http://llm.test/v1",
        LLM_MODEL="test-model",
        LLM_STREAM_MODEL="test-stream-model",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """创建测试数据库引擎并建表"""
    engine = create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_db_engine):
    """测试会话工厂"""
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def test_db_session(test_session_factory):
    """测试数据库会话"""
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def user_service(test_db_session) -> UserService:
    """用户服务"""
    return UserService(test_db_session)


@pytest.fixture
def make_user_request() -> Callable[..., UserCreateRequest]:
    """
    创建用户请求工厂

    使用 UUID 后缀保证 username、email 唯一。
    """
    def _make(**overrides) -> UserCreateRequest:
        suffix = uuid.uuid4().hex[:8]
        data: Dict[str, object] = {
            "username": f"user_{suffix}",
            "email": f"user_{suffix}@example.com",
            "password": "secret123",
            "real_name": "测试用户",
            "phone": "13800000000",
        }
        data.update(overrides)
        return UserCreateRequest(**data)

    return _make


@pytest.fixture
def use_tool_session(test_session_factory, monkeypatch):
    """让数据库工具使用测试会话工厂"""
    monkeypatch.setattr(user_tools, "get_async_session_factory", lambda: test_session_factory)
    return test_session_factory


@pytest.fixture
def client(monkeypatch):
    """
    FastAPI 测试客户端

    数据库会话依赖替换为内存数据库；建表和所有请求在 TestClient 的同一事件循环中执行。
    """
    engine = create_test_engine()
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    monkeypatch.setattr(user_tools, "get_async_session_factory", lambda: session_factory)
    app.dependency_overrides[get_async_session] = override_get_async_session

    with TestClient(app, raise_server_exceptions=False) as test_client:
        test_client.portal.call(create_tables)
        yield test_client
        test_client.portal.call(engine.dispose)

    app.dependency_overrides.clear()


@pytest.fixture
def api_prefix() -> str:
    """接口前缀"""
    from app.core.config import settings
    return settings.API_PREFIX
