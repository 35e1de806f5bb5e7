"""
数据库连接和会话管理

引擎和会话工厂为进程级单例，首次使用时按配置创建，close_db 后可重新创建。
"""
import time
import logging
from typing import Any, AsyncGenerator, Dict, Optional
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from app.core.config import Settings, settings
from infrastructure.database.base import Base

sql_logger = logging.getLogger("infrastructure.database.connection")

_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def engine_options(config: Settings) -> Dict[str, Any]:
    """
    根据配置生成 create_async_engine 参数

    SQLite（测试）不使用连接池参数；PostgreSQL 启用 pre-ping 并设置会话时区。
    """
    options: Dict[str, Any] = {"echo": config.DB_ECHO}
    if config.IS_SQLITE:
        return options
    options.update(
        pool_pre_ping=True,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        connect_args={"options": f"-c timezone={config.DB_TIMEZONE}"},
    )
    return options


def setup_db_logging(engine: AsyncEngine) -> None:
    """
    注册 SQL 执行耗时监听器

    超过 DB_SQL_LOG_SLOW_QUERY_THRESHOLD 秒的语句记录为慢查询 warning，
    其余语句在 DEBUG 级别记录。

    Args:
        engine: 异步引擎
    """
    if not settings.DB_SQL_LOG_ENABLED:
        return

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _before_execute(conn, cursor, statement, parameters, context, executemany):
        # 栈结构，支持嵌套执行
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def _after_execute(conn, cursor, statement, parameters, context, executemany):
        started = conn.info.get("query_start_time")
        if not started:
            return
        duration_ms = (time.perf_counter() - started.pop()) * 1000
        threshold_ms = settings.DB_SQL_LOG_SLOW_QUERY_THRESHOLD * 1000
        sql = " ".join(statement.split())
        if duration_ms > threshold_ms:
            sql_logger.warning(f"[慢查询] duration_ms={duration_ms:.2f}, threshold_ms={threshold_ms:.0f}, sql={sql}")
        else:
            sql_logger.debug(f"[SQL执行] duration_ms={duration_ms:.2f}, sql={sql}")


def get_async_engine() -> AsyncEngine:
    """获取异步数据库引擎"""
    global _async_engine
    if _async_engine is None:
        _async_engine = create_async_engine(settings.ASYNC_DB_URI, **engine_options(settings))
        setup_db_logging(_async_engine)
    return _async_engine


def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """获取异步会话工厂（提交后不过期对象，便于转换响应）"""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 依赖：每个请求一个会话，请求结束时关闭

    Yields:
        AsyncSession: 异步数据库会话
    """
    async with get_async_session_factory()() as session:
        yield session


async def init_db() -> None:
    """按模型创建缺失的数据表"""
    async with get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """释放引擎及连接池"""
    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
        sql_logger.info("[数据库] 连接池已释放")
    _async_engine = None
    _async_session_factory = None
