"""
应用配置管理
使用 Pydantic Settings 管理配置
"""
from pathlib import Path
from typing import Optional, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def find_project_root() -> Path:
    """
    查找项目根目录（包含 .env 文件的目录）

    Returns:
        Path: 项目根目录路径
    """
    current = Path(__file__).resolve()
    # 当前文件位于 app/core/config.py，项目根目录应该是 current.parent.parent.parent
    project_root = current.parent.parent.parent

    env_file = project_root / ".env"
    if env_file.exists():
        return project_root

    # 如果项目根目录没有 .env，向上查找
    for parent in current.parents:
        env_file = parent / ".env"
        if env_file.exists():
            return parent

    return project_root


class Settings(BaseSettings):
    """应用配置"""

    # 数据库配置
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="完整的 SQLAlchemy 异步连接 URL，配置后优先于 DB_* 分项配置"
    )
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[int] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_TIMEZONE: str = "Asia/Shanghai"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = Field(default=10, ge=1, description="连接池大小（SQLite 不使用）")
    DB_MAX_OVERFLOW: int = Field(default=20, ge=0, description="连接池溢出连接数")
    DB_SQL_LOG_ENABLED: bool = False
    DB_SQL_LOG_SLOW_QUERY_THRESHOLD: float = Field(default=1.0, description="慢查询阈值（秒）")
    DB_AUTO_CREATE: bool = Field(default=False, description="启动时自动建表（生产环境使用 Alembic 迁移）")

    @property
    def ASYNC_DB_URI(self) -> str:
        """异步数据库连接 URI"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if not all([self.DB_HOST, self.DB_PORT, self.DB_USER, self.DB_PASSWORD, self.DB_NAME]):
            raise ValueError("数据库配置不完整，请设置 DATABASE_URL 或 DB_HOST, DB_PORT, DB_USER, DB_PASSWORD, DB_NAME")
        return f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def IS_SQLITE(self) -> bool:
        """是否使用 SQLite（测试环境）"""
        return self.ASYNC_DB_URI.startswith("sqlite")

    # LLM 配置（OpenAI 兼容接口）
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    LLM_MODEL: str = Field(default="Qwen/QwQ-32B", description="默认模型名称")
    LLM_STREAM_MODEL: str = Field(default="deepseek-ai/DeepSeek-V2.5", description="流式聊天使用的模型")
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: Optional[int] = 1000
    LLM_TIMEOUT: float = Field(default=60.0, description="非流式调用超时（秒）")

    # 应用配置
    APP_NAME: str = "User Service Demo"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8080
    APP_TIMEZONE: str = Field(default="Asia/Shanghai", description="服务器时间工具使用的时区")

    # MCP 工具服务配置
    MCP_SERVER_NAME: str = "user-service-mcp-server"
    MCP_PROTOCOL_VERSION: str = "2024-11-05"

    @field_validator('LLM_MAX_TOKENS', mode='before')
    @classmethod
    def _validate_max_tokens(cls, v: Union[int, str, None]) -> Optional[int]:
        """验证 LLM_MAX_TOKENS，空值时不限制"""
        if v is None or (isinstance(v, str) and v.strip() == ''):
            return None
        return int(v)

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def _validate_log_level(cls, v: Union[str, None]) -> str:
        """验证日志级别，统一为大写"""
        if v is None or (isinstance(v, str) and v.strip() == ''):
            return "INFO"
        return v.strip().upper()

    model_config = SettingsConfigDict(
        env_file=str(find_project_root() / ".env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )


settings = Settings()
