"""
系统时间工具
"""
import json
import logging
import time
from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator
from langchain_core.tools import tool

from app.core.config import settings

logger = logging.getLogger(__name__)

READABLE_PATTERN = "%Y年%m月%d日 %H:%M:%S"


class GetServerTimeInput(BaseModel):
    """系统时间工具的输入参数"""
    format: str = Field(
        default="iso",
        description="时间格式，可选值: iso (ISO 8601), readable (人类可读), timestamp (Unix时间戳)",
        examples=["iso", "readable", "timestamp"]
    )

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v):
        """统一小写，未知格式按 iso 处理"""
        if v is None:
            return "iso"
        value = str(v).strip().lower()
        return value if value in ("iso", "readable", "timestamp") else "iso"


@tool("getServerTime", args_schema=GetServerTimeInput)
async def get_server_time(format: str = "iso") -> str:
    """获取当前服务器时间。可以指定返回格式：ISO 8601、人类可读格式或Unix时间戳。"""
    timezone = settings.APP_TIMEZONE
    now = datetime.now(ZoneInfo(timezone))

    if format == "readable":
        response = {"time": now.strftime(READABLE_PATTERN), "format": "readable"}
    elif format == "timestamp":
        response = {"time": int(time.time() * 1000), "format": "timestamp"}
    else:
        response = {"time": now.isoformat(), "format": "ISO 8601"}
    response["timezone"] = timezone

    logger.debug(f"[getServerTime] 返回服务器时间: {response}")
    return json.dumps(response, ensure_ascii=False)
