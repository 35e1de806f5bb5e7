"""
聊天接口的请求和响应模型
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ChatRequest(BaseModel):
    """聊天请求模型"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = Field(..., min_length=1, description="用户消息")
    model: Optional[str] = Field(default=None, description="模型名称（可选，默认使用配置）")
    temperature: Optional[float] = Field(default=None, ge=0, le=2, description="温度参数")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="最大生成Token数")

    @field_validator("message")
    @classmethod
    def _validate_message(cls, v: str) -> str:
        """消息内容不能为空白"""
        if not v.strip():
            raise ValueError("消息内容不能为空")
        return v


class ChatResponse(BaseModel):
    """聊天响应模型"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = Field(..., description="助手回复")
    model: str = Field(..., description="模型名称")
    total_tokens: int = Field(default=0, description="消耗的Token总数（未统计时为0）")
    finish_reason: str = Field(default="stop", description="结束原因")
