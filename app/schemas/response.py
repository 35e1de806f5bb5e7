"""
统一响应模型
"""
import math
import time
from typing import Any, Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def current_millis() -> int:
    """当前时间戳（毫秒）"""
    return int(time.time() * 1000)


class ApiResponse(BaseModel, Generic[T]):
    """统一响应格式：{code, message, data, timestamp}"""
    code: int = Field(default=200, description="响应状态码")
    message: str = Field(default="操作成功", description="响应消息")
    data: Optional[T] = Field(default=None, description="响应数据")
    timestamp: int = Field(default_factory=current_millis, description="时间戳（毫秒）")

    @classmethod
    def success(cls, data: Any = None, message: str = "操作成功") -> "ApiResponse":
        """构造成功响应"""
        return cls(code=200, message=message, data=data)

    @classmethod
    def error(cls, code: int, message: str, data: Any = None) -> "ApiResponse":
        """构造失败响应"""
        return cls(code=code, message=message, data=data)


class PageResponse(BaseModel, Generic[T]):
    """分页响应格式"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: List[T] = Field(default_factory=list, description="数据列表")
    page: int = Field(..., description="当前页码（从0开始）")
    size: int = Field(..., description="每页大小")
    total_elements: int = Field(..., description="总元素数")
    total_pages: int = Field(..., description="总页数")
    first: bool = Field(..., description="是否为第一页")
    last: bool = Field(..., description="是否为最后一页")
    has_next: bool = Field(..., description="是否有下一页")
    has_previous: bool = Field(..., description="是否有上一页")

    @classmethod
    def of(cls, content: List[Any], page: int, size: int, total_elements: int) -> "PageResponse":
        """
        根据当前页数据和总数构建分页响应

        Args:
            content: 当前页数据
            page: 页码（从0开始）
            size: 每页大小（>=1）
            total_elements: 总元素数

        Returns:
            分页响应
        """
        total_pages = math.ceil(total_elements / size) if size > 0 else 0
        has_next = page + 1 < total_pages
        return cls(
            content=content,
            page=page,
            size=size,
            total_elements=total_elements,
            total_pages=total_pages,
            first=page == 0,
            last=not has_next,
            has_next=has_next,
            has_previous=page > 0,
        )
