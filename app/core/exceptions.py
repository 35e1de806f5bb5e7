"""
业务异常定义

所有业务失败统一使用 BusinessException，通过 kind 区分类别，
由 API 层的异常处理器转换为统一响应格式和 HTTP 状态码。
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """业务异常类别"""
    BUSINESS = "business"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INVALID_ARGUMENT = "invalid_argument"
    INTERNAL = "internal"


# 各类别默认错误码（同时作为 HTTP 状态码）
DEFAULT_CODES = {
    ErrorKind.BUSINESS: 500,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.INTERNAL: 500,
}


class BusinessException(Exception):
    """业务异常"""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.BUSINESS,
        code: Optional[int] = None,
    ):
        """
        初始化业务异常

        Args:
            message: 错误消息
            kind: 异常类别
            code: 错误码，默认取类别对应的错误码
        """
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.code = code if code is not None else DEFAULT_CODES[kind]

    @classmethod
    def not_found(cls, resource: str, field: str, value: Any) -> "BusinessException":
        """资源未找到，如：用户未找到，ID: 1"""
        return cls(f"{resource}未找到，{field}: {value}", ErrorKind.NOT_FOUND)

    @classmethod
    def conflict(cls, resource: str, field: str, value: Any) -> "BusinessException":
        """资源已存在，如：用户已存在，用户名: alice"""
        return cls(f"{resource}已存在，{field}: {value}", ErrorKind.CONFLICT)

    @classmethod
    def invalid_argument(cls, message: str) -> "BusinessException":
        """非法参数"""
        return cls(message, ErrorKind.INVALID_ARGUMENT)

    def __repr__(self):
        return f"<BusinessException(kind={self.kind.value}, code={self.code}, message={self.message})>"
