"""
异常处理中间件

将各类异常统一转换为 {code, message, data, timestamp} 响应格式。
"""
import logging
from typing import Any, Dict, Iterable

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import DEFAULT_CODES, BusinessException, ErrorKind
from app.schemas.response import ApiResponse

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "参数校验失败"


def _error_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    body = ApiResponse.error(status_code, message, data)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _field_errors(errors: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    """
    将校验错误转换为 字段 -> 错误信息 的映射

    去掉 body/query/path 等位置前缀，同一字段只保留第一条错误。
    """
    field_errors: Dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        field = ".".join(loc) or "request"
        field_errors.setdefault(field, error.get("msg", ""))
    return field_errors


async def business_exception_handler(request: Request, exc: BusinessException):
    """
    业务异常处理器

    HTTP 状态码取异常的错误码。
    """
    logger.warning(
        f"[业务异常] {request.method} {request.url.path} - "
        f"kind={exc.kind.value}, code={exc.code}, message={exc.message}"
    )
    return _error_response(exc.code, exc.message)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    请求验证异常处理器

    Args:
        request: FastAPI 请求对象
        exc: 验证异常对象

    Returns:
        400 响应，data 为字段错误映射
    """
    field_errors = _field_errors(exc.errors())
    logger.warning(f"[参数校验失败] {request.method} {request.url.path} - errors={field_errors}")
    return _error_response(DEFAULT_CODES[ErrorKind.VALIDATION], VALIDATION_MESSAGE, field_errors)


async def pydantic_validation_handler(request: Request, exc: ValidationError):
    """处理业务代码中构造模型时抛出的校验异常"""
    field_errors = _field_errors(exc.errors())
    message = f"{VALIDATION_MESSAGE}: " + "; ".join(f"{k}: {v}" for k, v in field_errors.items())
    logger.warning(f"[约束校验失败] {request.method} {request.url.path} - errors={field_errors}")
    return _error_response(DEFAULT_CODES[ErrorKind.VALIDATION], message, field_errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    HTTP 异常处理器

    Args:
        request: FastAPI 请求对象
        exc: HTTP 异常对象

    Returns:
        与原状态码一致的统一格式响应
    """
    logger.warning(f"[HTTP异常] {request.method} {request.url.path} - status={exc.status_code}, detail={exc.detail}")
    return _error_response(exc.status_code, str(exc.detail))


async def exception_handler(request: Request, exc: Exception):
    """
    全局异常处理器

    Args:
        request: FastAPI 请求对象
        exc: 异常对象

    Returns:
        500 响应，不向调用方暴露异常细节
    """
    logger.error(f"[未处理的异常] {request.method} {request.url.path} - {exc}", exc_info=True)
    return _error_response(DEFAULT_CODES[ErrorKind.INTERNAL], "系统内部错误")
