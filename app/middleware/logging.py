"""
日志中间件
"""
import logging
import time
import json
from typing import Any
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"password"}
MASK = "******"


def mask_sensitive(data: Any) -> Any:
    """递归脱敏请求体中的敏感字段"""
    if isinstance(data, dict):
        return {
            key: MASK if key in SENSITIVE_FIELDS else mask_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item) for item in data]
    return data


class LoggingMiddleware(BaseHTTPMiddleware):
    """日志中间件"""

    async def dispatch(self, request: Request, call_next):
        """
        记录请求日志

        Args:
            request: FastAPI 请求对象
            call_next: 下一个中间件或路由处理函数

        Returns:
            响应对象
        """
        start_time = time.time()

        client_host = request.client.host if request.client else 'unknown'
        query_params = dict(request.query_params) if request.query_params else {}

        logger.info(
            f"[HTTP请求开始] {request.method} {request.url.path} - "
            f"客户端: {client_host} - "
            f"查询参数: {query_params if query_params else '无'}"
        )

        # 对于 POST/PUT/PATCH 请求，在 DEBUG 级别记录请求体（仅限 JSON，密码脱敏）
        if request.method in ("POST", "PUT", "PATCH") and logger.isEnabledFor(logging.DEBUG):
            body = await request.body()
            if body:
                try:
                    body_json = mask_sensitive(json.loads(body.decode('utf-8')))
                    logger.debug(f"[HTTP请求体] {request.method} {request.url.path} - body={body_json}")
                except (json.JSONDecodeError, UnicodeDecodeError):
                    body_preview = body[:200].decode('utf-8', errors='ignore')
                    logger.debug(f"[HTTP请求体] {request.method} {request.url.path} - body_preview={body_preview}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"[HTTP请求异常] {request.method} {request.url.path} - "
                f"异常: {str(e)} - "
                f"处理时间: {process_time:.3f}s",
                exc_info=True
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"[HTTP请求完成] {request.method} {request.url.path} - "
            f"状态码: {response.status_code} - "
            f"处理时间: {process_time:.3f}s"
        )

        return response
