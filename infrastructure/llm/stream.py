"""
聊天补全流式客户端

直接读取 OpenAI 兼容接口的 SSE 响应（data: {...} 行，以 data: [DONE] 结束），
逐个产出增量 token。
"""
import json
import logging
from typing import AsyncIterator, Optional, Union

import httpx

from app.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


class StreamDone:
    """上游结束标记"""


STREAM_DONE = StreamDone()


class UpstreamError(Exception):
    """上游接口返回非 2xx 状态"""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"上游接口返回错误状态 {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


def decode_stream_line(line: str) -> Union[str, StreamDone, None]:
    """
    解析一行 SSE 数据

    Args:
        line: 原始行

    Returns:
        - STREAM_DONE: 收到 [DONE] 结束标记
        - str: 增量 token（优先 content，其次 reasoning_content）
        - None: 空行、非 data 行或不含内容的增量

    Raises:
        ValueError: data 内容不是合法 JSON
    """
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX):].strip()
    if payload == DONE_MARKER:
        return STREAM_DONE
    if not payload:
        return None

    chunk = json.loads(payload)
    choices = chunk.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    token = delta.get("content") or delta.get("reasoning_content") or ""
    return token or None


class ChatStreamClient:
    """聊天补全流式客户端"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        初始化流式客户端

        Args:
            config: 应用配置，默认使用全局配置
            http_client: 外部传入的 httpx 客户端（测试时可注入 MockTransport），
                为空时每次请求创建并关闭一个客户端
        """
        self.config = config or default_settings
        self.http_client = http_client

    @property
    def url(self) -> str:
        """聊天补全接口地址"""
        if not self.config.OPENAI_BASE_URL:
            raise ValueError("OPENAI_BASE_URL 未配置，请设置 OPENAI_BASE_URL")
        return self.config.OPENAI_BASE_URL.rstrip("/") + "/chat/completions"

    def _build_request(self, message: str) -> dict:
        return {
            "model": self.config.LLM_STREAM_MODEL,
            "messages": [{"role": "user", "content": message}],
            "stream": True,
        }

    async def stream_tokens(self, message: str) -> AsyncIterator[str]:
        """
        发送流式请求并逐个产出 token，收到 [DONE] 或上游关闭连接时结束

        Args:
            message: 用户消息

        Yields:
            增量 token

        Raises:
            UpstreamError: 上游返回非 2xx 状态
            httpx.HTTPError: 传输错误
            ValueError: 数据解析错误
        """
        headers = {
            "Authorization": f"Bearer {self.config.OPENAI_API_KEY}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        # 流式连接不设置读取超时，直到上游结束
        timeout = httpx.Timeout(10.0, read=None)

        if self.http_client is not None:
            async for token in self._read(self.http_client, message, headers, timeout):
                yield token
            return

        async with httpx.AsyncClient() as client:
            async for token in self._read(client, message, headers, timeout):
                yield token

    async def _read(
        self,
        client: httpx.AsyncClient,
        message: str,
        headers: dict,
        timeout: httpx.Timeout,
    ) -> AsyncIterator[str]:
        async with client.stream(
            "POST",
            self.url,
            json=self._build_request(message),
            headers=headers,
            timeout=timeout,
        ) as response:
            if response.status_code < 200 or response.status_code >= 300:
                body = (await response.aread()).decode("utf-8", errors="ignore")
                raise UpstreamError(response.status_code, body)

            async for line in response.aiter_lines():
                decoded = decode_stream_line(line)
                if decoded is STREAM_DONE:
                    logger.debug("[流式聊天] 收到结束标记")
                    return
                if decoded:
                    yield decoded
