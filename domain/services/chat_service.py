"""
AI 聊天服务

转发用户消息到外部聊天补全接口，支持普通调用与流式输出，失败不重试。
"""
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import BusinessException
from app.schemas.chat import ChatRequest, ChatResponse
from infrastructure.llm.client import get_llm
from infrastructure.llm.stream import ChatStreamClient

logger = logging.getLogger(__name__)

LlmFactory = Callable[..., BaseChatModel]


@dataclass(frozen=True)
class StreamEvent:
    """推送给调用方的流式事件：token 或 error"""
    event: str
    data: str


def _total_tokens(message: AIMessage) -> int:
    """从响应中提取 Token 用量，未统计时返回 0"""
    usage = getattr(message, "usage_metadata", None) or {}
    if usage.get("total_tokens"):
        return int(usage["total_tokens"])
    token_usage = message.response_metadata.get("token_usage") or {}
    return int(token_usage.get("total_tokens") or 0)


class ChatService:
    """AI 聊天服务"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        llm_factory: Optional[LlmFactory] = None,
        stream_client: Optional[ChatStreamClient] = None,
    ):
        """
        初始化聊天服务

        Args:
            config: 应用配置，默认使用全局配置
            llm_factory: LLM 构造函数，默认使用 get_llm
            stream_client: 流式客户端，默认按配置创建
        """
        self.config = config or default_settings
        self.llm_factory = llm_factory or get_llm
        self.stream_client = stream_client or ChatStreamClient(self.config)

    async def _invoke(self, message: str, **llm_kwargs) -> AIMessage:
        llm = self.llm_factory(config=self.config, **llm_kwargs)
        return await llm.ainvoke([HumanMessage(content=message)])

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """
        聊天（单轮用户消息）

        Args:
            request: 聊天请求

        Returns:
            ChatResponse: 回复内容、模型、Token 用量与结束原因

        Raises:
            BusinessException: 调用或解析失败
        """
        logger.info(f"[AI聊天] message_length={len(request.message)}, model={request.model}")
        try:
            result = await self._invoke(
                request.message,
                model=request.model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
            metadata = result.response_metadata or {}
            response = ChatResponse(
                content=str(result.content),
                model=metadata.get("model_name") or request.model or self.config.LLM_MODEL,
                total_tokens=_total_tokens(result),
                finish_reason=metadata.get("finish_reason") or "stop",
            )
        except Exception as e:
            logger.error(f"[AI聊天失败] error={e}, error_type={type(e).__name__}", exc_info=True)
            raise BusinessException(f"AI聊天服务异常: {e}") from e

        logger.info(f"[AI聊天成功] response_length={len(response.content)}, total_tokens={response.total_tokens}")
        return response

    async def simple_chat(self, message: str) -> str:
        """
        简单聊天，只返回文本内容

        Raises:
            BusinessException: 调用失败
        """
        logger.info(f"[简单AI聊天] message_length={len(message)}")
        try:
            result = await self._invoke(message)
        except Exception as e:
            logger.error(f"[简单AI聊天失败] error={e}, error_type={type(e).__name__}", exc_info=True)
            raise BusinessException(f"AI聊天服务异常: {e}") from e
        return str(result.content)

    async def stream_chat(self, message: str) -> AsyncIterator[StreamEvent]:
        """
        流式聊天

        按上游到达顺序产出 token 事件；上游结束标记或关闭连接时正常结束；
        任何错误产出一个 error 事件后结束，不重连。

        Args:
            message: 用户消息

        Yields:
            StreamEvent
        """
        logger.info(f"[流式AI聊天] message_length={len(message)}")
        token_count = 0
        try:
            async for token in self.stream_client.stream_tokens(message):
                token_count += 1
                yield StreamEvent(event="token", data=token)
        except Exception as e:
            # 响应已经开始，只能以 error 事件结束
            logger.error(f"[流式AI聊天失败] tokens={token_count}, error={e}", exc_info=True)
            yield StreamEvent(event="error", data=str(e) or type(e).__name__)
            return
        logger.info(f"[流式AI聊天完成] tokens={token_count}")
