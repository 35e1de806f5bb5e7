"""
AI 聊天服务测试

普通聊天使用 langchain 的 GenericFakeChatModel 替代真实模型，
流式聊天使用 httpx.MockTransport 模拟上游。

Pytest 命令示例：
================

pytest cursor_test/domain/test_chat_service.py -v
"""
import json

import httpx
import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage

from app.core.exceptions import BusinessException, ErrorKind
from app.schemas.chat import ChatRequest
from domain.services.chat_service import ChatService, StreamEvent
from infrastructure.llm.stream import ChatStreamClient


class FakeLlmFactory:
    """记录构造参数并返回假模型"""

    def __init__(self, *messages: AIMessage):
        self.messages = messages
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        return GenericFakeChatModel(messages=iter(self.messages))


def failing_factory(**kwargs):
    raise ValueError("OPENAI_API_KEY 未配置")


def stream_service(test_settings, handler) -> ChatService:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatService(
        config=test_settings,
        llm_factory=FakeLlmFactory(),
        stream_client=ChatStreamClient(test_settings, http_client=http_client),
    )


def sse(content: str) -> str:
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n\n"


async def collect(service: ChatService, message: str = "你好"):
    return [event async for event in service.stream_chat(message)]


class TestChat:
    """chat / simple_chat 测试类"""

    @pytest.mark.asyncio
    async def test_chat_with_metadata(self, test_settings):
        """
        测试用例：上游返回模型名、Token 用量与结束原因

        验证：
        - 回复内容、模型名、totalTokens、finishReason 均取自上游响应
        - 请求参数透传给 LLM 工厂
        """
        # Arrange（准备）
        reply = AIMessage(
            content="你好！",
            response_metadata={"model_name": "upstream-model", "finish_reason": "length"},
            usage_metadata={"input_tokens": 5, "output_tokens": 7, "total_tokens": 12},
        )
        factory = FakeLlmFactory(reply)
        service = ChatService(config=test_settings, llm_factory=factory)

        # Act（执行）
        response = await service.chat(ChatRequest(message="hi", model="m1", temperature=0.2, max_tokens=50))

        # Assert（断言）
        assert response.content == "你好！"
        assert response.model == "upstream-model"
        assert response.total_tokens == 12
        assert response.finish_reason == "length"
        assert factory.calls[0]["model"] == "m1"
        assert factory.calls[0]["temperature"] == 0.2
        assert factory.calls[0]["max_tokens"] == 50
        assert factory.calls[0]["config"] is test_settings

    @pytest.mark.asyncio
    async def test_chat_defaults_without_metadata(self, test_settings):
        """上游未返回元数据时：模型取配置，Token 为 0，结束原因为 stop"""
        service = ChatService(config=test_settings, llm_factory=FakeLlmFactory(AIMessage(content="ok")))

        response = await service.chat(ChatRequest(message="hi"))

        assert response.model == "test-model"
        assert response.total_tokens == 0
        assert response.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_chat_failure_wrapped(self, test_settings):
        """任何失败都包装为 BUSINESS 异常（500），不重试"""
        service = ChatService(config=test_settings, llm_factory=failing_factory)

        with pytest.raises(BusinessException) as exc_info:
            await service.chat(ChatRequest(message="hi"))

        assert exc_info.value.kind == ErrorKind.BUSINESS
        assert exc_info.value.code == 500
        assert exc_info.value.message.startswith("AI聊天服务异常: ")

    @pytest.mark.asyncio
    async def test_simple_chat(self, test_settings):
        service = ChatService(config=test_settings, llm_factory=FakeLlmFactory(AIMessage(content="简单回复")))

        assert await service.simple_chat("hi") == "简单回复"

    @pytest.mark.asyncio
    async def test_simple_chat_failure(self, test_settings):
        service = ChatService(config=test_settings, llm_factory=failing_factory)

        with pytest.raises(BusinessException):
            await service.simple_chat("hi")


class TestStreamChat:
    """stream_chat 测试类"""

    @pytest.mark.asyncio
    async def test_two_chunks_then_done(self, test_settings):
        """
        测试用例：两个增量后收到 [DONE]

        验证：
        - 恰好两个 token 事件，顺序与上游一致
        - 没有 error 事件
        """
        def handler(request):
            return httpx.Response(200, text=sse("Hel") + sse("lo") + "data: [DONE]\n\n")

        events = await collect(stream_service(test_settings, handler))

        assert events == [StreamEvent("token", "Hel"), StreamEvent("token", "lo")]

    @pytest.mark.asyncio
    async def test_upstream_error_status(self, test_settings):
        """上游返回非 2xx：只产出一个 error 事件"""
        def handler(request):
            return httpx.Response(500, text="boom")

        events = await collect(stream_service(test_settings, handler))

        assert len(events) == 1
        assert events[0].event == "error"
        assert "500" in events[0].data

    @pytest.mark.asyncio
    async def test_decode_error_after_tokens(self, test_settings):
        """已输出部分 token 后解析失败：保留已输出的 token，再以一个 error 事件结束"""
        def handler(request):
            return httpx.Response(200, text=sse("部分") + "data: {broken\n\n" + sse("不会输出"))

        events = await collect(stream_service(test_settings, handler))

        assert [e.event for e in events] == ["token", "error"]
        assert events[0].data == "部分"

    @pytest.mark.asyncio
    async def test_transport_error(self, test_settings):
        """传输错误：一个 error 事件"""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        events = await collect(stream_service(test_settings, handler))

        assert [e.event for e in events] == ["error"]
        assert "connection refused" in events[0].data
