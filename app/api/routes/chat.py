"""
AI 聊天接口
"""
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from app.api.dependencies import get_chat_service
from app.schemas.chat import ChatRequest, ChatResponse
from app.schemas.response import ApiResponse
from domain.services.chat_service import ChatService, StreamEvent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ai", tags=["AI聊天"])


def format_sse(event: StreamEvent) -> str:
    """
    将事件编码为 Server-Sent Events 文本

    多行数据拆分为多个 data 行。
    """
    lines = [f"event: {event.event}"]
    lines.extend(f"data: {line}" for line in event.data.split("\n"))
    return "\n".join(lines) + "\n\n"


@router.post("/chat", response_model=ApiResponse[ChatResponse])
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    """AI 聊天"""
    return ApiResponse.success(await service.chat(request))


@router.post("/simple-chat", response_model=ApiResponse[str])
async def simple_chat(
    message: str = Query(..., min_length=1, description="用户消息"),
    service: ChatService = Depends(get_chat_service),
):
    """简单 AI 聊天，只返回文本"""
    return ApiResponse.success(await service.simple_chat(message))


@router.get("/stream")
async def stream_chat(
    message: str = Query(..., min_length=1, description="用户消息"),
    service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """
    流式 AI 聊天

    以 SSE 推送 token 事件，上游失败时推送一个 error 事件后关闭。
    """
    async def event_stream() -> AsyncIterator[str]:
        async for event in service.stream_chat(message):
            yield format_sse(event)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/health", response_model=ApiResponse[str])
async def ai_health():
    """AI 服务健康检查"""
    return ApiResponse.success("AI服务运行正常")
