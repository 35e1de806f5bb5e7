"""
MCP 工具接口

通过 JSON-RPC 2.0 消息端点向 AI Agent 暴露工具，并提供健康检查、
服务信息、工具调试列表和使用文档。
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from langchain_core.tools import BaseTool, ToolException
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.mcp import (
    CallToolResult,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    TextContent,
    ToolCallParams,
    ToolDefinition,
)
from domain.tools.registry import TOOL_REGISTRY, list_tools

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mcp", tags=["MCP工具"])


class JsonRpcFailure(Exception):
    """JSON-RPC 协议层错误"""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.error = JsonRpcError(code=code, message=message, data=data)


def _rpc_response(request_id: Any, result: Any = None, error: Optional[JsonRpcError] = None) -> JSONResponse:
    body = JsonRpcResponse(id=request_id, result=result, error=error).model_dump(exclude_none=True)
    # id 必须出现在响应中，无法解析时为 null
    body["id"] = request_id
    return JSONResponse(content=body)


def _tool_definition(tool: BaseTool) -> ToolDefinition:
    return ToolDefinition(
        name=tool.name,
        description=tool.description,
        input_schema=tool.args_schema.model_json_schema(),
    )


def _tool_parameters(tool: BaseTool) -> Dict[str, Dict[str, Any]]:
    schema = tool.args_schema.model_json_schema()
    required = set(schema.get("required", []))
    return {
        name: {**definition, "required": name in required}
        for name, definition in schema.get("properties", {}).items()
    }


def _initialize() -> Dict[str, Any]:
    return {
        "protocolVersion": settings.MCP_PROTOCOL_VERSION,
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": settings.MCP_SERVER_NAME, "version": settings.APP_VERSION},
    }


def _list_tools() -> Dict[str, Any]:
    tools = [_tool_definition(tool).model_dump(by_alias=True) for tool in list_tools()]
    return {"tools": tools}


async def _call_tool(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    调用工具

    参数不合法或工具不存在返回 JSON-RPC 错误；工具执行失败以 isError 结果返回。
    """
    try:
        call = ToolCallParams.model_validate(params or {})
    except ValidationError as e:
        raise JsonRpcFailure(INVALID_PARAMS, "tools/call 参数不合法", json.loads(e.json(include_url=False))) from e

    tool = TOOL_REGISTRY.get(call.name)
    if tool is None:
        raise JsonRpcFailure(INVALID_PARAMS, f"工具不存在: {call.name}")

    try:
        arguments = tool.args_schema.model_validate(call.arguments).model_dump()
    except ValidationError as e:
        raise JsonRpcFailure(
            INVALID_PARAMS,
            f"工具参数不合法: {call.name}",
            json.loads(e.json(include_url=False)),
        ) from e

    logger.info(f"[MCP工具调用] tool={call.name}, arguments={arguments}")
    try:
        text = await tool.ainvoke(arguments)
        result = CallToolResult(content=[TextContent(text=str(text))])
    except ToolException as e:
        logger.warning(f"[MCP工具调用失败] tool={call.name}, error={e}")
        result = CallToolResult(content=[TextContent(text=str(e))], is_error=True)
    except Exception as e:
        logger.error(f"[MCP工具调用异常] tool={call.name}, error={e}", exc_info=True)
        result = CallToolResult(content=[TextContent(text=f"{call.name} 执行失败: {e}")], is_error=True)
    return result.model_dump(by_alias=True)


async def _dispatch(rpc: JsonRpcRequest) -> Any:
    if rpc.method == "initialize":
        return _initialize()
    if rpc.method == "ping":
        return {}
    if rpc.method == "tools/list":
        return _list_tools()
    if rpc.method == "tools/call":
        return await _call_tool(rpc.params)
    raise JsonRpcFailure(METHOD_NOT_FOUND, f"方法不存在: {rpc.method}")


@router.post("/message")
async def handle_message(request: Request) -> Response:
    """
    JSON-RPC 2.0 消息端点

    支持 initialize、ping、tools/list、tools/call；不带 id 的通知返回 202。
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("[MCP消息] 请求体不是合法 JSON")
        return _rpc_response(None, error=JsonRpcError(code=PARSE_ERROR, message="JSON 解析失败"))

    request_id = payload.get("id") if isinstance(payload, dict) else None
    try:
        rpc = JsonRpcRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"[MCP消息] 非法请求: {e}")
        return _rpc_response(request_id, error=JsonRpcError(code=INVALID_REQUEST, message="非法的 JSON-RPC 请求"))

    if "id" not in payload:
        logger.info(f"[MCP通知] method={rpc.method}")
        return Response(status_code=status.HTTP_202_ACCEPTED)

    logger.info(f"[MCP消息] method={rpc.method}, id={rpc.id}")
    try:
        return _rpc_response(rpc.id, result=await _dispatch(rpc))
    except JsonRpcFailure as e:
        logger.warning(f"[MCP消息失败] method={rpc.method}, code={e.error.code}, message={e.error.message}")
        return _rpc_response(rpc.id, error=e.error)
    except Exception as e:
        logger.error(f"[MCP消息异常] method={rpc.method}, error={e}", exc_info=True)
        return _rpc_response(rpc.id, error=JsonRpcError(code=INTERNAL_ERROR, message=str(e)))


@router.get("/health")
async def mcp_health() -> Dict[str, Any]:
    """MCP 服务健康检查"""
    return {
        "status": "UP",
        "service": "MCP Server",
        "version": settings.APP_VERSION,
        "timestamp": datetime.now().isoformat(),
        "protocol": "MCP (Model Context Protocol)",
        "endpoints": {"message": f"{settings.API_PREFIX}/mcp/message"},
    }


@router.get("/info")
async def mcp_info() -> Dict[str, Any]:
    """MCP 服务配置信息"""
    return {
        "name": settings.MCP_SERVER_NAME,
        "version": settings.APP_VERSION,
        "protocolVersion": settings.MCP_PROTOCOL_VERSION,
        "description": f"{settings.APP_NAME} MCP Server",
        "capabilities": {"tools": {"supported": True, "listChanged": False}},
        "registeredTools": len(TOOL_REGISTRY),
        "timestamp": datetime.now().isoformat(),
    }


@router.get("/debug/tools")
async def debug_tools() -> Dict[str, Any]:
    """已注册工具列表"""
    tools: List[Dict[str, Any]] = [
        {
            "toolName": tool.name,
            "description": tool.description,
            "parameters": list(_tool_parameters(tool).keys()),
        }
        for tool in list_tools()
    ]
    response: Dict[str, Any] = {
        "totalTools": len(tools),
        "timestamp": datetime.now().isoformat(),
        "tools": tools,
    }
    if not tools:
        response["message"] = "No tools registered"
    return response


@router.get("/docs", response_class=PlainTextResponse)
async def mcp_docs() -> str:
    """MCP 服务使用文档（纯文本）"""
    prefix = settings.API_PREFIX
    divider = "=" * 80
    section = "-" * 80
    lines = [
        divider,
        "MCP Server 使用文档",
        divider,
        "",
        "连接信息",
        section,
        f"消息端点:     {prefix}/mcp/message",
        f"健康检查:     {prefix}/mcp/health",
        f"工具列表:     {prefix}/mcp/debug/tools",
        f"使用文档:     {prefix}/mcp/docs (本页面)",
        "",
        "已注册工具",
        section,
    ]
    for index, tool in enumerate(list_tools(), start=1):
        lines.append(f"{index}. {tool.name}")
        lines.append(f"   描述: {tool.description}")
        parameters = _tool_parameters(tool)
        if not parameters:
            lines.append("   参数: 无")
        else:
            lines.append("   参数:")
            for name, definition in parameters.items():
                required = " [必填]" if definition["required"] else ""
                lines.append(
                    f"     - {name} ({definition.get('type', 'any')}){required}: {definition.get('description', '')}"
                )
        lines.append("")

    lines.extend([
        "使用示例",
        section,
        f"curl http://localhost:{settings.APP_PORT}{prefix}/mcp/message \\",
        "     -H \"Content-Type: application/json\" \\",
        "     -d '{\"jsonrpc\": \"2.0\", \"method\": \"tools/call\", "
        "\"params\": {\"name\": \"getUserById\", \"arguments\": {\"userId\": 1}}, \"id\": 1}'",
        "",
        divider,
        f"生成时间: {datetime.now().isoformat()}",
        divider,
    ])
    return "\n".join(lines) + "\n"
