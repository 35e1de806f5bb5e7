"""
MCP（JSON-RPC 2.0）消息模型
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

# JSON-RPC 标准错误码
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcRequest(BaseModel):
    """JSON-RPC 请求"""
    jsonrpc: str = Field(default="2.0", description="协议版本，固定为 2.0")
    method: str = Field(..., description="方法名，如 tools/list、tools/call")
    params: Optional[Dict[str, Any]] = Field(default=None, description="方法参数")
    id: Optional[Union[int, str]] = Field(default=None, description="请求ID，为空表示通知")


class JsonRpcError(BaseModel):
    """JSON-RPC 错误对象"""
    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 响应"""
    jsonrpc: str = "2.0"
    id: Optional[Union[int, str]] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None


class ToolCallParams(BaseModel):
    """tools/call 参数"""
    name: str = Field(..., description="工具名称")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="工具参数")


class TextContent(BaseModel):
    """工具返回的文本内容"""
    type: str = "text"
    text: str


class CallToolResult(BaseModel):
    """工具调用结果"""
    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent]
    is_error: bool = Field(default=False, alias="isError")


class ToolDefinition(BaseModel):
    """tools/list 返回的工具描述"""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(..., alias="inputSchema")
