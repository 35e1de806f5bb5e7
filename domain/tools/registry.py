"""
工具注册表
统一管理对外暴露给 AI Agent 的工具
"""
from typing import Dict, List
from langchain_core.tools import BaseTool

# 工具注册表（延迟导入，避免循环依赖）
TOOL_REGISTRY: Dict[str, BaseTool] = {}


def register_tool(name: str, tool: BaseTool):
    """
    注册新工具

    Args:
        name: 工具名称
        tool: 工具实例
    """
    TOOL_REGISTRY[name] = tool


def get_tool(name: str) -> BaseTool:
    """
    获取工具

    Args:
        name: 工具名称

    Returns:
        工具实例

    Raises:
        ValueError: 工具不存在
    """
    if name not in TOOL_REGISTRY:
        raise ValueError(f"工具不存在: {name}")
    return TOOL_REGISTRY[name]


def list_tools() -> List[BaseTool]:
    """按注册顺序返回所有工具"""
    return list(TOOL_REGISTRY.values())


def init_tools():
    """
    初始化工具注册表
    导入所有工具并注册
    """
    from domain.tools.user_tools import get_user_by_id, list_users, get_database_stats
    from domain.tools.calculator import calculator
    from domain.tools.server_time import get_server_time

    for tool in (get_user_by_id, list_users, calculator, get_server_time, get_database_stats):
        register_tool(tool.name, tool)


# 初始化工具注册表
init_tools()
