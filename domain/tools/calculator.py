"""
数学计算器工具
"""
import ast
import json
import logging
import operator
import re
from typing import Union

from pydantic import BaseModel, Field
from langchain_core.tools import ToolException, tool

logger = logging.getLogger(__name__)

# 只允许数字、四则运算符、括号和空白
EXPRESSION_PATTERN = re.compile(r"[0-9+\-*/().\s]+")

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

Number = Union[int, float]


class CalculatorInput(BaseModel):
    """计算器工具的输入参数"""
    expression: str = Field(
        description="数学表达式，支持 +、-、*、/、()，例如: (2+3)*4",
        examples=["(2+3)*4", "10/4"]
    )


def _eval_node(node: ast.AST) -> Number:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        return _BINARY_OPERATORS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_eval_node(node.operand))
    raise ValueError("不支持的表达式")


def evaluate_expression(expression: str) -> Number:
    """
    计算四则运算表达式

    Args:
        expression: 数学表达式

    Returns:
        计算结果，整数值的浮点结果返回 int

    Raises:
        ValueError: 表达式包含非法字符或语法错误
        ZeroDivisionError: 除数为零
    """
    if not expression or not EXPRESSION_PATTERN.fullmatch(expression):
        raise ValueError("表达式包含非法字符")
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"表达式语法错误: {expression}") from e
    result = _eval_node(tree)
    if isinstance(result, float) and result.is_integer():
        return int(result)
    return result


@tool("calculator", args_schema=CalculatorInput)
async def calculator(expression: str) -> str:
    """计算数学表达式。支持加减乘除和括号运算。"""
    logger.debug(f"[calculator] 计算表达式: {expression}")
    try:
        result = evaluate_expression(expression)
    except ZeroDivisionError as e:
        logger.warning(f"[calculator] 除数为零 - expression={expression}")
        raise ToolException("计算失败: 除数不能为零") from e
    except ValueError as e:
        logger.warning(f"[calculator] 计算失败 - expression={expression}, error={e}")
        raise ToolException(f"计算失败: {e}") from e

    logger.debug(f"[calculator] 计算结果: {result}")
    return json.dumps({"expression": expression, "result": result}, ensure_ascii=False)
