"""
LLM 客户端封装
支持 SiliconFlow、DeepSeek 等兼容 OpenAI 的 API
"""
import logging
from typing import Optional

from langchain_openai import ChatOpenAI
from langchain_core.language_models import BaseChatModel

from app.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def get_llm(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    config: Optional[Settings] = None,
    **kwargs
) -> BaseChatModel:
    """
    获取 LLM 客户端实例

    Args:
        model: 模型名称，默认使用配置中的模型
        temperature: 温度参数，默认使用配置中的温度
        max_tokens: 最大生成Token数，默认使用配置中的值
        config: 应用配置，默认使用全局配置
        **kwargs: 其他参数（会覆盖默认参数）

    Returns:
        BaseChatModel: LLM 客户端实例

    Raises:
        ValueError: 缺少 OPENAI_API_KEY 或 OPENAI_BASE_URL 配置
    """
    config = config or default_settings

    if not config.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY 未配置，请设置 OPENAI_API_KEY")
    if not config.OPENAI_BASE_URL:
        raise ValueError("OPENAI_BASE_URL 未配置，请设置 OPENAI_BASE_URL")

    params = {
        "model": model or config.LLM_MODEL,
        "temperature": temperature if temperature is not None else config.LLM_TEMPERATURE,
        "openai_api_key": config.OPENAI_API_KEY,
        "base_url": config.OPENAI_BASE_URL,
        "timeout": config.LLM_TIMEOUT,
        "max_retries": 0,  # 不重试，失败直接返回给调用方
    }
    resolved_max_tokens = max_tokens if max_tokens is not None else config.LLM_MAX_TOKENS
    if resolved_max_tokens is not None:
        params["max_tokens"] = resolved_max_tokens
    params.update(kwargs)

    logger.debug(f"[LLM客户端] model={params['model']}, temperature={params['temperature']}")
    return ChatOpenAI(**params)
