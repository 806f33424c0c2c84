"""Assistant Core 顶层包。

该包提供文档写作助手的核心实现：配置加载、领域模型、
Provider 适配（Ollama 流式 / OpenRouter 单次）、NDJSON 流式解码、
思考段状态跟踪、富文本重建、选区操作库与会话编排。
"""

from assistant_core.providers import create_provider
from assistant_core.rendering import reconstruct
from assistant_core.session import AssistantWorkspace, ChatSession, TextProcessor

__all__ = ["AssistantWorkspace", "ChatSession", "TextProcessor", "create_provider", "reconstruct"]
