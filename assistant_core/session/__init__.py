"""会话编排：聊天、选区处理、模型列表与工作区装配。"""

from assistant_core.session.chat_session import ChatSession, SELECTION_PLACEHOLDER
from assistant_core.session.document import DocumentWriter
from assistant_core.session.gate import RequestGate
from assistant_core.session.model_catalog import ModelCatalog
from assistant_core.session.text_processor import TextProcessor
from assistant_core.session.workspace import AssistantWorkspace

__all__ = [
    "AssistantWorkspace",
    "ChatSession",
    "DocumentWriter",
    "ModelCatalog",
    "RequestGate",
    "SELECTION_PLACEHOLDER",
    "TextProcessor",
]
