from dataclasses import dataclass, field
from typing import List

from .models import ChatMessage


@dataclass
class ChatHistory:
    """单个会话独占的消息历史，只追加，"新对话"时整体清空。"""

    messages: List[ChatMessage] = field(default_factory=list)

    def add(self, message: ChatMessage) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages = []

    def snapshot(self) -> List[ChatMessage]:
        """返回副本，调用方（包括 Provider）拿到的永远不是内部列表。"""
        return list(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
