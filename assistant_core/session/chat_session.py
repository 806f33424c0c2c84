"""聊天会话编排。

一个 ChatSession 独占一份消息历史，同一时刻最多一个请求在进行中。
每次发送都会创建一份请求级状态（流式累计文本 + ThinkingState），
请求完成或被放弃后即丢弃。

会话被关闭（close）后，旧请求的回调全部变成空操作，
完成时也不会再写入历史。
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from assistant_core.domain.conversation import ChatHistory
from assistant_core.domain.exceptions import (
    BusinessError,
    MissingInput,
    NoModelSelected,
    SessionBusy,
    ValidationError,
)
from assistant_core.domain.models import ChatMessage, RichRun, RichText
from assistant_core.domain.styles import get_style_directive
from assistant_core.infrastructure.logging.logger import log_event
from assistant_core.providers.base import ProviderClient
from assistant_core.rendering.rich_text import document_runs, reconstruct
from assistant_core.session.document import DocumentWriter
from assistant_core.session.gate import RequestGate
from assistant_core.streaming.thinking import ThinkingState

SELECTION_PLACEHOLDER = "{{text}}"


@dataclass
class _PendingReply:
    """单个进行中请求的状态。"""

    generation: int
    user_message: ChatMessage
    thinking: ThinkingState = field(default_factory=ThinkingState)
    parts: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.parts)


class ChatSession:
    def __init__(
        self,
        provider: ProviderClient,
        model: Optional[str] = None,
        style: str = "Normal",
        document: Optional[DocumentWriter] = None,
        gate: Optional[RequestGate] = None,
    ):
        self._provider = provider
        self.model = model
        self.style = style
        self._document = document
        self._gate = gate or RequestGate()
        self._history = ChatHistory()
        self._selected_text = ""
        self._expanded: Dict[int, bool] = {}
        self._pending: Optional[_PendingReply] = None
        self._generation = 0
        self._closed = False

    # ---- 只读状态 ----

    @property
    def history(self) -> List[ChatMessage]:
        return self._history.snapshot()

    @property
    def busy(self) -> bool:
        return self._gate.busy

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def streaming_text(self) -> str:
        return self._pending.text if self._pending else ""

    @property
    def is_thinking(self) -> bool:
        return bool(self._pending and self._pending.thinking.is_open)

    @property
    def pending_user_message(self) -> Optional[ChatMessage]:
        return self._pending.user_message if self._pending else None

    @property
    def selected_text(self) -> str:
        return self._selected_text

    # ---- 配置 ----

    def configure(
        self,
        provider: Optional[ProviderClient] = None,
        model: Optional[str] = None,
        style: Optional[str] = None,
    ) -> None:
        """设置变更后更新 Provider / 模型 / 风格，进行中的请求不受影响。"""
        if provider is not None:
            self._provider = provider
        if model is not None:
            self.model = model
        if style is not None:
            self.style = style

    def update_selection(self, text: Optional[str]) -> None:
        """选区变化通知；空选区不覆盖上一次的选中文本。原样保存，不做裁剪。"""
        if text:
            self._selected_text = text

    # ---- 发送 ----

    async def send(self, user_input: str) -> ChatMessage:
        """发送一轮对话，流式接收回答，成功后把用户与助手两条消息追加到历史。

        失败时历史保持不变，异常原样上抛。
        """

        if self._closed:
            raise ValidationError(code="SESSION_CLOSED", message="Chat session has been closed")
        if self.busy:
            raise SessionBusy(active=self._gate.owner)
        if not user_input or not user_input.strip():
            raise MissingInput(code="MISSING_INPUT", message="Please enter a message")
        if not self.model:
            raise NoModelSelected(code="NO_MODEL_SELECTED", message="Please select a model")

        user_message = ChatMessage(role="user", content=self._fill_placeholder(user_input))
        directive = get_style_directive(self.style)
        messages = [
            ChatMessage(role="system", content=directive.system_prompt),
            *self._history.snapshot(),
            user_message,
        ]

        self._gate.acquire("chat")
        self._generation += 1
        pending = _PendingReply(generation=self._generation, user_message=user_message)
        self._pending = pending
        try:
            response = await self._provider.chat(
                messages,
                self.model,
                stream=True,
                on_fragment=lambda fragment: self._on_fragment(pending, fragment),
                temperature=directive.temperature,
            )
        except Exception as e:
            log_event(
                logging.ERROR,
                "Chat request failed",
                provider=getattr(self._provider, "name", None),
                model=self.model,
                code=getattr(e, "code", type(e).__name__),
                error=str(e),
            )
            raise
        finally:
            self._gate.release()
            if self._pending is pending:
                self._pending = None

        assistant_message = ChatMessage(role="assistant", content=response)
        if self._is_stale(pending):
            log_event(logging.INFO, "Dropped reply for abandoned request", generation=pending.generation)
            return assistant_message
        self._history.add(user_message)
        self._history.add(assistant_message)
        log_event(
            logging.INFO,
            "Chat reply completed",
            provider=getattr(self._provider, "name", None),
            model=self.model,
            chars=len(response),
            thinking_blocks=pending.thinking.open_count,
        )
        return assistant_message

    def _on_fragment(self, pending: _PendingReply, fragment: str) -> None:
        if self._is_stale(pending):
            return
        pending.parts.append(fragment)
        pending.thinking.feed(fragment)

    def _is_stale(self, pending: _PendingReply) -> bool:
        return self._closed or pending.generation != self._generation

    def _fill_placeholder(self, user_input: str) -> str:
        # 只有显式使用 {{text}} 时才带上选中文本，且只替换第一个
        selected = self._selected_text.strip()
        if selected and SELECTION_PLACEHOLDER in user_input:
            return user_input.replace(SELECTION_PLACEHOLDER, f'"{selected}"', 1)
        return user_input

    # ---- 会话生命周期 ----

    def new_chat(self) -> None:
        """清空历史、流式累计文本与展开状态；请求进行中时不可用。"""
        if self.busy:
            raise SessionBusy()
        self._history.clear()
        self._expanded = {}
        self._pending = None

    def close(self) -> None:
        """拆除会话，进行中请求之后的回调全部忽略。"""
        self._closed = True
        self._generation += 1
        self._pending = None

    # ---- 展示 ----

    def toggle_thoughts(self, index: int) -> bool:
        self._expanded[index] = not self._expanded.get(index, False)
        return self._expanded[index]

    def is_expanded(self, index: int) -> bool:
        return self._expanded.get(index, False)

    def render(self, index: int) -> RichText:
        return reconstruct(self._message_at(index).content)

    def render_live(self) -> RichText:
        return reconstruct(self.streaming_text, streaming=True)

    def insert_message(self, index: int) -> List[RichRun]:
        """把一条助手回答（去掉思考段）按粗体分段插入文档。"""

        message = self._message_at(index)
        if message.role != "assistant":
            raise ValidationError(code="NOT_ASSISTANT_MESSAGE", message="Only assistant replies can be inserted")
        if self._document is None:
            raise BusinessError(code="NO_DOCUMENT", message="No document attached to this session")
        runs = document_runs(message.content)
        try:
            self._document.insert_runs(runs)
        except Exception as e:
            log_event(logging.ERROR, "Error inserting text", error=str(e), runs=len(runs))
            raise
        return runs

    def _message_at(self, index: int) -> ChatMessage:
        messages = self._history.messages
        if index < 0 or index >= len(messages):
            raise ValidationError(code="MESSAGE_NOT_FOUND", message=f"No message at index {index}")
        return messages[index]
