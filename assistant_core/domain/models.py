"""统一的对话与渲染数据模型。

本模块定义了核心在不同 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant）。
- StreamFragment: 流式解码器产出的一个增量片段。
- RichRun / RichText: 渲染重建后的带样式文本段。

Provider 适配器只依赖 ChatMessage，并负责把它与各家 API 的 JSON
互相转换；渲染层只产出 RichRun，不直接操作宿主文档。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


# LLM 消息角色类型（与 Ollama / OpenAI 兼容接口的 role 字段对应）
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于会话历史。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class StreamFragment:
    """流式解码器产出的单个增量。

    - text: 本次增量文本，终止记录可能为空串。
    - is_final: 是否来自带 done 标记的终止记录。
    """

    text: str
    is_final: bool = False


@dataclass(frozen=True)
class RichRun:
    """一段共享同一样式（粗体或非粗体）的连续文本。"""

    text: str
    bold: bool = False


@dataclass
class RichText:
    """一次渲染重建的结果。

    - thinking: 思考段的内部文本；没有思考段时为 None。
    - runs: 正文按粗体切分后的有序文本段。
    - thinking_in_progress: 流式中思考段尚未闭合。
    """

    thinking: Optional[str] = None
    runs: List[RichRun] = field(default_factory=list)
    thinking_in_progress: bool = False

    @property
    def plain_text(self) -> str:
        return "".join(run.text for run in self.runs)
