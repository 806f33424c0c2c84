"""领域层：数据模型、写作风格映射与业务异常。"""

from assistant_core.domain.models import ChatMessage, RichRun, RichText, StreamFragment
from assistant_core.domain.styles import StyleDirective, WritingStyle, get_style_directive

__all__ = [
    "ChatMessage",
    "RichRun",
    "RichText",
    "StreamFragment",
    "StyleDirective",
    "WritingStyle",
    "get_style_directive",
]
