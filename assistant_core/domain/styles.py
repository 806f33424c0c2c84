"""写作风格 → (系统提示词, 温度) 的固定映射。

映射是全函数：未知风格一律落到中性默认值（温度 0.7）。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class WritingStyle(str, Enum):
    SCIENTIFIC = "Scientific"
    FORMAL = "Formal"
    INFORMAL = "Informal"
    FRIENDLY = "Friendly"
    CREATIVE = "Creative"
    WARM = "Warm"
    COLD = "Cold"
    NORMAL = "Normal"


@dataclass(frozen=True)
class StyleDirective:
    system_prompt: str
    temperature: float


NEUTRAL_DIRECTIVE = StyleDirective(
    system_prompt="Please respond in a normal, balanced style.",
    temperature=0.7,
)

STYLE_DIRECTIVES: Dict[WritingStyle, StyleDirective] = {
    WritingStyle.SCIENTIFIC: StyleDirective(
        system_prompt=(
            "Please respond in a scientific/academic style, using formal language, technical terms, "
            "and proper citations where appropriate. Maintain a precise and analytical tone."
        ),
        temperature=0.3,
    ),
    WritingStyle.FORMAL: StyleDirective(
        system_prompt=(
            "Please respond in a formal style, using professional language and maintaining a respectful tone. "
            "Focus on clarity and precision."
        ),
        temperature=0.4,
    ),
    WritingStyle.INFORMAL: StyleDirective(
        system_prompt=(
            "Please respond in an informal style, using casual language and a friendly tone. "
            "Feel free to use contractions and conversational expressions."
        ),
        temperature=0.8,
    ),
    WritingStyle.FRIENDLY: StyleDirective(
        system_prompt=(
            "Please respond in a friendly and approachable style. Use warm language, show enthusiasm, "
            "and maintain a positive tone. Feel free to use casual expressions and be conversational."
        ),
        temperature=0.9,
    ),
    WritingStyle.CREATIVE: StyleDirective(
        system_prompt=(
            "Please respond in a highly creative and imaginative style. Think outside the box, use vivid language, "
            "and explore unique perspectives. Feel free to be innovative and original in your approach."
        ),
        temperature=1.0,
    ),
    WritingStyle.WARM: StyleDirective(
        system_prompt=(
            "Please respond in a warm and empathetic style, showing understanding and emotional support. "
            "Use gentle language and maintain a caring tone."
        ),
        temperature=0.85,
    ),
    WritingStyle.COLD: StyleDirective(
        system_prompt=(
            "Please respond in a cold and detached style, focusing on facts and logic without emotional engagement. "
            "Use precise and objective language."
        ),
        temperature=0.2,
    ),
    WritingStyle.NORMAL: NEUTRAL_DIRECTIVE,
}


def get_style_directive(style: Union[WritingStyle, str, None]) -> StyleDirective:
    """根据风格名返回 StyleDirective，名称区分大小写（与设置面板一致）。"""

    try:
        key = WritingStyle(style)
    except ValueError:
        return NEUTRAL_DIRECTIVE
    return STYLE_DIRECTIVES[key]
