"""把模型输出的扁平字符串重建为带样式的文本段。

处理的标记约定：
- <think>…</think>: 思考段，展示时可折叠，插入文档时丢弃。
- ###: 标题标记，直接删除。
- ---: 分隔线，替换为换行。
- **…**: 粗体段（非贪婪，不跨行）。

本模块只产出 RichRun 序列，不直接操作宿主文档。
"""

import re
from typing import List

from assistant_core.domain.models import RichRun, RichText
from assistant_core.streaming.thinking import THINK_CLOSE, THINK_OPEN

HEADING_MARKER = "###"
RULE_MARKER = "---"
BOLD_DELIMITER = "**"

_THINK_BLOCK_RE = re.compile(re.escape(THINK_OPEN) + r"([\s\S]*?)" + re.escape(THINK_CLOSE) + r"([\s\S]*)")
_THINK_LIVE_RE = re.compile(re.escape(THINK_OPEN) + r"([\s\S]*)")
_BOLD_SPLIT_RE = re.compile(r"(\*\*.*?\*\*)")


def reconstruct(raw_text: str, streaming: bool = False) -> RichText:
    """拆出思考段并把正文切分为粗体 / 非粗体文本段。

    Args:
        raw_text: 已完成或仍在增长的模型输出。
        streaming: 是否仍在流式接收中；只有流式时才把未闭合的
            思考段视为"正在思考"。
    """

    match = _THINK_BLOCK_RE.search(raw_text)
    if match:
        thinking, body = match.group(1), match.group(2)
        return RichText(thinking=thinking, runs=split_bold_runs(normalize_body(body)))

    if streaming:
        live = _THINK_LIVE_RE.search(raw_text)
        if live:
            return RichText(thinking=live.group(1), runs=[], thinking_in_progress=True)

    return RichText(thinking=None, runs=split_bold_runs(normalize_body(raw_text)))


def normalize_body(text: str) -> str:
    """删除标题标记，分隔线替换为换行。"""
    return text.replace(HEADING_MARKER, "").replace(RULE_MARKER, "\n")


def split_bold_runs(text: str) -> List[RichRun]:
    runs: List[RichRun] = []
    # split 带捕获组：奇数下标才是匹配到的粗体段
    for i, part in enumerate(_BOLD_SPLIT_RE.split(text)):
        if i % 2:
            inner = part[len(BOLD_DELIMITER):-len(BOLD_DELIMITER)]
            if inner:
                runs.append(RichRun(text=inner, bold=True))
        elif part:
            runs.append(RichRun(text=part, bold=False))
    return runs


def final_response(raw_text: str) -> str:
    """返回闭合思考段之后的正文；没有完整思考段时原样返回。"""
    match = _THINK_BLOCK_RE.search(raw_text)
    return match.group(2) if match else raw_text


def document_runs(raw_text: str) -> List[RichRun]:
    """聊天回答插入文档时使用的文本段：去思考段、规范化、切粗体。"""
    return split_bold_runs(normalize_body(final_response(raw_text)))
