"""宿主文档协作方协议。

核心不直接操作文档，只把纯文本或有序 RichRun 序列交给宿主。
"""

from typing import Protocol, Sequence

from assistant_core.domain.models import RichRun


class DocumentWriter(Protocol):
    def replace_selection(self, text: str) -> None:
        """用纯文本替换当前选区。"""
        ...

    def insert_runs(self, runs: Sequence[RichRun]) -> None:
        """清空当前选区后按顺序逐段追加，每段单独设置粗体。"""
        ...
