"""思考段（<think>…</think>）状态机。

每个进行中的请求持有一个 ThinkingState。状态只用于 UI 提示
（"模型正在思考"），不影响最终保存或返回的文本。

标记可能被拆在两个片段之间，所以每次都重新扫描累计文本，
而不是只看新片段。
"""

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"


class ThinkingState:
    """Closed / Open 两态状态机，初始为 Closed。"""

    def __init__(self) -> None:
        self._open = False
        self._accumulated = ""
        self.open_count = 0

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def text(self) -> str:
        return self._accumulated

    def feed(self, fragment: str) -> bool:
        """追加一个片段并返回最新状态。"""
        self._accumulated += fragment
        return self.update(self._accumulated)

    def update(self, cumulative_text: str) -> bool:
        """根据累计文本推进状态。

        Open 当且仅当最后一个开始标记之后没有结束标记。
        """
        last_open = cumulative_text.rfind(THINK_OPEN)
        last_close = cumulative_text.rfind(THINK_CLOSE)
        if not self._open and last_open != -1 and last_open > last_close:
            self._open = True
            self.open_count += 1
        elif self._open and last_close > last_open:
            self._open = False
        return self._open

    def reset(self) -> None:
        self._open = False
        self._accumulated = ""
        self.open_count = 0
