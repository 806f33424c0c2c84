"""换行分隔 JSON（NDJSON）流式解码器。

Ollama 的 /api/generate 与 /api/chat 在 stream=true 时逐行返回 JSON 对象，
但网络 chunk 的边界与行边界无关：一个 chunk 可能包含半条记录，
也可能包含多条记录。本模块负责：

1. 维护跨 chunk 的残留缓冲区，只把完整的行当作记录解析。
2. 单条记录解析失败时记录日志并跳过，不中断整个流。
3. 通过 provider 提供的 extract 函数取出增量文本与 done 标记。
4. 遇到终止记录后停止消费，返回全部增量的拼接结果。
"""

import json
import logging
from typing import Any, AsyncIterable, Callable, Dict, List, Optional, Tuple

from assistant_core.domain.exceptions import MalformedRecord
from assistant_core.domain.models import StreamFragment
from assistant_core.infrastructure.logging.logger import log_event


# extract(record) -> (增量文本, 是否终止)
RecordExtractor = Callable[[Dict[str, Any]], Tuple[str, bool]]
FragmentCallback = Callable[[str], None]

RECORD_SEPARATOR = "\n"


class NdjsonStreamDecoder:
    """单次请求独占的增量解码器，不可复用。"""

    def __init__(self, extract: RecordExtractor, source: str = "stream"):
        self._extract = extract
        self._source = source
        self._buffer = ""
        self._parts: List[str] = []
        self._done = False
        self.skipped_records = 0

    @property
    def done(self) -> bool:
        return self._done

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, chunk: str) -> List[StreamFragment]:
        """喂入一个 chunk，返回其中完整记录产出的片段（按到达顺序）。"""

        if self._done or not chunk:
            return []
        self._buffer += chunk
        *records, self._buffer = self._buffer.split(RECORD_SEPARATOR)
        fragments: List[StreamFragment] = []
        for record in records:
            fragment = self._consume(record)
            if fragment is not None:
                fragments.append(fragment)
            if self._done:
                self._buffer = ""
                break
        return fragments

    def finish(self) -> List[StreamFragment]:
        """流结束时处理没有换行结尾的最后一条记录。"""

        if self._done:
            return []
        tail, self._buffer = self._buffer, ""
        fragment = self._consume(tail)
        return [fragment] if fragment is not None else []

    async def decode(
        self,
        chunks: AsyncIterable[str],
        on_fragment: Optional[FragmentCallback] = None,
    ) -> str:
        """消费整个 chunk 流，逐片段同步回调，返回拼接后的完整文本。

        没有收到终止记录就结束的流不视为错误，直接返回已累积内容。
        """

        async for chunk in chunks:
            self._emit(self.feed(chunk), on_fragment)
            if self._done:
                break
        else:
            self._emit(self.finish(), on_fragment)
            if not self._done:
                log_event(
                    logging.INFO,
                    "Stream ended without terminal record",
                    source=self._source,
                    chars=len(self.text),
                )
        return self.text

    @staticmethod
    def _emit(fragments: List[StreamFragment], on_fragment: Optional[FragmentCallback]) -> None:
        if on_fragment is None:
            return
        for fragment in fragments:
            if fragment.text:
                on_fragment(fragment.text)

    def _consume(self, record: str) -> Optional[StreamFragment]:
        if not record.strip():
            return None
        try:
            data = self._parse_record(record)
        except MalformedRecord as e:
            # 中间帧偶尔损坏，跳过该条即可，不能污染整条响应
            self.skipped_records += 1
            log_event(
                logging.WARNING,
                "Skipped malformed stream record",
                source=self._source,
                code=e.code,
                error=e.message,
                record=record[:200],
            )
            return None
        text, is_final = self._extract(data)
        text = text or ""
        if is_final:
            self._done = True
        if text:
            self._parts.append(text)
        if text or is_final:
            return StreamFragment(text=text, is_final=is_final)
        return None

    @staticmethod
    def _parse_record(record: str) -> Dict[str, Any]:
        try:
            data = json.loads(record)
        except json.JSONDecodeError as e:
            raise MalformedRecord(code="MALFORMED_RECORD", message=str(e))
        if not isinstance(data, dict):
            raise MalformedRecord(
                code="MALFORMED_RECORD",
                message=f"Expected JSON object, got {type(data).__name__}",
            )
        return data
