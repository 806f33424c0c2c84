"""流式响应处理：NDJSON 解码与思考段状态跟踪。"""

from assistant_core.streaming.decoder import NdjsonStreamDecoder, RecordExtractor, FragmentCallback
from assistant_core.streaming.thinking import ThinkingState, THINK_OPEN, THINK_CLOSE

__all__ = [
    "NdjsonStreamDecoder",
    "RecordExtractor",
    "FragmentCallback",
    "ThinkingState",
    "THINK_OPEN",
    "THINK_CLOSE",
]
