"""模型输出的富文本重建。"""

from assistant_core.rendering.rich_text import (
    document_runs,
    final_response,
    normalize_body,
    reconstruct,
    split_bold_runs,
)

__all__ = ["document_runs", "final_response", "normalize_body", "reconstruct", "split_bold_runs"]
