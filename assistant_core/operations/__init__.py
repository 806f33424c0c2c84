"""选区文本操作库。"""

from assistant_core.operations.text_ops import (
    Operation,
    build_prompt,
    custom_prompt,
    extend,
    generate,
    paraphrase,
    parse_operation,
    run_operation,
    summarize,
    translate,
)

__all__ = [
    "Operation",
    "build_prompt",
    "custom_prompt",
    "extend",
    "generate",
    "paraphrase",
    "parse_operation",
    "run_operation",
    "summarize",
    "translate",
]
