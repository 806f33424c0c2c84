"""选区处理流程：选中文本 → 模板操作 → 原样替换选区。

与聊天插入不同，这里不做粗体分段，也不去掉思考段，
模型返回的原始字符串直接交给文档协作方。
"""

import logging
from typing import Optional

from assistant_core.domain.exceptions import MissingInput, NoModelSelected, SessionBusy
from assistant_core.domain.styles import get_style_directive
from assistant_core.infrastructure.logging.logger import log_event
from assistant_core.operations.text_ops import build_prompt, parse_operation
from assistant_core.providers.base import ProviderClient
from assistant_core.session.document import DocumentWriter
from assistant_core.session.gate import RequestGate


class TextProcessor:
    def __init__(
        self,
        provider: ProviderClient,
        document: DocumentWriter,
        model: Optional[str] = None,
        style: str = "Normal",
        target_language: str = "Spanish",
        gate: Optional[RequestGate] = None,
    ):
        self._provider = provider
        self._document = document
        self.model = model
        self.style = style
        self.target_language = target_language
        self._gate = gate or RequestGate()

    @property
    def busy(self) -> bool:
        return self._gate.busy

    def configure(
        self,
        provider: Optional[ProviderClient] = None,
        model: Optional[str] = None,
        style: Optional[str] = None,
        target_language: Optional[str] = None,
    ) -> None:
        if provider is not None:
            self._provider = provider
        if model is not None:
            self.model = model
        if style is not None:
            self.style = style
        if target_language is not None:
            self.target_language = target_language

    async def process(self, action: str, selected_text: str, custom_prompt: Optional[str] = None) -> str:
        """执行一次选区操作并替换选区，返回模型原始输出。

        所有前置条件都在调用 Provider 之前检查。
        """

        if not selected_text or not selected_text.strip():
            raise MissingInput(code="MISSING_INPUT", message="Please select text first")
        if not self.model:
            raise NoModelSelected(code="NO_MODEL_SELECTED", message="Please select a model")
        if self._gate.busy:
            raise SessionBusy(active=self._gate.owner)
        operation = parse_operation(action)
        prompt = build_prompt(
            operation,
            selected_text,
            target_language=self.target_language,
            custom_prompt=custom_prompt,
        )
        directive = get_style_directive(self.style)

        self._gate.acquire("selection")
        try:
            result = await self._provider.generate_text(
                prompt,
                self.model,
                directive.system_prompt,
                directive.temperature,
            )
            self._document.replace_selection(result)
        except Exception as e:
            log_event(
                logging.ERROR,
                "Error processing text",
                action=operation.value,
                provider=getattr(self._provider, "name", None),
                model=self.model,
                code=getattr(e, "code", type(e).__name__),
                error=str(e),
            )
            raise
        finally:
            self._gate.release()
        log_event(logging.INFO, "Selection processed", action=operation.value, model=self.model, chars=len(result))
        return result
