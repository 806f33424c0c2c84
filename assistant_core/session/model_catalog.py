import logging
from typing import List, Optional

from assistant_core.domain.exceptions import TransportError
from assistant_core.infrastructure.logging.logger import log_event
from assistant_core.providers.base import ProviderClient


class ModelCatalog:
    """最近一次成功加载的模型列表及当前选中模型。

    刷新失败时保留旧列表与旧选择，错误交给调用方提示用户。
    """

    def __init__(self) -> None:
        self._models: List[str] = []
        self.selected: Optional[str] = None

    @property
    def models(self) -> List[str]:
        return list(self._models)

    async def refresh(self, provider: ProviderClient, preferred: Optional[str] = None) -> List[str]:
        try:
            models = await provider.list_models()
        except TransportError as e:
            log_event(
                logging.ERROR,
                "Error loading models",
                provider=getattr(provider, "name", None),
                code=e.code,
                http_status=e.http_status,
                kept=len(self._models),
            )
            raise
        self._models = list(models)
        self.selected = self._choose(preferred)
        return self.models

    def select(self, model: str) -> None:
        self.selected = model

    def _choose(self, preferred: Optional[str]) -> Optional[str]:
        # 当前选择仍在列表中则保留，其次配置的默认模型，最后取列表第一个
        if self.selected and self.selected in self._models:
            return self.selected
        if preferred and preferred in self._models:
            return preferred
        if self._models:
            return self._models[0]
        return self.selected or preferred
