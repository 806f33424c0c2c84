"""助手工作区：把设置、Provider、模型列表与两个会话流程装配在一起。

激活的 Provider 由设置 blob 显式决定，并在构造 / reload_settings 时
注入到 ChatSession 与 TextProcessor 中。两者共用一个 RequestGate，
聊天与选区处理不会同时有请求在进行。
"""

import logging
from typing import List, Optional

from assistant_core.infrastructure.logging.logger import log_event
from assistant_core.infrastructure.storage.settings_store import JsonSettingsStore
from assistant_core.providers import ProviderClient, create_active_provider
from assistant_core.providers.registry import ProviderConfig, ProviderSettings
from assistant_core.session.chat_session import ChatSession
from assistant_core.session.document import DocumentWriter
from assistant_core.session.gate import RequestGate
from assistant_core.session.model_catalog import ModelCatalog
from assistant_core.session.text_processor import TextProcessor


class AssistantWorkspace:
    def __init__(self, store: JsonSettingsStore, document: DocumentWriter):
        self._store = store
        self._document = document
        self.catalog = ModelCatalog()
        self.provider_settings: ProviderSettings = store.load()
        self.provider: ProviderClient = create_active_provider(self.provider_settings)
        cfg = self.config
        self.catalog.selected = cfg.default_model
        self.gate = RequestGate()
        self.chat = ChatSession(
            self.provider,
            model=cfg.default_model,
            style=cfg.default_style,
            document=document,
            gate=self.gate,
        )
        self.processor = TextProcessor(
            self.provider,
            document,
            model=cfg.default_model,
            style=cfg.default_style,
            target_language=cfg.default_language,
            gate=self.gate,
        )

    @property
    def config(self) -> ProviderConfig:
        return self.provider_settings.active_config()

    @property
    def model(self) -> Optional[str]:
        return self.catalog.selected

    async def refresh_models(self) -> List[str]:
        """重新拉取模型列表；失败时旧列表保持不变，异常上抛供 UI 提示。"""

        models = await self.catalog.refresh(self.provider, preferred=self.config.default_model)
        self._apply_model(self.catalog.selected)
        return models

    def select_model(self, model: str) -> None:
        self.catalog.select(model)
        self._apply_model(model)

    def set_style(self, style: str) -> None:
        self.chat.configure(style=style)
        self.processor.configure(style=style)

    def set_target_language(self, language: str) -> None:
        self.processor.configure(target_language=language)

    def reload_settings(self) -> ProviderSettings:
        """"设置已更改"通知：重新读取设置并重建激活的 Provider。"""

        self.provider_settings = self._store.load()
        self.provider = create_active_provider(self.provider_settings)
        cfg = self.config
        self.chat.configure(provider=self.provider, style=cfg.default_style)
        self.processor.configure(
            provider=self.provider,
            style=cfg.default_style,
            target_language=cfg.default_language,
        )
        if cfg.default_model and cfg.default_model != self.catalog.selected:
            self.select_model(cfg.default_model)
        log_event(
            logging.INFO,
            "Provider settings reloaded",
            provider=self.provider_settings.provider.value,
            base_url=cfg.base_url,
            model=self.catalog.selected,
        )
        return self.provider_settings

    async def on_settings_changed(self) -> List[str]:
        self.reload_settings()
        return await self.refresh_models()

    def on_selection_changed(self, text: Optional[str]) -> None:
        self.chat.update_selection(text)

    async def process_selection(self, action: str, custom_prompt: Optional[str] = None) -> str:
        return await self.processor.process(action, self.chat.selected_text, custom_prompt)

    def _apply_model(self, model: Optional[str]) -> None:
        if model:
            self.chat.configure(model=model)
            self.processor.configure(model=model)
