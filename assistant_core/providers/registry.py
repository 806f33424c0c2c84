"""Provider 与用户设置模型。

设置面板把所有 Provider 的配置序列化成一个 blob（存储键 providerSettings）：

    {
      "provider": "ollama",
      "ollamaSettings": {"baseUrl": ..., "defaultModel": ..., ...},
      "openRouterSettings": {"baseUrl": ..., "apiKey": ..., ...}
    }

字段名沿用设置面板的 camelCase，这里用 pydantic alias 映射为
snake_case 属性。同一时刻只有一个 Provider 处于激活状态。
"""

from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_LANGUAGES = (
    "Spanish",
    "French",
    "German",
    "Italian",
    "Portuguese",
    "Chinese",
    "Japanese",
    "Korean",
    "Turkish",
)


class ProviderKind(str, Enum):
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"


class ProviderConfig(BaseModel):
    """单个 Provider 的用户配置，对核心只读。"""

    base_url: str = Field(alias="baseUrl")
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    default_model: Optional[str] = Field(default=None, alias="defaultModel")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    default_language: str = Field(default="Spanish", alias="defaultLanguage")
    default_style: str = Field(default="Normal", alias="defaultStyle")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


OLLAMA_CONFIG = ProviderConfig(
    base_url="http://localhost:11434",
    default_model=None,
    temperature=0.7,
)

OPENROUTER_CONFIG = ProviderConfig(
    base_url="https://openrouter.ai/api/v1",
    api_key=None,
    default_model="openai/gpt-3.5-turbo",
    temperature=0.7,
)

DEFAULT_CONFIGS: Mapping[ProviderKind, ProviderConfig] = {
    ProviderKind.OLLAMA: OLLAMA_CONFIG,
    ProviderKind.OPENROUTER: OPENROUTER_CONFIG,
}


class ProviderSettings(BaseModel):
    """设置 blob 的整体结构。"""

    provider: ProviderKind = ProviderKind.OLLAMA
    ollama_settings: Optional[ProviderConfig] = Field(default=None, alias="ollamaSettings")
    open_router_settings: Optional[ProviderConfig] = Field(default=None, alias="openRouterSettings")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def config_for(self, kind: ProviderKind) -> ProviderConfig:
        configured = self.ollama_settings if kind is ProviderKind.OLLAMA else self.open_router_settings
        return configured or get_default_config(kind)

    def active_config(self) -> ProviderConfig:
        return self.config_for(self.provider)


def get_default_config(kind: str) -> ProviderConfig:
    """根据名称获取默认 ProviderConfig，名称不区分大小写。"""

    key = str(getattr(kind, "value", kind)).lower()
    for k, cfg in DEFAULT_CONFIGS.items():
        if k.value == key:
            return cfg
    raise KeyError(f"Unknown provider: {kind!r}")
