"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 用户设置模型与默认值 (registry)。
- HTTP 传输封装 (transport)。
- 提供各厂商的具体实现 (ollama_client、openrouter_client)。

激活哪个 Provider 由调用方显式传入，不从全局存储里临时读取。
"""

from typing import Optional, Union

from assistant_core.config.settings import settings
from assistant_core.providers.base import ProviderClient
from assistant_core.providers.ollama_client import OllamaClient
from assistant_core.providers.openrouter_client import OpenRouterClient
from assistant_core.providers.registry import ProviderConfig, ProviderKind, ProviderSettings


def create_provider(
    kind: Union[ProviderKind, str],
    config: Optional[ProviderConfig] = None,
) -> ProviderClient:
    """根据 Provider 类型与显式配置创建客户端实例。"""

    provider_kind = ProviderKind(str(getattr(kind, "value", kind)).lower())
    if provider_kind is ProviderKind.OPENROUTER:
        return OpenRouterClient(config, settings)
    return OllamaClient(config, settings)


def create_active_provider(provider_settings: ProviderSettings) -> ProviderClient:
    """按设置 blob 中激活的 Provider 创建客户端。"""

    return create_provider(provider_settings.provider, provider_settings.active_config())


__all__ = [
    "ProviderClient",
    "ProviderConfig",
    "ProviderKind",
    "ProviderSettings",
    "OllamaClient",
    "OpenRouterClient",
    "create_provider",
    "create_active_provider",
]
