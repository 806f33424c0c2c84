"""OpenRouter Provider 适配器（单次 JSON）。

接口风格与 OpenAI 一致：
- GET  {base_url}/models            -> {"data": [{"id": ...}, ...]}
- POST {base_url}/chat/completions  -> {"choices": [{"message": {"content": ...}}]}
- 认证: Authorization: Bearer <api_key>，另需 HTTP-Referer 头。

这里始终以非流式方式调用；chat(stream=True) 时也只会在拿到完整结果后
回调一次 on_fragment。
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from assistant_core.config.settings import settings
from assistant_core.domain.exceptions import (
    EmptyCompletion,
    NoModelSelected,
    ProviderUnavailable,
    TransportError,
)
from assistant_core.domain.models import ChatMessage
from assistant_core.providers.base import FragmentCallback
from assistant_core.providers.registry import OPENROUTER_CONFIG, ProviderConfig
from assistant_core.providers.transport import HttpTransport


class OpenRouterClient:
    """OpenRouter 提供方客户端实现。"""

    name = "openrouter"

    def __init__(self, config: Optional[ProviderConfig] = None, cfg=settings):
        self._config = config or OPENROUTER_CONFIG
        self._settings = cfg
        headers = {"HTTP-Referer": self._settings.http_referer}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        self._transport = HttpTransport(
            provider=self.name,
            base_url=self._config.base_url,
            timeout=self._settings.http_timeout,
            headers=headers,
        )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    async def list_models(self) -> list[str]:
        try:
            data = await self._transport.get_json("/models")
        except TransportError as e:
            raise ProviderUnavailable(
                code="PROVIDER_UNAVAILABLE",
                message=e.message,
                http_status=e.http_status,
                provider=self.name,
            ) from e
        return [m["id"] for m in data.get("data") or [] if isinstance(m, dict) and m.get("id")]

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        style_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        messages: List[Dict[str, Any]] = []
        if style_prompt:
            messages.append({"role": "system", "content": style_prompt})
        messages.append({"role": "user", "content": prompt})
        return await self._complete(messages, model, temperature)

    async def chat(
        self,
        messages: Sequence[Union[ChatMessage, Mapping[str, Any]]],
        model: Optional[str] = None,
        stream: bool = False,
        on_fragment: Optional[FragmentCallback] = None,
        temperature: Optional[float] = None,
    ) -> str:
        # stream 参数只影响回调时机，传输始终是单次 JSON
        content = await self._complete([self._message_to_payload(m) for m in messages], model, temperature)
        if on_fragment:
            on_fragment(content)
        return content

    async def _complete(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str],
        temperature: Optional[float],
    ) -> str:
        model_name = model or self._config.default_model
        if not model_name:
            raise NoModelSelected(code="NO_MODEL_SELECTED", message="No model specified", provider=self.name)
        payload = {
            "model": model_name,
            "messages": messages,
            "temperature": self._config.temperature if temperature is None else temperature,
            "stream": False,
        }
        data = await self._transport.post_json("/chat/completions", payload)
        return self._parse_response(data)

    def _parse_response(self, data: Dict[str, Any]) -> str:
        """第一个 choice 为准；choices 为空或第一项不是对象时视为错误。"""

        choices = data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else None
        if not isinstance(first, dict):
            raise EmptyCompletion(
                code="EMPTY_COMPLETION",
                message="No response from OpenRouter",
                provider=self.name,
            )
        message = first.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        return content or ""

    @staticmethod
    def _message_to_payload(message: Union[ChatMessage, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(message, ChatMessage):
            return message.to_payload()
        return {"role": message["role"], "content": message["content"]}
