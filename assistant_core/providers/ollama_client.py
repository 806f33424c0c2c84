"""Ollama Provider 适配器（流式 NDJSON）。

接口：
- GET  {base_url}/api/tags      -> {"models": [{"name": ...}, ...]}
- POST {base_url}/api/generate  -> 每行 {"response": "...", "done": false}
- POST {base_url}/api/chat      -> 每行 {"message": {"content": "..."}, "done": false}

流式响应交给 NdjsonStreamDecoder 处理；chat 在 stream=False 时
服务端只返回一个 JSON 对象，直接解析即可。
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from assistant_core.config.settings import settings
from assistant_core.domain.exceptions import NoModelSelected, ProviderUnavailable, TransportError
from assistant_core.domain.models import ChatMessage
from assistant_core.providers.base import FragmentCallback
from assistant_core.providers.registry import OLLAMA_CONFIG, ProviderConfig
from assistant_core.providers.transport import HttpTransport
from assistant_core.streaming.decoder import NdjsonStreamDecoder


class OllamaClient:
    """Ollama 提供方客户端实现。"""

    name = "ollama"

    def __init__(self, config: Optional[ProviderConfig] = None, cfg=settings):
        # config 为用户设置（baseUrl / 默认模型 / 温度），cfg 为进程配置（超时等）
        self._config = config or OLLAMA_CONFIG
        self._settings = cfg
        self._transport = HttpTransport(
            provider=self.name,
            base_url=self._config.base_url,
            timeout=self._settings.http_timeout,
        )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    async def list_models(self) -> list[str]:
        try:
            data = await self._transport.get_json("/api/tags")
        except TransportError as e:
            raise ProviderUnavailable(
                code="PROVIDER_UNAVAILABLE",
                message=e.message,
                http_status=e.http_status,
                provider=self.name,
            ) from e
        return [m["name"] for m in data.get("models") or [] if isinstance(m, dict) and m.get("name")]

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        style_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """单轮生成。Ollama 的 generate 接口没有 system 角色，风格提示词拼在 prompt 前面。"""

        model_name = self._resolve_model(model)
        payload = {
            "model": model_name,
            "prompt": f"{style_prompt}\n\n{prompt}" if style_prompt else prompt,
            "stream": True,
            "options": {"temperature": self._resolve_temperature(temperature)},
        }
        decoder = NdjsonStreamDecoder(self._extract_generate, source="ollama/api/generate")
        return await self._transport.stream_post("/api/generate", payload, decoder.decode)

    async def chat(
        self,
        messages: Sequence[Union[ChatMessage, Mapping[str, Any]]],
        model: Optional[str] = None,
        stream: bool = False,
        on_fragment: Optional[FragmentCallback] = None,
        temperature: Optional[float] = None,
    ) -> str:
        model_name = self._resolve_model(model)
        payload = {
            "model": model_name,
            "messages": [self._message_to_payload(m) for m in messages],
            "stream": stream,
            "options": {"temperature": self._resolve_temperature(temperature)},
        }
        if stream:
            decoder = NdjsonStreamDecoder(self._extract_chat, source="ollama/api/chat")
            return await self._transport.stream_post(
                "/api/chat",
                payload,
                lambda chunks: decoder.decode(chunks, on_fragment),
            )
        data = await self._transport.post_json("/api/chat", payload)
        content, _ = self._extract_chat(data)
        if on_fragment:
            on_fragment(content)
        return content

    def _resolve_model(self, model: Optional[str]) -> str:
        # 前置条件：必须在任何网络调用之前失败
        model_name = model or self._config.default_model
        if not model_name:
            raise NoModelSelected(code="NO_MODEL_SELECTED", message="No model specified", provider=self.name)
        return model_name

    def _resolve_temperature(self, temperature: Optional[float]) -> float:
        return self._config.temperature if temperature is None else temperature

    @staticmethod
    def _extract_generate(record: Dict[str, Any]) -> Tuple[str, bool]:
        return record.get("response") or "", bool(record.get("done"))

    @staticmethod
    def _extract_chat(record: Dict[str, Any]) -> Tuple[str, bool]:
        message = record.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content or "", bool(record.get("done"))

    @staticmethod
    def _message_to_payload(message: Union[ChatMessage, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(message, ChatMessage):
            return message.to_payload()
        return {"role": message["role"], "content": message["content"]}
