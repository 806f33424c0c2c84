"""Provider 抽象接口。

上层会话 / 操作库不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个厂商实现一个 ProviderClient（OllamaClient、OpenRouterClient）。
- 两种传输形态（流式 NDJSON / 单次 JSON）在这里被统一成同一契约，
  各实现独立完成 list_models / generate_text / chat，不共享基类。
"""

from typing import Callable, Optional, Protocol, Sequence

from assistant_core.domain.models import ChatMessage

FragmentCallback = Callable[[str], None]


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志。
    - list_models(): 可用模型 ID 列表。
    - generate_text(...): 单轮生成，返回完整文本。
    - chat(...): 多轮对话；stream=True 时逐片段回调。
    """

    name: str

    async def list_models(self) -> list[str]:
        ...

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        style_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        ...

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        model: Optional[str] = None,
        stream: bool = False,
        on_fragment: Optional[FragmentCallback] = None,
        temperature: Optional[float] = None,
    ) -> str:
        ...
