"""HTTP 传输层。

每个 Provider 客户端持有一个 HttpTransport（组合而非继承），负责：

1. 拼接 URL、附加请求头（认证、Referer 等）。
2. 发送请求并把 httpx 网络异常包装为 NetworkError。
3. 非 2xx 状态码统一包装为 ApiError（携带上游状态码与响应体）。

这里不做重试：传输错误直接上抛给调用方展示。
"""

import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Mapping, Optional, TypeVar

import httpx

from assistant_core.domain.exceptions import ApiError, NetworkError
from assistant_core.infrastructure.logging.logger import log_event

T = TypeVar("T")


class HttpTransport:
    """单个 Provider 的 HTTP 客户端封装。"""

    def __init__(
        self,
        provider: str,
        base_url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self._provider = provider
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {"Content-Type": "application/json", **(headers or {})}

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def get_json(self, path: str) -> Dict[str, Any]:
        return await self._request_json("GET", path)

    async def post_json(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request_json("POST", path, payload)

    async def stream_post(
        self,
        path: str,
        payload: Dict[str, Any],
        consume: Callable[[AsyncIterator[str]], Awaitable[T]],
    ) -> T:
        """POST 并把响应体以文本 chunk 流的形式交给 consume。

        consume 返回后立即关闭连接，即使服务端还在继续发送。
        """

        url = self.url(path)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as client:
                async with client.stream("POST", url, json=payload, headers=self._headers) as resp:
                    if resp.status_code >= 400:
                        body = await resp.aread()
                        raise self._api_error(resp.status_code, body.decode("utf-8", errors="replace"), url)
                    return await consume(resp.aiter_text())
        except httpx.RequestError as e:
            raise self._network_error(e, url)

    async def _request_json(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = self.url(path)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as client:
                if method == "GET":
                    resp = await client.get(url, headers=self._headers)
                else:
                    resp = await client.post(url, json=payload, headers=self._headers)
        except httpx.RequestError as e:
            raise self._network_error(e, url)
        if resp.status_code >= 400:
            raise self._api_error(resp.status_code, resp.text, url)
        try:
            data = resp.json()
        except ValueError as e:
            raise self._api_error(resp.status_code, f"Invalid JSON response: {e}", url)
        if not isinstance(data, dict):
            raise self._api_error(resp.status_code, "Expected a JSON object response", url)
        return data

    def _network_error(self, exc: Exception, url: str) -> NetworkError:
        log_event(logging.ERROR, "Provider request failed", provider=self._provider, url=url, error=str(exc))
        return NetworkError(code="NETWORK_ERROR", message=str(exc) or type(exc).__name__, provider=self._provider)

    def _api_error(self, status: int, body: str, url: str) -> ApiError:
        log_event(
            logging.ERROR,
            "Provider returned error status",
            provider=self._provider,
            url=url,
            http_status=status,
            body=body[:500],
        )
        message = body or f"HTTP error! status: {status}"
        return ApiError(code="API_ERROR", message=message, http_status=status, provider=self._provider)
