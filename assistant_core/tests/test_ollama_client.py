import asyncio

import httpx
import pytest

from assistant_core.domain.exceptions import (
    ApiError,
    NetworkError,
    NoModelSelected,
    ProviderUnavailable,
    TransportError,
)
from assistant_core.domain.models import ChatMessage
from assistant_core.providers.ollama_client import OllamaClient
from assistant_core.providers.registry import ProviderConfig


class SettingsStub:
    http_timeout = 1.0
    http_referer = "https://example.test"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, chunks=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self._chunks = list(chunks or [])
        self.text = text

    def json(self):
        return self._payload

    async def aread(self):
        return self.text.encode("utf-8")

    async def aiter_text(self):
        for chunk in self._chunks:
            yield chunk


class StreamContext:
    def __init__(self, response):
        self._response = response

    async def __aenter__(self):
        return self._response

    async def __aexit__(self, *args):
        return False


def fake_client(response, captured, error=None):
    class Client:
        def __init__(self, *a, **kw):
            captured["client_kwargs"] = kw

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def get(self, url, headers=None):
            captured["url"] = url
            captured["headers"] = headers
            if error:
                raise error
            return response

        async def post(self, url, json=None, headers=None):
            captured["url"] = url
            captured["payload"] = json
            captured["headers"] = headers
            if error:
                raise error
            return response

        def stream(self, method, url, json=None, headers=None):
            captured["method"] = method
            captured["url"] = url
            captured["payload"] = json
            captured["headers"] = headers
            if error:
                raise error
            return StreamContext(response)

    return Client


def make_client(**overrides):
    cfg = ProviderConfig(base_url="http://ollama.local:11434/", default_model="llama3", temperature=0.5, **overrides)
    return OllamaClient(cfg, SettingsStub())


def test_list_models(monkeypatch):
    captured = {}
    resp = FakeResponse(payload={"models": [{"name": "llama3"}, {"name": "qwen2.5:7b"}, {"size": 1}]})
    monkeypatch.setattr("httpx.AsyncClient", fake_client(resp, captured))
    models = asyncio.run(make_client().list_models())
    assert models == ["llama3", "qwen2.5:7b"]
    assert captured["url"] == "http://ollama.local:11434/api/tags"
    assert captured["client_kwargs"]["trust_env"] is False
    assert captured["client_kwargs"]["timeout"] == 1.0


def test_list_models_http_500_is_provider_unavailable(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.AsyncClient", fake_client(FakeResponse(status_code=500, text="boom"), captured))
    with pytest.raises(ProviderUnavailable) as exc:
        asyncio.run(make_client().list_models())
    assert isinstance(exc.value, TransportError)
    assert exc.value.http_status == 500


def test_list_models_network_failure(monkeypatch):
    captured = {}
    error = httpx.ConnectError("connection refused")
    monkeypatch.setattr("httpx.AsyncClient", fake_client(None, captured, error=error))
    with pytest.raises(ProviderUnavailable) as exc:
        asyncio.run(make_client().list_models())
    assert isinstance(exc.value.__cause__, NetworkError)


def test_generate_text_streams_and_prefixes_style(monkeypatch):
    captured = {}
    chunks = ['{"response":"Hel', 'lo","done":false}\n{"respo', 'nse":" world","done":true}\n']
    monkeypatch.setattr("httpx.AsyncClient", fake_client(FakeResponse(chunks=chunks), captured))
    result = asyncio.run(make_client().generate_text("Summarize: x", style_prompt="Be formal.", temperature=0.3))
    assert result == "Hello world"
    assert captured["method"] == "POST"
    assert captured["url"] == "http://ollama.local:11434/api/generate"
    payload = captured["payload"]
    assert payload["model"] == "llama3"
    assert payload["prompt"] == "Be formal.\n\nSummarize: x"
    assert payload["stream"] is True
    assert payload["options"] == {"temperature": 0.3}
    assert captured["headers"]["Content-Type"] == "application/json"


def test_generate_text_uses_config_temperature_and_plain_prompt(monkeypatch):
    captured = {}
    chunks = ['{"response":"ok","done":true}\n']
    monkeypatch.setattr("httpx.AsyncClient", fake_client(FakeResponse(chunks=chunks), captured))
    result = asyncio.run(make_client().generate_text("hi", model="mistral"))
    assert result == "ok"
    assert captured["payload"]["prompt"] == "hi"
    assert captured["payload"]["model"] == "mistral"
    assert captured["payload"]["options"] == {"temperature": 0.5}


def test_missing_model_fails_before_network(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.AsyncClient", fake_client(FakeResponse(), captured))
    client = OllamaClient(ProviderConfig(base_url="http://localhost:11434"), SettingsStub())
    with pytest.raises(NoModelSelected):
        asyncio.run(client.generate_text("hi"))
    with pytest.raises(NoModelSelected):
        asyncio.run(client.chat([ChatMessage(role="user", content="hi")], stream=True))
    assert captured == {}


def test_chat_stream_delivers_fragments_in_order(monkeypatch):
    captured = {}
    chunks = [
        '{"message":{"role":"assistant","content":"<think>"},"done":false}\n{"message":{"content":"hm',
        '"},"done":false}\n',
        'garbage\n{"message":{"content":"</think>Hi"},"done":false}\n',
        '{"message":{"content":""},"done":true}',
    ]
    monkeypatch.setattr("httpx.AsyncClient", fake_client(FakeResponse(chunks=chunks), captured))
    messages = [ChatMessage(role="system", content="sys"), {"role": "user", "content": "hello"}]
    before = list(messages)
    received = []
    result = asyncio.run(make_client().chat(messages, stream=True, on_fragment=received.append, temperature=0.9))
    assert result == "<think>hm</think>Hi"
    assert received == ["<think>", "hm", "</think>Hi"]
    assert messages == before
    assert captured["url"] == "http://ollama.local:11434/api/chat"
    assert captured["payload"]["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hello"},
    ]
    assert captured["payload"]["stream"] is True
    assert captured["payload"]["options"] == {"temperature": 0.9}


def test_chat_non_streaming_calls_back_once(monkeypatch):
    captured = {}
    resp = FakeResponse(payload={"message": {"role": "assistant", "content": "whole answer"}, "done": True})
    monkeypatch.setattr("httpx.AsyncClient", fake_client(resp, captured))
    received = []
    result = asyncio.run(make_client().chat([ChatMessage(role="user", content="q")], on_fragment=received.append))
    assert result == "whole answer"
    assert received == ["whole answer"]
    assert captured["payload"]["stream"] is False
    assert "method" not in captured


def test_stream_error_status_raises_api_error(monkeypatch):
    captured = {}
    resp = FakeResponse(status_code=404, text='{"error":"model not found"}')
    monkeypatch.setattr("httpx.AsyncClient", fake_client(resp, captured))
    with pytest.raises(ApiError) as exc:
        asyncio.run(make_client().generate_text("hi"))
    assert exc.value.http_status == 404
    assert exc.value.code == "API_ERROR"
    assert "model not found" in exc.value.message


def test_stream_network_error(monkeypatch):
    captured = {}
    error = httpx.ReadTimeout("timed out")
    monkeypatch.setattr("httpx.AsyncClient", fake_client(None, captured, error=error))
    with pytest.raises(NetworkError) as exc:
        asyncio.run(make_client().chat([ChatMessage(role="user", content="q")], stream=True))
    assert exc.value.code == "NETWORK_ERROR"
