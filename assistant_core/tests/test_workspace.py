import asyncio
import tempfile
from pathlib import Path

import pytest

from assistant_core.domain.exceptions import ProviderUnavailable, SessionBusy
from assistant_core.infrastructure.storage.settings_store import JsonSettingsStore
from assistant_core.providers.registry import ProviderConfig, ProviderKind, ProviderSettings
from assistant_core.session.workspace import AssistantWorkspace


class FakeProvider:
    def __init__(self, name, models=None, error=None):
        self.name = name
        self.models = models or []
        self.error = error
        self.generated = []
        self.chats = []

    async def list_models(self):
        if self.error:
            raise self.error
        return list(self.models)

    async def generate_text(self, prompt, model=None, style_prompt=None, temperature=None):
        self.generated.append((prompt, model, style_prompt, temperature))
        return f"[{self.name}] {prompt}"

    async def chat(self, messages, model=None, stream=False, on_fragment=None, temperature=None):
        self.chats.append((messages, model))
        if on_fragment:
            on_fragment("reply")
        return "reply"


class FakeDocument:
    def __init__(self):
        self.replaced = []
        self.inserted = []

    def replace_selection(self, text):
        self.replaced.append(text)

    def insert_runs(self, runs):
        self.inserted.append(list(runs))


@pytest.fixture
def providers(monkeypatch):
    created = []

    def factory(provider_settings):
        kind = provider_settings.provider.value
        provider = FakeProvider(kind, models=["m-" + kind, "other"])
        created.append((provider, provider_settings.active_config()))
        return provider

    monkeypatch.setattr("assistant_core.session.workspace.create_active_provider", factory)
    return created


def _store(d):
    return JsonSettingsStore(root=Path(d) / ".storage", key="providerSettings")


def test_workspace_uses_configured_defaults(providers):
    with tempfile.TemporaryDirectory() as d:
        store = _store(d)
        store.save(ProviderSettings(
            provider=ProviderKind.OLLAMA,
            ollama_settings=ProviderConfig(
                base_url="http://localhost:11434",
                default_model="llama3",
                default_style="Warm",
                default_language="Korean",
            ),
        ))
        workspace = AssistantWorkspace(store, FakeDocument())
        assert workspace.model == "llama3"
        assert workspace.chat.model == "llama3"
        assert workspace.chat.style == "Warm"
        assert workspace.processor.target_language == "Korean"
        assert len(providers) == 1


def test_refresh_models_selects_first_when_no_default(providers):
    with tempfile.TemporaryDirectory() as d:
        workspace = AssistantWorkspace(_store(d), FakeDocument())
        assert workspace.model is None
        models = asyncio.run(workspace.refresh_models())
        assert models == ["m-ollama", "other"]
        assert workspace.model == "m-ollama"
        assert workspace.chat.model == "m-ollama"
        assert workspace.processor.model == "m-ollama"


def test_refresh_failure_keeps_selection(providers):
    with tempfile.TemporaryDirectory() as d:
        workspace = AssistantWorkspace(_store(d), FakeDocument())
        asyncio.run(workspace.refresh_models())
        workspace.select_model("other")
        workspace.provider.error = ProviderUnavailable(code="PROVIDER_UNAVAILABLE", message="down")
        with pytest.raises(ProviderUnavailable):
            asyncio.run(workspace.refresh_models())
        assert workspace.catalog.models == ["m-ollama", "other"]
        assert workspace.chat.model == "other"


def test_settings_changed_switches_active_provider(providers):
    with tempfile.TemporaryDirectory() as d:
        store = _store(d)
        workspace = AssistantWorkspace(store, FakeDocument())
        store.save(ProviderSettings(
            provider=ProviderKind.OPENROUTER,
            open_router_settings=ProviderConfig(
                base_url="https://openrouter.ai/api/v1",
                api_key="k",
                default_model="other",
            ),
        ))
        models = asyncio.run(workspace.on_settings_changed())
        assert models == ["m-openrouter", "other"]
        assert workspace.provider.name == "openrouter"
        assert workspace.model == "other"
        assert providers[-1][1].api_key == "k"

        asyncio.run(workspace.chat.send("hello"))
        assert workspace.provider.chats[0][1] == "other"


def test_process_selection_uses_last_untrimmed_selection(providers):
    with tempfile.TemporaryDirectory() as d:
        document = FakeDocument()
        workspace = AssistantWorkspace(_store(d), document)
        asyncio.run(workspace.refresh_models())
        workspace.on_selection_changed("  Some paragraph. ")
        workspace.on_selection_changed("")
        workspace.set_style("Creative")
        workspace.set_target_language("Italian")
        result = asyncio.run(workspace.process_selection("translate"))
        prompt, model, _, temperature = workspace.provider.generated[0]
        assert prompt == "Translate the following text to Italian:   Some paragraph. "
        assert model == "m-ollama"
        assert temperature == 1.0
        assert document.replaced == [result]


class GatedProvider(FakeProvider):
    def __init__(self, release):
        super().__init__("gated", models=["m"])
        self.release = release
        self.log = []

    async def generate_text(self, prompt, model=None, style_prompt=None, temperature=None):
        self.log.append("generate")
        await self.release.wait()
        return "done"

    async def chat(self, messages, model=None, stream=False, on_fragment=None, temperature=None):
        self.log.append("chat")
        on_fragment("partial")
        await self.release.wait()
        return "reply"


def _gated_workspace(monkeypatch, d, release):
    provider = GatedProvider(release)
    monkeypatch.setattr("assistant_core.session.workspace.create_active_provider", lambda s: provider)
    workspace = AssistantWorkspace(_store(d), FakeDocument())
    workspace.select_model("m")
    workspace.on_selection_changed("text")
    return workspace, provider


def test_selection_refused_while_chat_streams(monkeypatch):
    async def scenario(workspace):
        release = workspace.provider.release
        chat = asyncio.create_task(workspace.chat.send("hi"))
        await asyncio.sleep(0)
        assert workspace.processor.busy
        with pytest.raises(SessionBusy) as exc:
            await workspace.process_selection("paraphrase")
        assert exc.value.extra["active"] == "chat"
        release.set()
        await chat

    with tempfile.TemporaryDirectory() as d:
        workspace, provider = _gated_workspace(monkeypatch, d, asyncio.Event())
        asyncio.run(scenario(workspace))
        assert provider.log == ["chat"]
        assert len(workspace.chat.history) == 2
        assert not workspace.gate.busy


def test_chat_refused_while_selection_runs(monkeypatch):
    async def scenario(workspace):
        release = workspace.provider.release
        job = asyncio.create_task(workspace.process_selection("summarize"))
        await asyncio.sleep(0)
        assert workspace.chat.busy
        with pytest.raises(SessionBusy):
            await workspace.chat.send("hi")
        with pytest.raises(SessionBusy):
            workspace.chat.new_chat()
        release.set()
        assert await job == "done"

    with tempfile.TemporaryDirectory() as d:
        workspace, provider = _gated_workspace(monkeypatch, d, asyncio.Event())
        asyncio.run(scenario(workspace))
        assert provider.log == ["generate"]
        assert workspace.chat.history == []
        assert not workspace.gate.busy


def test_user_model_choice_survives_refresh(providers):
    with tempfile.TemporaryDirectory() as d:
        store = _store(d)
        store.save(ProviderSettings(
            ollama_settings=ProviderConfig(base_url="http://localhost:11434", default_model="m-ollama"),
        ))
        workspace = AssistantWorkspace(store, FakeDocument())
        asyncio.run(workspace.refresh_models())
        workspace.select_model("other")
        asyncio.run(workspace.refresh_models())
        assert workspace.model == "other"
        assert workspace.chat.model == "other"
