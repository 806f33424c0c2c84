import asyncio

import pytest

from assistant_core.domain.exceptions import MissingInput, ValidationError
from assistant_core.operations.text_ops import (
    Operation,
    build_prompt,
    custom_prompt,
    paraphrase,
    parse_operation,
    run_operation,
    summarize,
    translate,
)


class FakeProvider:
    name = "fake"

    def __init__(self, reply="ok"):
        self.reply = reply
        self.calls = []

    async def list_models(self):
        return []

    async def generate_text(self, prompt, model=None, style_prompt=None, temperature=None):
        self.calls.append((prompt, model, style_prompt, temperature))
        return self.reply

    async def chat(self, messages, model=None, stream=False, on_fragment=None, temperature=None):
        raise AssertionError("text operations use generate_text")


def test_templates_wrap_text_unchanged():
    text = "  The cat sat.  "
    assert build_prompt(Operation.PARAPHRASE, text) == (
        "Paraphrase the following text while maintaining its meaning:   The cat sat.  "
    )
    assert build_prompt(Operation.SUMMARIZE, "abc") == "Summarize the following text concisely: abc"
    assert build_prompt(Operation.EXTEND, "abc") == (
        "Extend and elaborate on the following text while maintaining its main ideas: abc"
    )
    assert build_prompt(Operation.GENERATE, "abc") == "Generate new content based on the following text: abc"
    assert build_prompt(Operation.TRANSLATE, "hola", target_language="French") == (
        "Translate the following text to French: hola"
    )
    assert build_prompt(Operation.CUSTOM, "abc", custom_prompt="Make it rhyme") == "Make it rhyme: abc"


def test_braces_in_user_text_are_not_interpolated():
    assert build_prompt(Operation.SUMMARIZE, "{text} {0}") == "Summarize the following text concisely: {text} {0}"


def test_missing_language_or_instruction():
    with pytest.raises(MissingInput):
        build_prompt(Operation.TRANSLATE, "x")
    with pytest.raises(MissingInput):
        build_prompt(Operation.CUSTOM, "x", custom_prompt="")


def test_parse_operation():
    assert parse_operation("translate") is Operation.TRANSLATE
    with pytest.raises(ValidationError) as exc:
        parse_operation("rewrite")
    assert exc.value.code == "INVALID_ACTION"


def test_operation_wrappers_call_generate_text():
    provider = FakeProvider(reply="done")
    assert asyncio.run(paraphrase(provider, "a", model="m", style_prompt="s", temperature=0.3)) == "done"
    asyncio.run(summarize(provider, "b"))
    asyncio.run(translate(provider, "c", "German", model="m"))
    asyncio.run(custom_prompt(provider, "d", "Shout"))
    prompts = [call[0] for call in provider.calls]
    assert prompts == [
        "Paraphrase the following text while maintaining its meaning: a",
        "Summarize the following text concisely: b",
        "Translate the following text to German: c",
        "Shout: d",
    ]
    assert provider.calls[0][1:] == ("m", "s", 0.3)


def test_run_operation_validates_before_calling_provider():
    provider = FakeProvider()
    with pytest.raises(MissingInput):
        asyncio.run(run_operation(provider, Operation.CUSTOM, "x", model="m"))
    assert provider.calls == []
    result = asyncio.run(run_operation(provider, Operation.EXTEND, "x", model="m", temperature=1.0))
    assert result == "ok"
    assert provider.calls[0][1] == "m"
