"""六种选区文本操作的提示词模板。

模板只做字符串插值：在用户文本前加上固定指令，不改动用户文本本身。
每个操作最终都落到 ProviderClient.generate_text。
"""

from enum import Enum
from typing import Optional

from assistant_core.domain.exceptions import MissingInput, ValidationError
from assistant_core.providers.base import ProviderClient

PARAPHRASE_TEMPLATE = "Paraphrase the following text while maintaining its meaning: {text}"
SUMMARIZE_TEMPLATE = "Summarize the following text concisely: {text}"
EXTEND_TEMPLATE = "Extend and elaborate on the following text while maintaining its main ideas: {text}"
TRANSLATE_TEMPLATE = "Translate the following text to {language}: {text}"
GENERATE_TEMPLATE = "Generate new content based on the following text: {text}"
CUSTOM_TEMPLATE = "{instruction}: {text}"


class Operation(str, Enum):
    PARAPHRASE = "paraphrase"
    SUMMARIZE = "summarize"
    EXTEND = "extend"
    TRANSLATE = "translate"
    GENERATE = "generate"
    CUSTOM = "custom"


_FIXED_TEMPLATES = {
    Operation.PARAPHRASE: PARAPHRASE_TEMPLATE,
    Operation.SUMMARIZE: SUMMARIZE_TEMPLATE,
    Operation.EXTEND: EXTEND_TEMPLATE,
    Operation.GENERATE: GENERATE_TEMPLATE,
}


def parse_operation(action: str) -> Operation:
    try:
        return Operation(action)
    except ValueError:
        raise ValidationError(code="INVALID_ACTION", message=f"Invalid action: {action!r}")


def build_prompt(
    operation: Operation,
    text: str,
    target_language: Optional[str] = None,
    custom_prompt: Optional[str] = None,
) -> str:
    """按操作类型生成完整提示词。"""

    if operation is Operation.TRANSLATE:
        if not target_language:
            raise MissingInput(code="MISSING_INPUT", message="Please choose a target language")
        return TRANSLATE_TEMPLATE.format(language=target_language, text=text)
    if operation is Operation.CUSTOM:
        if not custom_prompt:
            raise MissingInput(code="MISSING_INPUT", message="Please enter a custom prompt")
        return CUSTOM_TEMPLATE.format(instruction=custom_prompt, text=text)
    return _FIXED_TEMPLATES[operation].format(text=text)


async def paraphrase(provider: ProviderClient, text: str, model=None, style_prompt=None, temperature=None) -> str:
    return await provider.generate_text(build_prompt(Operation.PARAPHRASE, text), model, style_prompt, temperature)


async def summarize(provider: ProviderClient, text: str, model=None, style_prompt=None, temperature=None) -> str:
    return await provider.generate_text(build_prompt(Operation.SUMMARIZE, text), model, style_prompt, temperature)


async def extend(provider: ProviderClient, text: str, model=None, style_prompt=None, temperature=None) -> str:
    return await provider.generate_text(build_prompt(Operation.EXTEND, text), model, style_prompt, temperature)


async def translate(
    provider: ProviderClient,
    text: str,
    target_language: str,
    model=None,
    style_prompt=None,
    temperature=None,
) -> str:
    prompt = build_prompt(Operation.TRANSLATE, text, target_language=target_language)
    return await provider.generate_text(prompt, model, style_prompt, temperature)


async def generate(provider: ProviderClient, text: str, model=None, style_prompt=None, temperature=None) -> str:
    return await provider.generate_text(build_prompt(Operation.GENERATE, text), model, style_prompt, temperature)


async def custom_prompt(
    provider: ProviderClient,
    text: str,
    instruction: str,
    model=None,
    style_prompt=None,
    temperature=None,
) -> str:
    prompt = build_prompt(Operation.CUSTOM, text, custom_prompt=instruction)
    return await provider.generate_text(prompt, model, style_prompt, temperature)


async def run_operation(
    provider: ProviderClient,
    operation: Operation,
    text: str,
    model: Optional[str] = None,
    style_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    target_language: Optional[str] = None,
    instruction: Optional[str] = None,
) -> str:
    """按操作类型分发；提示词在任何网络调用之前构造，参数缺失时直接失败。"""

    prompt = build_prompt(operation, text, target_language=target_language, custom_prompt=instruction)
    return await provider.generate_text(prompt, model, style_prompt, temperature)
