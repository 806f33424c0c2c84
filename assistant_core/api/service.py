"""对外 API 服务模块。

提供简化的函数接口供宿主（任务窗格 / 插件壳）调用。
宿主在启动时调用 init_workspace 注入文档协作方，之后所有函数
都作用于同一个默认工作区。
"""

from typing import Any, Dict, List, Optional

from assistant_core.config.settings import settings
from assistant_core.domain.exceptions import BusinessError
from assistant_core.infrastructure.logging.logger import logger
from assistant_core.infrastructure.storage.settings_store import JsonSettingsStore
from assistant_core.session.document import DocumentWriter
from assistant_core.session.workspace import AssistantWorkspace


_workspace: Optional[AssistantWorkspace] = None


def init_workspace(document: DocumentWriter, store: Optional[JsonSettingsStore] = None) -> AssistantWorkspace:
    """创建（或替换）默认工作区。替换时旧聊天会话会被关闭。"""
    global _workspace
    if _workspace is not None:
        _workspace.chat.close()
    _workspace = AssistantWorkspace(store or JsonSettingsStore(root=settings.storage_root), document)
    return _workspace


def get_default_workspace() -> AssistantWorkspace:
    if _workspace is None:
        raise BusinessError(code="WORKSPACE_NOT_READY", message="init_workspace() has not been called")
    return _workspace


async def load_models() -> List[str]:
    return await get_default_workspace().refresh_models()


async def process_selection(action: str, custom_prompt: Optional[str] = None) -> str:
    return await get_default_workspace().process_selection(action, custom_prompt)


async def send_chat(user_input: str) -> Dict[str, Any]:
    """发送一轮聊天。

    Returns:
        包含助手回答、思考段与可插入文本段的字典
    """
    workspace = get_default_workspace()
    try:
        reply = await workspace.chat.send(user_input)
    except Exception as e:
        logger.error(f"Chat failed: {e}", extra={"extra": {
            "provider": workspace.provider_settings.provider.value,
            "error": str(e),
        }})
        raise
    rendered = workspace.chat.render(len(workspace.chat.history) - 1)
    return {
        "content": reply.content,
        "thinking": rendered.thinking,
        "runs": [{"text": run.text, "bold": run.bold} for run in rendered.runs],
    }


def new_chat() -> None:
    get_default_workspace().chat.new_chat()


def selection_changed(text: Optional[str]) -> None:
    get_default_workspace().on_selection_changed(text)


async def settings_changed() -> List[str]:
    return await get_default_workspace().on_settings_changed()
