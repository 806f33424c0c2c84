import json
import logging
import os
from pathlib import Path
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from assistant_core.config.settings import settings
from assistant_core.domain.exceptions import BusinessError
from assistant_core.infrastructure.logging.logger import log_event
from assistant_core.providers.registry import ProviderSettings


class JsonSettingsStore:
    """Provider 设置 blob 的 JSON 文件存储。

    整个 blob 存在 <root>/<key>.json 一个文件里。核心只在启动和收到
    "设置已更改"通知时调用 load()；save() 供设置面板使用。
    """

    def __init__(self, root: str | Path | None = None, key: str | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._key = key or settings.settings_key

    @property
    def path(self) -> Path:
        return self._root / f"{self._key}.json"

    def load(self) -> ProviderSettings:
        """读取设置；文件不存在或内容无效时返回默认设置。"""

        if not self.path.exists():
            return ProviderSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return ProviderSettings.model_validate(data)
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            log_event(logging.WARNING, "Invalid provider settings, using defaults", path=str(self.path), error=str(e))
            return ProviderSettings()

    def save(self, provider_settings: ProviderSettings) -> None:
        obj = provider_settings.model_dump(mode="json", by_alias=True, exclude_none=True)
        tmp_path = self._root / f"{self._key}.{uuid4().hex}.json.tmp"
        try:
            tmp_path.write_text(json.dumps(obj, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise BusinessError(code="STORE_WRITE_ERROR", message=str(e))
