from typing import Optional

from assistant_core.domain.exceptions import SessionBusy


class RequestGate:
    """一个工作区内聊天与选区处理共用的进行中标记，同一时刻最多一个请求。"""

    def __init__(self) -> None:
        self._owner: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._owner is not None

    @property
    def owner(self) -> Optional[str]:
        return self._owner

    def acquire(self, owner: str) -> None:
        if self._owner is not None:
            raise SessionBusy(active=self._owner)
        self._owner = owner

    def release(self) -> None:
        self._owner = None
