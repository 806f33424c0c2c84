"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在宿主 UI 层做统一捕获与用户提示。

分类：
- TransportError: 网络失败 / 非 2xx / 空结果，直接上抛，不重试。
- MalformedRecord: 流式响应中单条记录解析失败，仅在解码器内部吸收。
- ValidationError: 前置条件失败（未选模型、输入为空、请求进行中），
  在任何网络调用之前抛出。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NO_MODEL_SELECTED"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、url 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class TransportError(BusinessError):
    """传输层错误基类：请求被中止，错误交给调用方展示。"""

    def __init__(self, code: str, message: str, http_status: int = 502, **extra):
        super().__init__(code, message, http_status, **extra)


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(TransportError):
    """Provider 返回非 2xx 状态码时抛出，http_status 为上游状态码。"""


class ProviderUnavailable(TransportError):
    """拉取模型列表失败（网络不可达或状态码异常）。"""


class EmptyCompletion(TransportError):
    """Provider 返回的 choices 为空。"""


class MalformedRecord(BusinessError):
    """流式响应中的单条记录无法解析。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class NoModelSelected(ValidationError):
    """既没有显式传入模型，也没有配置默认模型。"""


class MissingInput(ValidationError):
    """必填输入为空（选中文本、聊天输入、自定义提示词）。"""


class SessionBusy(ValidationError):
    """同一会话已有请求在进行中。"""

    def __init__(self, code: str = "SESSION_BUSY", message: str = "A request is already in flight", **extra):
        super().__init__(code, message, 409, **extra)
