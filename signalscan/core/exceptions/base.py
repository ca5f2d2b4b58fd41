"""signalscan核心异常类."""

from typing import Any

from signalscan.core.exceptions.codes import ErrorCode


class SignalScanError(Exception):
    """signalscan基础异常类."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """初始化异常.

        Args:
            message: 错误消息
            error_code: 错误代码
            details: 额外详情
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {
            "code": self.error_code,
            "message": self.message,
            "details": dict(self.details),
        }


class QuoteSourceError(SignalScanError):
    """行情源请求相关异常."""

    def __init__(
        self,
        message: str,
        symbol: str,
        error_code: str,
        retryable: bool = True,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["symbol"] = symbol
        super().__init__(message, error_code, super_details)
        self.symbol = symbol
        self.retryable = retryable


class RateLimitedError(QuoteSourceError):
    """速率限制异常 (HTTP 429)."""

    def __init__(self, symbol: str, details: dict[str, Any] | None = None):
        super().__init__(
            ErrorCode.RATE_LIMITED.value,
            symbol,
            ErrorCode.RATE_LIMITED.value,
            retryable=True,
            details=details,
        )


class HttpStatusError(QuoteSourceError):
    """非2xx响应异常."""

    def __init__(self, symbol: str, status_code: int, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["status_code"] = status_code
        super().__init__(
            f"API error: HTTP {status_code}",
            symbol,
            ErrorCode.HTTP_ERROR.value,
            retryable=True,
            details=super_details,
        )
        self.status_code = status_code


class NetworkError(QuoteSourceError):
    """网络异常."""

    def __init__(self, symbol: str, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Network error: {reason}",
            symbol,
            ErrorCode.NETWORK_ERROR.value,
            retryable=True,
            details=details,
        )


class ParseError(QuoteSourceError):
    """响应解析异常.

    JSON语法错误可重试; 结构性缺失 (无result/timestamp/quote) 不重试.
    """

    def __init__(
        self,
        symbol: str,
        reason: str,
        retryable: bool = True,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"Parse error: {reason}",
            symbol,
            ErrorCode.PARSE_ERROR.value,
            retryable=retryable,
            details=details,
        )


class InsufficientDataError(SignalScanError):
    """历史数据不足异常, 从不重试."""

    def __init__(self, symbol: str, available: int, required: int):
        super().__init__(
            "Not enough data",
            ErrorCode.INSUFFICIENT_DATA.value,
            {"symbol": symbol, "available": available, "required": required},
        )
        self.symbol = symbol
        self.available = available
        self.required = required


class TaskFaultError(SignalScanError):
    """批处理工作协程内部异常."""

    def __init__(self, symbol: str, cause: BaseException):
        super().__init__(
            f"{ErrorCode.TASK_FAULT.value}: {type(cause).__name__}: {cause}",
            ErrorCode.TASK_FAULT.value,
            {"symbol": symbol, "exception_type": type(cause).__name__},
        )
        self.symbol = symbol
        self.cause = cause


class ConfigurationError(SignalScanError):
    """配置异常."""

    def __init__(self, message: str, field_name: str | None = None):
        details = {"field": field_name} if field_name else None
        super().__init__(message, ErrorCode.CONFIG_ERROR.value, details)
