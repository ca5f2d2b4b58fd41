"""标准化错误代码."""

from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举."""

    GENERAL_ERROR = "GENERAL_ERROR"
    RATE_LIMITED = "API_RATE_LIMIT"
    HTTP_ERROR = "HTTP_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    TASK_FAULT = "TASK_FAULT"
    CONFIG_ERROR = "CONFIG_ERROR"
