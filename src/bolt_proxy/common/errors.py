import asyncio
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Error codes surfaced in response envelopes and probe failures."""
    MISSING_CYPHER = "MissingCypher"
    INVALID_REQUEST = "InvalidRequest"
    QUERY_ERROR = "QueryError"
    QUERY_TIMEOUT = "QueryTimeout"
    PROBE_TIMEOUT = "timeout"


class FailureKind(str, Enum):
    """Classification of a failed network operation."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    OTHER = "other"


def error_code_for(exc: BaseException) -> str:
    """Best-effort error code for a driver exception.

    Neo4j server errors carry a status code such as
    ``Neo.ClientError.Statement.SyntaxError``; driver-side errors do not.
    """
    code: Optional[Any] = getattr(exc, "code", None)
    if isinstance(code, str) and code:
        return code
    return ErrorCode.QUERY_ERROR.value


def error_message_for(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__


def classify_failure(exc: BaseException) -> FailureKind:
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return FailureKind.TIMEOUT
    if isinstance(exc, OSError):
        return FailureKind.CONNECTION
    return FailureKind.OTHER
