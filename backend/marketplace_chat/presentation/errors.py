"""
ChatError -> HTTP mapping.

Response body for every expected failure:
    {"error": {"code": "THREAD_NOT_FOUND", "message": "...", "details": {...}}}

WebSocket connections are refused with close code 4000 + HTTP status
(4401, 4403, 4404, 4422, 4502).
"""

from typing import Any, TypeVar

from fastapi.responses import JSONResponse

from marketplace_chat.application.common.result import Result
from marketplace_chat.domain.exceptions import (
    AccessDeniedError,
    ChatError,
    DomainValidationError,
    EntityNotFoundError,
    IdentityMissingError,
    InfrastructureError,
)

T = TypeVar("T")

_STATUS_BY_ERROR: list[tuple[type[ChatError], int]] = [
    (DomainValidationError, 422),
    (AccessDeniedError, 403),
    (EntityNotFoundError, 404),
    (IdentityMissingError, 401),
    (InfrastructureError, 502),
]

WS_CLOSE_OFFSET = 4000


def http_status_for(error: ChatError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return 400


def websocket_close_code_for(error: ChatError) -> int:
    return WS_CLOSE_OFFSET + http_status_for(error)


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def chat_error_response(error: ChatError) -> JSONResponse:
    return JSONResponse(
        status_code=http_status_for(error),
        content=error_body(error.code.value, error.message, error.details),
    )


def unwrap(result: Result[T]) -> T:
    """Return the value of a successful Result, raise its ChatError otherwise."""
    if result.is_err():
        raise result.error
    return result.value
