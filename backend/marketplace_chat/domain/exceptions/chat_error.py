"""
ChatError - Base class for every expected failure of a chat operation.
"""

from enum import Enum
from typing import Any, Optional


class ChatErrorCode(str, Enum):
    INVALID_THREAD_ID = "INVALID_THREAD_ID"
    INVALID_PROPERTY_ID = "INVALID_PROPERTY_ID"
    INVALID_LISTER_ID = "INVALID_LISTER_ID"
    INVALID_FILTERS = "INVALID_FILTERS"
    MESSAGE_EMPTY = "MESSAGE_EMPTY"
    MESSAGE_TOO_LONG = "MESSAGE_TOO_LONG"
    PAYLOAD_INVALID = "PAYLOAD_INVALID"
    ACCESS_DENIED = "ACCESS_DENIED"
    THREAD_ARCHIVED = "THREAD_ARCHIVED"
    THREAD_NOT_FOUND = "THREAD_NOT_FOUND"
    SENDER_MISSING = "SENDER_MISSING"
    READER_MISSING = "READER_MISSING"
    USER_REQUIRED = "USER_REQUIRED"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class ChatError(Exception):
    """Expected failure with a machine-readable code and a human-readable message."""

    default_code = ChatErrorCode.INFRASTRUCTURE

    def __init__(
        self,
        message: str,
        code: Optional[ChatErrorCode] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"
