"""
DomainValidationError - Raised for malformed input (ids, message body, payload, filters).
Maps to: HTTP 422 Unprocessable Entity
"""

from typing import Any, Optional

from marketplace_chat.domain.exceptions.chat_error import ChatError, ChatErrorCode


class DomainValidationError(ChatError):
    """Exception raised for domain validation errors."""

    def __init__(
        self,
        message: str,
        code: ChatErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
