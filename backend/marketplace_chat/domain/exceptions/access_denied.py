"""
AccessDeniedError - Raised when the caller is not a participant of the thread.
Maps to: HTTP 403 Forbidden
"""

from typing import Optional

from marketplace_chat.domain.exceptions.chat_error import ChatError, ChatErrorCode


class AccessDeniedError(ChatError):
    """Raised when the caller lacks permission to act on a thread"""

    default_code = ChatErrorCode.ACCESS_DENIED

    def __init__(
        self, message: str = "Access denied", code: Optional[ChatErrorCode] = None
    ):
        super().__init__(message, code)
