"""
EntityNotFoundError - Raised when a requested thread does not exist.
Maps to: HTTP 404 Not Found
"""

from marketplace_chat.domain.exceptions.chat_error import ChatError, ChatErrorCode


class EntityNotFoundError(ChatError):
    """Exception raised when a requested entity is not found."""

    default_code = ChatErrorCode.THREAD_NOT_FOUND

    def __init__(self, message: str = "The requested thread was not found."):
        super().__init__(message)
