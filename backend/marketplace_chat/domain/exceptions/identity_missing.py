"""
IdentityMissingError - The session resolved to no usable sender/reader/user id.
Maps to: HTTP 401 Unauthorized (the client should re-authenticate, not retry)
"""

from marketplace_chat.domain.exceptions.chat_error import ChatError, ChatErrorCode


class IdentityMissingError(ChatError):
    default_code = ChatErrorCode.UNAUTHENTICATED

    def __init__(self, message: str, code: ChatErrorCode = ChatErrorCode.UNAUTHENTICATED):
        super().__init__(message, code)
