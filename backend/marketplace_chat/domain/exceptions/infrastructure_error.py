"""
InfrastructureError - Storage or transport failure, wrapped with its cause.
Maps to: HTTP 502 Bad Gateway

The core never retries these; retry policy belongs to the caller.
"""

from typing import Optional

from marketplace_chat.domain.exceptions.chat_error import ChatError, ChatErrorCode


class InfrastructureError(ChatError):
    default_code = ChatErrorCode.INFRASTRUCTURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__
