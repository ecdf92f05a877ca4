from marketplace_chat.application.queries.messages.list_messages import (
    ListMessagesHandler,
    ListMessagesQuery,
)

__all__ = ["ListMessagesQuery", "ListMessagesHandler"]
