from marketplace_chat.application.commands.messages.send_message import (
    SendMessageCommand,
    SendMessageHandler,
)
from marketplace_chat.application.commands.messages.mark_thread_as_read import (
    MarkThreadAsReadCommand,
    MarkThreadAsReadHandler,
)

__all__ = [
    "SendMessageCommand",
    "SendMessageHandler",
    "MarkThreadAsReadCommand",
    "MarkThreadAsReadHandler",
]
