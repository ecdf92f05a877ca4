from marketplace_chat.application.commands.threads.find_or_create_thread import (
    FindOrCreateThreadCommand,
    FindOrCreateThreadHandler,
)

__all__ = [
    "FindOrCreateThreadCommand",
    "FindOrCreateThreadHandler",
]
