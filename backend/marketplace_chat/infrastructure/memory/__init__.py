"""
In-memory adapters for tests and for embedding the core without storage.

They follow the same contracts as the Prisma/Redis/JWT adapters: per-reader
unread counts, recency ordering, compensating delete on thread creation and
per-thread realtime channels.
"""

from marketplace_chat.infrastructure.memory.chat_store import (
    InMemoryChatMessageRepository,
    InMemoryChatStore,
    InMemoryChatThreadRepository,
)
from marketplace_chat.infrastructure.memory.realtime_service import InMemoryRealtimeService
from marketplace_chat.infrastructure.memory.static_auth_service import StaticAuthService

__all__ = [
    "InMemoryChatStore",
    "InMemoryChatThreadRepository",
    "InMemoryChatMessageRepository",
    "InMemoryRealtimeService",
    "StaticAuthService",
]
