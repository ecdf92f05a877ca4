"""
PORTS - Abstract boundaries consumed by the chat core

Implementations: marketplace_chat/infrastructure/
"""

from marketplace_chat.application.ports.auth_service import AuthProfile, AuthService
from marketplace_chat.application.ports.chat_message_repository import ChatMessageRepository
from marketplace_chat.application.ports.chat_thread_repository import ChatThreadRepository
from marketplace_chat.application.ports.realtime_service import (
    MessageEventPublisher,
    RealtimeConnector,
    RealtimeService,
    ThreadRealtimeHandlers,
    TypingEvent,
    invoke_handler,
    thread_channel,
)

__all__ = [
    "AuthProfile",
    "AuthService",
    "ChatMessageRepository",
    "ChatThreadRepository",
    "MessageEventPublisher",
    "RealtimeConnector",
    "RealtimeService",
    "ThreadRealtimeHandlers",
    "TypingEvent",
    "invoke_handler",
    "thread_channel",
]
