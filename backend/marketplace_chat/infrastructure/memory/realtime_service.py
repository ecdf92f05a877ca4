"""
In-process RealtimeService and MessageEventPublisher.

Publishing calls the handlers of the subscribed thread directly. The
deliver_* helpers push arbitrary events, including duplicates and events for
the wrong thread, the way a real transport may.
"""

import logging
from typing import Optional

from marketplace_chat.application.dto import ChatMessageDTO
from marketplace_chat.application.ports import (
    MessageEventPublisher,
    RealtimeConnector,
    RealtimeService,
    ThreadRealtimeHandlers,
    TypingEvent,
    invoke_handler,
)
from marketplace_chat.domain.clock import format_timestamp, utc_now

logger = logging.getLogger(__name__)


class InMemoryRealtimeService(RealtimeService, MessageEventPublisher, RealtimeConnector):
    """open() hands out this same service, so each thread has a single subscriber."""

    def __init__(self):
        self._handlers: dict[str, ThreadRealtimeHandlers] = {}
        self.subscribe_calls: list[str] = []
        self.unsubscribe_calls: list[str] = []
        self.typing_broadcasts: list[TypingEvent] = []

    @property
    def subscribed_threads(self) -> list[str]:
        return list(self._handlers)

    async def subscribe_to_thread(
        self, thread_id: str, handlers: ThreadRealtimeHandlers
    ) -> None:
        self.subscribe_calls.append(thread_id)
        self._handlers[thread_id] = handlers

    async def unsubscribe(self, thread_id: str) -> None:
        self.unsubscribe_calls.append(thread_id)
        self._handlers.pop(thread_id, None)

    async def broadcast_typing(self, thread_id: str, participant_id: str) -> None:
        event = TypingEvent(participant_id=participant_id, at=format_timestamp(utc_now()))
        self.typing_broadcasts.append(event)
        await self.deliver_typing(thread_id, event)

    async def publish_message_inserted(self, message: ChatMessageDTO) -> None:
        await self.deliver_message(message)

    async def deliver_message(
        self, message: ChatMessageDTO, thread_id: Optional[str] = None
    ) -> None:
        """Push message.inserted on thread_id's channel (defaults to the message's thread)."""
        handlers = self._handlers.get(thread_id or message.thread_id)
        if handlers is not None:
            await invoke_handler(handlers.on_message, message)

    async def deliver_typing(self, thread_id: str, event: TypingEvent) -> None:
        handlers = self._handlers.get(thread_id)
        if handlers is not None:
            await invoke_handler(handlers.on_typing, event)

    async def deliver_delivered(self, thread_id: str, message_id: str) -> None:
        handlers = self._handlers.get(thread_id)
        if handlers is not None:
            await invoke_handler(handlers.on_delivered, message_id)

    def open(self) -> "InMemoryRealtimeService":
        return self
