"""
Realtime Service Port - Push transport for one thread at a time.
Implementations:
    marketplace_chat/infrastructure/realtime/redis_realtime_service.py
    marketplace_chat/infrastructure/memory/realtime_service.py

Wire conventions: one channel per thread, named "<prefix>:<thread_id>", carrying
JSON envelopes {"event": ..., "data": ...} for message.inserted, typing and
message.delivered. Delivery is at-least-once; typing events are lossy.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from marketplace_chat.application.dto import ChatMessageDTO

MESSAGE_INSERTED = "message.inserted"
TYPING = "typing"
MESSAGE_DELIVERED = "message.delivered"


@dataclass(frozen=True)
class TypingEvent:
    participant_id: str
    at: str


Handler = Callable[[Any], Union[None, Awaitable[None]]]


@dataclass
class ThreadRealtimeHandlers:
    on_message: Optional[Callable[[ChatMessageDTO], Union[None, Awaitable[None]]]] = None
    on_typing: Optional[Callable[[TypingEvent], Union[None, Awaitable[None]]]] = None
    on_delivered: Optional[Callable[[str], Union[None, Awaitable[None]]]] = None


async def invoke_handler(handler: Optional[Handler], argument: Any) -> None:
    """Call a sync or async handler; missing handlers are skipped."""
    if handler is None:
        return
    result = handler(argument)
    if inspect.isawaitable(result):
        await result


def thread_channel(prefix: str, thread_id: str) -> str:
    return f"{prefix}:{thread_id}"


class RealtimeService(ABC):
    @abstractmethod
    async def subscribe_to_thread(
        self, thread_id: str, handlers: ThreadRealtimeHandlers
    ) -> None: ...

    @abstractmethod
    async def unsubscribe(self, thread_id: str) -> None: ...

    @abstractmethod
    async def broadcast_typing(self, thread_id: str, participant_id: str) -> None: ...


class MessageEventPublisher(ABC):
    @abstractmethod
    async def publish_message_inserted(self, message: ChatMessageDTO) -> None: ...


class RealtimeConnector(ABC):
    """Opens a RealtimeService for one consumer (e.g. one WebSocket connection)."""

    @abstractmethod
    def open(self) -> RealtimeService: ...
