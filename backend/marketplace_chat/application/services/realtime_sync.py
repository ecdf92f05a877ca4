"""
Realtime sync - per-thread subscription lifecycle over a RealtimeService.

Guarantees:
- At most one live subscription per thread; subscribing again closes the old one.
  Concurrent subscribes to one thread are serialized.
- A ThreadSubscription is an explicit handle. close() is idempotent and also
  runs from `async with`, so every exit path unsubscribes.
- handlers is a plain attribute. Dispatch reads it at delivery time, so
  swapping handlers is a reassignment.
- Events for closed or replaced subscriptions, and messages for another
  thread, are dropped. Message ids already delivered are dropped too, but
  delivery stays at-least-once: consumers still deduplicate by id.
- Typing broadcasts are fire-and-forget; failures are logged.
"""

import asyncio
import logging
from typing import Optional

from marketplace_chat.application.dto import ChatMessageDTO
from marketplace_chat.application.ports import (
    RealtimeService,
    ThreadRealtimeHandlers,
    TypingEvent,
    invoke_handler,
)
from marketplace_chat.domain.exceptions import ChatError

logger = logging.getLogger(__name__)


class ThreadSubscription:
    def __init__(
        self,
        manager: "RealtimeSyncManager",
        thread_id: str,
        handlers: ThreadRealtimeHandlers,
    ):
        self.thread_id = thread_id
        self.handlers = handlers
        self._manager = manager
        self._closed = False
        self._seen_message_ids: set[str] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._manager._release(self)

    async def __aenter__(self) -> "ThreadSubscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _on_message(self, message: ChatMessageDTO) -> None:
        if self._closed:
            return
        if message.thread_id != self.thread_id:
            logger.debug(
                f"[Realtime] Dropped message {message.id} for thread {message.thread_id} "
                f"on subscription {self.thread_id}"
            )
            return
        if message.id in self._seen_message_ids:
            return
        self._seen_message_ids.add(message.id)
        await invoke_handler(self.handlers.on_message, message)

    async def _on_typing(self, event: TypingEvent) -> None:
        if not self._closed:
            await invoke_handler(self.handlers.on_typing, event)

    async def _on_delivered(self, message_id: str) -> None:
        if not self._closed:
            await invoke_handler(self.handlers.on_delivered, message_id)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"ThreadSubscription(thread_id={self.thread_id!r}, {state})"


class RealtimeSyncManager:
    def __init__(self, realtime: RealtimeService):
        self._realtime = realtime
        self._subscriptions: dict[str, ThreadSubscription] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def active_threads(self) -> list[str]:
        return list(self._subscriptions)

    def get(self, thread_id: str) -> Optional[ThreadSubscription]:
        return self._subscriptions.get(thread_id)

    async def subscribe(
        self, thread_id: str, handlers: Optional[ThreadRealtimeHandlers] = None
    ) -> ThreadSubscription:
        """
        Open the subscription for thread_id, closing the one it replaces.

        Concurrent calls for one thread run one after the other, so the
        handle returned to an earlier caller may already be closed.
        """
        async with self._locks.setdefault(thread_id, asyncio.Lock()):
            existing = self._subscriptions.get(thread_id)
            if existing is not None:
                await existing.close()

            subscription = ThreadSubscription(
                self, thread_id, handlers or ThreadRealtimeHandlers()
            )
            self._subscriptions[thread_id] = subscription
            try:
                await self._realtime.subscribe_to_thread(
                    thread_id,
                    ThreadRealtimeHandlers(
                        on_message=subscription._on_message,
                        on_typing=subscription._on_typing,
                        on_delivered=subscription._on_delivered,
                    ),
                )
            except Exception:
                subscription._closed = True
                if self._subscriptions.get(thread_id) is subscription:
                    del self._subscriptions[thread_id]
                raise
        logger.debug(f"[Realtime] Subscribed to thread {thread_id}")
        return subscription

    async def broadcast_typing(self, thread_id: str, participant_id: str) -> None:
        try:
            await self._realtime.broadcast_typing(thread_id, participant_id)
        except ChatError as e:
            logger.warning(f"[Realtime] Typing broadcast failed for thread {thread_id}: {e.message}")

    async def close_all(self) -> None:
        for subscription in list(self._subscriptions.values()):
            await subscription.close()

    async def _release(self, subscription: ThreadSubscription) -> None:
        if self._subscriptions.get(subscription.thread_id) is not subscription:
            return
        del self._subscriptions[subscription.thread_id]
        await self._realtime.unsubscribe(subscription.thread_id)
        logger.debug(f"[Realtime] Unsubscribed from thread {subscription.thread_id}")
