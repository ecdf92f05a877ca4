"""
Redis pub/sub RealtimeService.

One channel per thread ("<prefix>:<thread_id>"). Each subscribed thread gets
its own PubSub connection and a listener task that decodes envelopes and
calls the handlers. Publishing goes through the shared client, so the same
service also acts as the MessageEventPublisher.
"""

import asyncio
import logging
from dataclasses import dataclass

from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from marketplace_chat.application.dto import ChatMessageDTO
from marketplace_chat.application.ports import (
    MessageEventPublisher,
    RealtimeConnector,
    RealtimeService,
    ThreadRealtimeHandlers,
    TypingEvent,
    thread_channel,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.clock import format_timestamp, utc_now
from marketplace_chat.domain.exceptions import InfrastructureError
from marketplace_chat.infrastructure.realtime.envelope import (
    dispatch_event,
    encode_message_inserted,
    encode_typing,
)

logger = logging.getLogger(__name__)


@dataclass
class _ThreadListener:
    pubsub: PubSub
    task: asyncio.Task


class RedisRealtimeService(RealtimeService, MessageEventPublisher):
    def __init__(self, redis: Redis, channel_prefix: str = Config.REALTIME_CHANNEL_PREFIX):
        self._redis = redis
        self._prefix = channel_prefix
        self._listeners: dict[str, _ThreadListener] = {}
        # serializes (un)subscribe per thread; a listener is registered before the lock is released
        self._locks: dict[str, asyncio.Lock] = {}

    def channel_for(self, thread_id: str) -> str:
        return thread_channel(self._prefix, thread_id)

    def _lock_for(self, thread_id: str) -> asyncio.Lock:
        return self._locks.setdefault(thread_id, asyncio.Lock())

    @property
    def listening_threads(self) -> list[str]:
        return list(self._listeners)

    async def subscribe_to_thread(
        self, thread_id: str, handlers: ThreadRealtimeHandlers
    ) -> None:
        async with self._lock_for(thread_id):
            await self._stop_listener(thread_id)

            pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
            try:
                await pubsub.subscribe(self.channel_for(thread_id))
            except RedisError as e:
                await pubsub.aclose()
                raise InfrastructureError(f"Could not subscribe to thread {thread_id}", e) from e

            task = asyncio.create_task(
                self._listen(thread_id, pubsub, handlers), name=f"realtime:{thread_id}"
            )
            self._listeners[thread_id] = _ThreadListener(pubsub=pubsub, task=task)
        logger.info(f"[Realtime] Listening on {self.channel_for(thread_id)}")

    async def unsubscribe(self, thread_id: str) -> None:
        async with self._lock_for(thread_id):
            await self._stop_listener(thread_id)

    async def _stop_listener(self, thread_id: str) -> None:
        listener = self._listeners.pop(thread_id, None)
        if listener is None:
            return
        listener.task.cancel()
        try:
            await listener.task
        except asyncio.CancelledError:
            pass
        try:
            await listener.pubsub.unsubscribe(self.channel_for(thread_id))
        except RedisError as e:
            logger.warning(f"[Realtime] Unsubscribe from thread {thread_id} failed: {e}")
        finally:
            await listener.pubsub.aclose()
        logger.info(f"[Realtime] Stopped listening on {self.channel_for(thread_id)}")

    async def broadcast_typing(self, thread_id: str, participant_id: str) -> None:
        event = TypingEvent(participant_id=participant_id, at=format_timestamp(utc_now()))
        await self._publish(thread_id, encode_typing(event))

    async def publish_message_inserted(self, message: ChatMessageDTO) -> None:
        await self._publish(message.thread_id, encode_message_inserted(message))

    async def close(self) -> None:
        for thread_id in list(self._listeners):
            await self.unsubscribe(thread_id)

    async def _publish(self, thread_id: str, envelope: str) -> None:
        try:
            await self._redis.publish(self.channel_for(thread_id), envelope)
        except RedisError as e:
            raise InfrastructureError(f"Could not publish to thread {thread_id}", e) from e

    async def _listen(
        self, thread_id: str, pubsub: PubSub, handlers: ThreadRealtimeHandlers
    ) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    await dispatch_event(thread_id, message["data"], handlers)
                except Exception:
                    # a failing handler must not stop the listener
                    logger.exception(f"[Realtime] Handler failed on thread {thread_id}")
        except RedisError as e:
            logger.error(f"[Realtime] Listener for thread {thread_id} stopped: {e}")


class RedisRealtimeConnector(RealtimeConnector):
    """Each open() gets its own listeners over the shared Redis client."""

    def __init__(self, redis: Redis, channel_prefix: str = Config.REALTIME_CHANNEL_PREFIX):
        self._redis = redis
        self._prefix = channel_prefix

    def open(self) -> RedisRealtimeService:
        return RedisRealtimeService(self._redis, self._prefix)
