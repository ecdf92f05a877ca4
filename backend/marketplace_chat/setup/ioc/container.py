"""
Dishka DI Container Setup.

Guidelines:
- Registers the storage and realtime adapters behind the application ports
- Maps abstract interfaces to concrete implementations
- Manages lifecycle: Prisma and Redis are app-scoped and closed with the container

Dishka concepts:
- Provider: Class that defines how to create dependencies
- @provide: Decorator to mark factory methods
- Scope: Lifecycle of dependency (APP = singleton, REQUEST = per-request)
- Generator providers: code after `yield` runs when the container closes

Flow:
  Container → Prisma → PrismaChatMessageRepository → RealtimeChatMessageRepository
                                                        ↓ publishes through
                                   Redis → RedisRealtimeService (MessageEventPublisher)
"""

from typing import AsyncIterable

from dishka import AsyncContainer, Provider, Scope, make_async_container, provide
from dishka.integrations.fastapi import FastapiProvider
from prisma import Prisma
from redis.asyncio import Redis

from marketplace_chat.application.ports import (
    ChatMessageRepository,
    ChatThreadRepository,
    MessageEventPublisher,
    RealtimeConnector,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.infrastructure.persistence.prisma_chat_message_repository import (
    PrismaChatMessageRepository,
)
from marketplace_chat.infrastructure.persistence.prisma_chat_thread_repository import (
    PrismaChatThreadRepository,
)
from marketplace_chat.infrastructure.realtime.realtime_message_repository import (
    RealtimeChatMessageRepository,
)
from marketplace_chat.infrastructure.realtime.redis_client import (
    close_redis_client,
    create_redis_client,
)
from marketplace_chat.infrastructure.realtime.redis_realtime_service import (
    RedisRealtimeConnector,
    RedisRealtimeService,
)
from marketplace_chat.setup.ioc.handlers import HandlerProvider


class AppProvider(Provider):
    """
    Infrastructure dependency provider.

    Registers the Prisma and Redis adapters for the chat ports.
    """

    # ==================== DATABASE ====================

    @provide(scope=Scope.APP)
    async def get_prisma(self) -> AsyncIterable[Prisma]:
        """
        Provide Prisma client (singleton, app-scoped).

        - connected once when first requested, disconnected on container close
        """
        prisma = Prisma()
        await prisma.connect()
        yield prisma
        await prisma.disconnect()

    # ==================== REDIS ====================

    @provide(scope=Scope.APP)
    async def get_redis(self) -> AsyncIterable[Redis]:
        client = await create_redis_client()
        yield client
        await close_redis_client(client)

    # ==================== REALTIME ====================

    @provide(scope=Scope.APP)
    async def get_message_event_publisher(
        self, redis: Redis
    ) -> AsyncIterable[MessageEventPublisher]:
        publisher = RedisRealtimeService(redis, Config.REALTIME_CHANNEL_PREFIX)
        yield publisher
        await publisher.close()

    @provide(scope=Scope.APP)
    def get_realtime_connector(self, redis: Redis) -> RealtimeConnector:
        """Each WebSocket connection opens its own RedisRealtimeService."""
        return RedisRealtimeConnector(redis, Config.REALTIME_CHANNEL_PREFIX)

    # ==================== REPOSITORIES ====================

    @provide(scope=Scope.APP)
    def get_thread_repository(self, prisma: Prisma) -> ChatThreadRepository:
        """
        Provide ChatThreadRepository implementation.

        - Return type is ABSTRACT (ChatThreadRepository)
        - Implementation is CONCRETE (PrismaChatThreadRepository)
        """
        return PrismaChatThreadRepository(prisma)

    @provide(scope=Scope.APP)
    def get_message_repository(
        self, prisma: Prisma, publisher: MessageEventPublisher
    ) -> ChatMessageRepository:
        """Prisma storage; every stored message is also published as message.inserted."""
        return RealtimeChatMessageRepository(PrismaChatMessageRepository(prisma), publisher)


def create_container() -> AsyncContainer:
    """
    Create and configure the DI container.

    - Call this ONCE, before the FastAPI app is created
    """
    return make_async_container(AppProvider(), HandlerProvider(), FastapiProvider())
