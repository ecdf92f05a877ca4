"""
Async Redis Client Factory.

Creates the Redis client used for realtime pub/sub.
"""

import logging
import redis.asyncio as redis
from redis.asyncio import Redis
from marketplace_chat.config.settings import Config

logger = logging.getLogger(__name__)


async def create_redis_client() -> Redis:
    """
    Create async Redis client with connection pool.

    Raises:
        redis.ConnectionError: If Redis is not reachable
    """
    client = redis.from_url(
        Config.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5.0,
    )

    await client.ping()
    logger.info(f"[Redis] Connected to {Config.REDIS_URL}")

    return client


async def close_redis_client(client: Redis) -> None:
    if client:
        await client.aclose()
        logger.info("[Redis] Connection closed")
