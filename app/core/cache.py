"""
Redis key-value store configuration and utilities
Holds session carts; storage errors are left to propagate to the caller
"""

import redis.asyncio as redis
from typing import Optional, Any, Union
from datetime import timedelta
import json
import logging

from .config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Thin async Redis wrapper storing JSON documents"""

    def __init__(self):
        self.redis_client: Optional[redis.Redis] = None

    async def connect(self):
        """Initialize Redis connection"""
        self.redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.REDIS_MAX_CONNECTIONS
        )
        await self.redis_client.ping()
        logger.info("Redis connection established")

    async def disconnect(self):
        """Close Redis connection"""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("Redis connection closed")

    @property
    def client(self) -> redis.Redis:
        if self.redis_client is None:
            raise RuntimeError("Redis client is not connected")
        return self.redis_client

    async def get_json(self, key: str) -> Optional[Any]:
        """Get a JSON document, None when the key is absent or expired"""
        value = await self.client.get(key)
        if value is None:
            return None
        return json.loads(value)

    async def set_json(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> None:
        """Write a JSON document, replacing any previous value and TTL"""
        if isinstance(expire, timedelta):
            expire = int(expire.total_seconds())
        await self.client.set(key, json.dumps(value), ex=expire)

    async def delete(self, key: str) -> bool:
        """Delete key, True if something was removed"""
        return bool(await self.client.delete(key))

    async def ttl(self, key: str) -> int:
        """Remaining time to live in seconds (-2 missing, -1 no expiry)"""
        return await self.client.ttl(key)

    async def ping(self) -> bool:
        return bool(await self.client.ping())


# Global cache instance
cache = RedisCache()


def get_cache() -> RedisCache:
    """Dependency returning the shared key-value store"""
    return cache
