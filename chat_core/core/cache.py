"""
Redis cache management.
Provides connection pooling and the unread-count caching helpers.
"""
import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from chat_core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis cache manager with connection pooling. Every call is a no-op when not connected."""

    def __init__(self):
        """Initialize without a connection; call connect() at startup."""
        self.redis: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        """Establish connection to Redis."""
        if not settings.redis_url:
            logger.info("No Redis URL provided - running without unread count cache")
            self.redis = None
            return

        try:
            self.redis = aioredis.from_url(
                settings.redis_url,
                password=settings.redis_password if settings.redis_password else None,
                encoding="utf-8",
                decode_responses=True,
                max_connections=50,
            )
            await self.redis.ping()
            logger.info("Connected to Redis successfully")
        except (RedisError, OSError) as e:
            logger.warning(f"Could not connect to Redis, running without cache: {e}")
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        if not self.redis:
            return None

        value = await self.redis.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache with optional TTL.

        Args:
            key: Cache key
            value: Value to cache (JSON-encoded)
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        if not self.redis:
            return False

        value = json.dumps(value)

        if ttl:
            return bool(await self.redis.setex(key, ttl, value))
        return bool(await self.redis.set(key, value))

    async def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Returns:
            True if key was deleted
        """
        if not self.redis:
            return False

        return bool(await self.redis.delete(key))


# Global cache instance
cache = RedisCache()


def _unread_key(participant_kind: str, participant_id: str) -> str:
    return f"unread:total:{participant_kind}:{participant_id}"


async def cache_unread_count(participant_kind: str, participant_id: str, count: int) -> bool:
    """
    Cache a participant's total unread count.

    Invalidated when a message is sent to them, read, or trashed by them.
    """
    return await cache.set(
        _unread_key(participant_kind, participant_id),
        count,
        ttl=settings.cache_unread_ttl
    )


async def get_cached_unread_count(participant_kind: str, participant_id: str) -> Optional[int]:
    """
    Get a participant's cached unread count.

    Returns:
        Cached count or None on cache miss
    """
    count = await cache.get(_unread_key(participant_kind, participant_id))
    return int(count) if count is not None else None


async def invalidate_unread_count_cache(participant_kind: str, participant_id: str) -> bool:
    """Drop a participant's cached unread count."""
    return await cache.delete(_unread_key(participant_kind, participant_id))
