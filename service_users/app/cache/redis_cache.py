"""
Redis caching layer for Users Service.
"""

from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import RegistryException, BackendIOError, NotFoundError
from .base import Cache, DEFAULT_TTL_SECONDS


class RedisCache(Cache):
    """Redis-backed cache storing opaque byte payloads."""

    def __init__(self, redis_url: str, default_ttl: int = DEFAULT_TTL_SECONDS,
                 client: Optional[redis.Redis] = None):
        super().__init__(default_ttl)
        self.redis_url = redis_url
        self.logger = get_logger("users.cache.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        """Start the Redis cache."""
        try:
            if self.redis is None:
                self.redis = redis.from_url(
                    self.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=5,
                    health_check_interval=30
                )

            await self.redis.ping()

            self.logger.info("Redis cache started", default_ttl=self.default_ttl)

        except (RedisError, OSError) as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise RegistryException("REDIS_START_FAILED", str(e))

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Cache a value; failures are logged and reported as False."""
        try:
            data = self.encode(value)
        except (TypeError, ValueError) as e:
            self.logger.error("Error encoding cache value", key=key, error=str(e))
            return False

        try:
            await self._client().set(key, data, ex=self._ttl(ttl))
        except (RedisError, OSError, BackendIOError) as e:
            self.logger.error("Error writing cache", key=key, error=str(e))
            return False

        self.logger.debug("Cached value", key=key, ttl=self._ttl(ttl), size=len(data))
        return True

    async def get(self, key: str, type_: Any = None) -> Any:
        """Get and decode a cached value."""
        try:
            data = await self._client().get(key)
        except (RedisError, OSError) as e:
            raise BackendIOError("redis", f"failed to get key {key}: {e}", {"key": key}) from e

        if data is None:
            raise NotFoundError(f"key {key} not found", {"key": key})

        self.logger.info("Reading from cache", key=key)
        return self.decode(key, data, type_)

    async def delete(self, key: str) -> None:
        """Delete a cached value."""
        try:
            await self._client().delete(key)
        except (RedisError, OSError) as e:
            self.logger.error("Error deleting cache key", key=key, error=str(e))
            raise BackendIOError("redis", f"failed to delete key {key}: {e}", {"key": key}) from e

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client().ping()
            return True
        except (RedisError, OSError, BackendIOError):
            return False

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise BackendIOError("redis", "cache not started")
        return self.redis
