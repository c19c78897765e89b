"""Redis-based cache service.

Provides async Redis caching with TTL support. Used for the compliance
aggregate read cache. Integrates with subcompliance.infrastructure.cache.keys
for key format (DRY). Every failure degrades to a cache miss.
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as redis

from subcompliance.core.config import get_settings
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class CacheService:
    """Async Redis cache service with TTL support.

    Uses subcompliance.core.config for connection settings. Call connect()
    at startup and disconnect() at shutdown.
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI. A supplied
                client is treated as connected.
        """
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=(
                    self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None
                ),
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Attempt to reconnect after a dropped connection. Returns True if reconnected."""
        if self.redis is None:
            return False
        try:
            await self.redis.aclose()
        except redis.RedisError:
            logger.debug("Ignoring error while closing stale Redis connection")
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing/unavailable."""
        if not self.is_available() or self.redis is None:
            return None
        try:
            value = await self.redis.get(key)
        except (redis.ConnectionError, redis.TimeoutError):
            if not await self._reconnect() or self.redis is None:
                logger.warning(
                    "Cache get unavailable for key %s (Redis disconnected)", key
                )
                return None
            try:
                value = await self.redis.get(key)
            except redis.RedisError:
                logger.exception("Cache get error for key %s after reconnect", key)
                return None
        except redis.RedisError:
            logger.exception("Cache get error for key %s", key)
            return None
        if value is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return json.loads(value)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value (JSON-serializable) with TTL in seconds. Returns True on success."""
        if not self.is_available() or self.redis is None:
            return False
        serialized = json.dumps(value)
        try:
            await self.redis.setex(key, ttl, serialized)
            logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
            return True
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect() and self.redis is not None:
                try:
                    await self.redis.setex(key, ttl, serialized)
                    return True
                except redis.RedisError:
                    logger.exception("Cache set error for key %s after reconnect", key)
                    return False
            logger.warning("Cache set unavailable for key %s (Redis disconnected)", key)
            return False
        except redis.RedisError:
            logger.exception("Cache set error for key %s", key)
            return False

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True if the command was executed."""
        if not self.is_available() or self.redis is None:
            return False
        try:
            await self.redis.delete(key)
            logger.debug("Cache DELETE: %s", key)
            return True
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect() and self.redis is not None:
                try:
                    await self.redis.delete(key)
                    return True
                except redis.RedisError:
                    logger.exception(
                        "Cache delete error for key %s after reconnect", key
                    )
            return False
        except redis.RedisError:
            logger.exception("Cache delete error for key %s", key)
            return False
