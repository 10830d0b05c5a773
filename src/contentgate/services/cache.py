"""CacheStore - Redis-backed store for raw content payloads.

Caching is strictly an optimisation: every method here absorbs Redis
failures (logging them) instead of raising, so the gateway stays correct
with the cache fully unavailable.

Connection policy:
    The connection is established once, at startup, by ``CacheStore.connect``.
    If the initial ping fails the store stays in bypass mode for the whole
    process lifetime. There is no background reconnect.

Cache Key Types (built by ContentService):
    - collection:{type}:{encoded-query}
    - single:{type}:{id}:{encoded-query}
    - page:{slug}
"""

from redis.asyncio import Redis

from contentgate.config import Settings
from contentgate.core.logging import get_logger

logger = get_logger(__name__)


class CacheStore:
    """Key/value store with a fixed per-entry TTL.

    Values are stored and returned as raw bytes; the store never parses them.

    Usage with FastAPI lifespan:
        ```python
        cache = await CacheStore.connect(settings)
        ...
        await cache.close()
        ```
    """

    def __init__(self, redis: Redis | None, ttl: int) -> None:
        """Initialize the store.

        Args:
            redis: Connected async Redis client, or None for bypass mode
            ttl: Time-to-live in seconds applied to every write
        """
        self._redis = redis
        self.ttl = ttl

    @classmethod
    async def connect(cls, settings: Settings) -> "CacheStore":
        """Open the Redis connection and verify it with a ping.

        Never raises: on failure the returned store is in bypass mode.
        """
        password = (
            settings.redis_password.get_secret_value()
            if settings.redis_password
            else None
        )
        redis = Redis.from_url(
            settings.redis_url,
            password=password,
            socket_timeout=settings.cache_timeout,
            socket_connect_timeout=settings.cache_timeout,
        )
        try:
            await redis.ping()
        except Exception as e:
            logger.warning("redis_connection_failed_caching_disabled", error=str(e))
            await redis.aclose()
            return cls(None, ttl=settings.cache_ttl)

        conn = redis.connection_pool.connection_kwargs
        logger.info(
            "redis_connected",
            host=conn.get("host"),
            port=conn.get("port"),
            db=conn.get("db"),
            ttl=settings.cache_ttl,
        )
        return cls(redis, ttl=settings.cache_ttl)

    @property
    def is_bypassed(self) -> bool:
        """True when no connection is held and every read is a miss."""
        return self._redis is None

    async def get(self, cache_key: str) -> tuple[bytes | None, bool]:
        """Look up a key.

        Returns:
            Tuple of (data, found). An absent key and an unreachable store
            both yield (None, False).
        """
        if self._redis is None:
            return None, False

        try:
            data = await self._redis.get(cache_key)
        except Exception as e:
            logger.warning("cache_get_failed", cache_key=cache_key, error=str(e))
            return None, False

        if data is None:
            return None, False
        return data, True

    async def set_raw(self, cache_key: str, data: bytes) -> None:
        """Store raw bytes under a key with the configured TTL.

        Best-effort: a failed write is logged and swallowed.
        """
        if self._redis is None:
            return

        try:
            await self._redis.set(cache_key, data, ex=self.ttl)
            logger.debug("cache_set", cache_key=cache_key, ttl=self.ttl)
        except Exception as e:
            logger.warning("cache_set_failed", cache_key=cache_key, error=str(e))

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern in a single DEL.

        Args:
            pattern: Redis glob pattern (e.g., "*:articles:*")

        Returns:
            Number of keys deleted (0 when nothing matched or on failure)
        """
        if self._redis is None:
            return 0

        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if not keys:
                return 0
            count = await self._redis.delete(*keys)
        except Exception as e:
            logger.warning(
                "cache_pattern_delete_failed", pattern=pattern, error=str(e)
            )
            return 0

        logger.info("cache_pattern_deleted", pattern=pattern, count=count)
        return count

    async def is_connected(self) -> bool:
        """Probe Redis with a round trip. Never cached."""
        if self._redis is None:
            return False

        try:
            return bool(await self._redis.ping())
        except Exception as e:
            logger.debug("cache_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Release the connection. Later calls are no-ops."""
        if self._redis is None:
            return

        redis, self._redis = self._redis, None
        try:
            await redis.aclose()
        except Exception as e:
            logger.warning("redis_close_failed", error=str(e))
        else:
            logger.info("redis_closed")
