"""Redis fast store adapter for session storage."""

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ...core.exceptions import CacheConnectionError, CacheError, CacheTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DELETE_BATCH_SIZE = 500


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisFastStore:
    """Redis key/value operations used by the session manager.

    Handles ONLY Redis I/O: TTL'd strings, per-user hashes and pattern
    enumeration. Every call is bounded by ``timeout_seconds`` and Redis
    failures are raised as ``CacheError`` subclasses.
    """

    def __init__(self, redis_client: Redis, timeout_seconds: float = 2.0):
        """Initialize Redis fast store.

        Args:
            redis_client: Redis asyncio client instance
            timeout_seconds: Upper bound for a single store call
        """
        if redis_client is None:
            raise ValueError("Redis client is required")
        self.redis = redis_client
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        timeout_seconds: float = 2.0,
        max_connections: int = 10
    ) -> "RedisFastStore":
        """Create a store backed by a new connection pool."""
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            max_connections=max_connections,
        )
        return cls(client, timeout_seconds=timeout_seconds)

    async def _call(self, operation: str, key: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, RedisTimeoutError) as e:
            logger.error(f"Redis {operation} timed out for key {key}")
            raise CacheTimeoutError(
                f"Redis {operation} timed out",
                details={"key": key, "timeout_seconds": self.timeout_seconds},
            ) from e
        except RedisConnectionError as e:
            logger.error(f"Redis connection failed during {operation}: {e}")
            raise CacheConnectionError(
                f"Redis connection failed during {operation}",
                details={"key": key, "error": str(e)},
            ) from e
        except RedisError as e:
            logger.error(f"Redis {operation} failed for key {key}: {e}")
            raise CacheError(
                f"Redis {operation} failed",
                details={"key": key, "error": str(e)},
            ) from e

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """Set a value, with expiration when ``ttl_seconds`` is given."""
        if ttl_seconds:
            await self._call("setex", key, self.redis.setex(key, ttl_seconds, value))
        else:
            await self._call("set", key, self.redis.set(key, value))

    async def get(self, key: str) -> Optional[str]:
        return _decode(await self._call("get", key, self.redis.get(key)))

    async def delete(self, key: str) -> int:
        return await self._call("delete", key, self.redis.delete(key))

    async def exists(self, key: str) -> bool:
        return await self._call("exists", key, self.redis.exists(key)) == 1

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        return bool(await self._call("expire", key, self.redis.expire(key, ttl_seconds)))

    async def ttl(self, key: str) -> int:
        return await self._call("ttl", key, self.redis.ttl(key))

    async def hset(self, key: str, field: str, value: str) -> int:
        return await self._call("hset", key, self.redis.hset(key, field, value))

    async def hget(self, key: str, field: str) -> Optional[str]:
        return _decode(await self._call("hget", key, self.redis.hget(key, field)))

    async def hgetall(self, key: str) -> Dict[str, str]:
        result = await self._call("hgetall", key, self.redis.hgetall(key))
        return {_decode(k): _decode(v) for k, v in (result or {}).items()}

    async def hdel(self, key: str, field: str) -> int:
        return await self._call("hdel", key, self.redis.hdel(key, field))

    async def get_keys_by_pattern(self, pattern: str) -> List[str]:
        """Enumerate keys matching a glob pattern using SCAN."""

        async def _scan() -> List[str]:
            return [_decode(key) async for key in self.redis.scan_iter(match=pattern)]

        return await self._call("scan", pattern, _scan())

    async def delete_by_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern.

        Returns:
            Number of keys deleted
        """
        keys = await self.get_keys_by_pattern(pattern)
        if not keys:
            return 0

        deleted = 0
        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[i:i + DELETE_BATCH_SIZE]
            deleted += await self._call("delete", pattern, self.redis.delete(*batch))

        logger.debug(f"Deleted {deleted} keys matching {pattern}")
        return deleted

    async def ping(self) -> bool:
        """Check Redis availability."""
        try:
            return bool(await self._call("ping", "-", self.redis.ping()))
        except CacheError:
            return False

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self.redis.aclose()
        logger.info("Disconnected from Redis")
