# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis client for short-lived security state.

Holds OTP codes, password reset codes and the sliding counters behind the
OTP, reset and login rate limits. Every value carries a TTL, so Redis is
never the system of record.

Example:
    from collegehub.infrastructure.cache import init_redis, get_redis

    await init_redis(settings)

    redis = get_redis()
    sent = await redis.incr("otp:hour:user@example.com", expire_seconds=3600)
"""

import json
from typing import TYPE_CHECKING, Any, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

if TYPE_CHECKING:
    from collegehub.core.config.settings import Settings

_redis_client: Optional["RedisClient"] = None


class RedisError(Exception):
    """Exception raised for Redis operation failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying Redis error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class RedisClient:
    """Async Redis wrapper with JSON values and namespaced keys.

    All keys are stored under ``{KEY_PREFIX}:`` so the application can share
    a Redis database with other services.
    """

    KEY_PREFIX = "collegehub"

    def __init__(self, settings: "Settings") -> None:
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Create the connection pool and ping the server.

        Raises:
            RedisError: If connection fails.
        """
        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis.url,
                max_connections=self._settings.redis.max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)
            await self._redis.ping()
        except BaseRedisError as e:
            raise RedisError("Failed to connect to Redis", e) from e

    async def close(self) -> None:
        """Close the client and its pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def _ensure_connected(self) -> Redis:
        if self._redis is None:
            raise RedisError("Redis client not connected. Call connect() first.")
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}:{key}"

    def _serialize(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)

    def _deserialize(self, value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def set(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        """Set a value, JSON encoding anything that is not a string.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            await redis.set(self._key(key), self._serialize(value), ex=expire_seconds)
        except BaseRedisError as e:
            raise RedisError(f"Failed to set key: {key}", e) from e

    async def get(self, key: str) -> Any:
        """Get a value, or None when the key is missing.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            value = await redis.get(self._key(key))
            return self._deserialize(value)
        except BaseRedisError as e:
            raise RedisError(f"Failed to get key: {key}", e) from e

    async def delete(self, *keys: str) -> int:
        """Delete keys.

        Returns:
            Number of keys removed.

        Raises:
            RedisError: If the operation fails.
        """
        if not keys:
            return 0
        redis = self._ensure_connected()
        try:
            return await redis.delete(*(self._key(k) for k in keys))
        except BaseRedisError as e:
            raise RedisError(f"Failed to delete keys: {', '.join(keys)}", e) from e

    async def exists(self, key: str) -> bool:
        """Check whether a key exists.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.exists(self._key(key)) > 0
        except BaseRedisError as e:
            raise RedisError(f"Failed to check key existence: {key}", e) from e

    async def ttl(self, key: str) -> int:
        """Get the remaining time-to-live of a key.

        Returns:
            TTL in seconds, -1 if the key has no expiry, -2 if it is missing.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.ttl(self._key(key))
        except BaseRedisError as e:
            raise RedisError(f"Failed to get TTL for key: {key}", e) from e

    async def incr(self, key: str, expire_seconds: Optional[int] = None) -> int:
        """Increment a counter.

        The expiry is only applied when the counter is created, so the
        window is fixed from the first increment.

        Args:
            key: Counter key.
            expire_seconds: Window length for a new counter.

        Returns:
            The counter value after the increment.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        full_key = self._key(key)
        try:
            async with redis.pipeline(transaction=True) as pipe:
                pipe.incr(full_key)
                if expire_seconds:
                    pipe.expire(full_key, expire_seconds, nx=True)
                results = await pipe.execute()
            return int(results[0])
        except BaseRedisError as e:
            raise RedisError(f"Failed to increment key: {key}", e) from e

    async def health_check(self) -> bool:
        """Ping the server.

        Returns:
            True if Redis answered, False otherwise.
        """
        if self._redis is None:
            return False
        try:
            return await self._redis.ping()
        except BaseRedisError:
            return False


async def init_redis(settings: "Settings") -> RedisClient:
    """Create and connect the global client.

    Raises:
        RedisError: If connection fails.
    """
    global _redis_client

    client = RedisClient(settings)
    await client.connect()
    _redis_client = client
    return client


def get_redis() -> RedisClient:
    """Get the global client.

    Raises:
        RedisError: If Redis has not been initialized.
    """
    if _redis_client is None:
        raise RedisError("Redis not initialized. Call init_redis() first.")
    return _redis_client


async def close_redis() -> None:
    """Close the global client."""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None
