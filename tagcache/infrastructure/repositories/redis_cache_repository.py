"""
Redis Cache Backend

Redis implementation of the backend contract using redis.asyncio.
redis-py errors are translated into the RedisException hierarchy;
the cache facade turns those into boolean results.
"""

import logging
import re
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
    WatchError,
)

from opentelemetry import trace

from ...constants import REDIS_BACKEND
from ...core.config import get_settings
from ...domain.cache.exceptions import TagUpdateConflictException
from ...domain.cache.repository_interfaces import CacheBackend, Mutator
from ...domain.cache.value_objects import BackendHealth
from ..redis.connection_factory import RedisConnectionFactory
from ..redis.exceptions import (
    RedisConnectionException,
    RedisException,
    RedisOperationTimeoutException,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(value: str) -> str:
    """Escape Redis MATCH glob metacharacters."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class RedisCacheBackend(CacheBackend):
    """
    Backend storing raw bytes in Redis.

    ``update`` is an optimistic transaction (WATCH/MULTI/EXEC) retried on
    conflict, so concurrent tag record writers on any process never lose
    members.
    """

    name = REDIS_BACKEND

    def __init__(
        self,
        connection_factory: Optional[RedisConnectionFactory] = None,
        scan_count: Optional[int] = None,
        max_update_retries: Optional[int] = None,
        **factory_options: Any,
    ):
        settings = get_settings()
        self.connection_factory = connection_factory or RedisConnectionFactory(
            **factory_options
        )
        self.scan_count = scan_count or settings.REDIS_SCAN_COUNT
        self.max_update_retries = (
            max_update_retries or settings.TAG_UPDATE_MAX_RETRIES
        )

    async def initialize(self) -> None:
        await self.connection_factory.initialize()

    async def close(self) -> None:
        await self.connection_factory.close()

    async def store(self, key: str, value: bytes, expire: int = 0) -> bool:
        async def _set(client: Redis):
            if expire and expire > 0:
                return await client.set(key, value, ex=expire)
            return await client.set(key, value)

        return bool(await self._execute("set", key, _set))

    async def fetch(self, key: str) -> Optional[bytes]:
        return await self._execute("get", key, lambda client: client.get(key))

    async def delete(self, key: str) -> bool:
        deleted = await self._execute("delete", key, lambda client: client.delete(key))
        return bool(deleted)

    async def flush(self) -> bool:
        result = await self._execute("flushdb", None, lambda client: client.flushdb())
        logger.warning(
            "Redis database flushed", extra={"backend": self.name}
        )
        return bool(result)

    async def scan(self, prefix: str) -> AsyncIterator[str]:
        pattern = f"{escape_glob(prefix)}*"
        try:
            client = await self.connection_factory.get_client()
            async for key in client.scan_iter(match=pattern, count=self.scan_count):
                yield key.decode("utf-8") if isinstance(key, bytes) else key
        except RedisError as e:
            raise self._translate("scan", pattern, e) from e

    async def update(self, key: str, mutator: Mutator, expire: int = 0) -> bool:
        """Compare-and-swap a single key, retrying when another writer wins."""
        with tracer.start_as_current_span("redis.update") as span:
            span.set_attribute("redis.key", key)
            try:
                client = await self.connection_factory.get_client()
                async with client.pipeline(transaction=True) as pipe:
                    for attempt in range(1, self.max_update_retries + 1):
                        try:
                            await pipe.watch(key)
                            current = await pipe.get(key)
                            updated = mutator(current)
                            if updated is None:
                                await pipe.unwatch()
                                return True

                            pipe.multi()
                            if expire and expire > 0:
                                pipe.set(key, updated, ex=expire)
                            else:
                                pipe.set(key, updated)
                            await pipe.execute()

                            span.set_attribute("redis.update_attempts", attempt)
                            return True
                        except WatchError:
                            logger.debug(
                                f"Concurrent write on {key}, retrying",
                                extra={"key": key, "attempt": attempt},
                            )
                            continue
            except RedisError as e:
                raise self._translate("update", key, e) from e

            span.set_status(trace.Status(trace.StatusCode.ERROR, "conflict"))
            raise TagUpdateConflictException(
                key, self.max_update_retries, backend=self.name
            )

    async def health_check(self) -> BackendHealth:
        status = await self.connection_factory.health_check()
        return BackendHealth(
            status=status.get("status", "unhealthy"),
            backend=self.name,
            response_time_ms=status.get("response_time_ms", 0.0),
            details={"max_connections": status.get("max_connections")},
            error=status.get("error"),
        )

    async def _execute(
        self,
        operation: str,
        key: Optional[str],
        func: Callable[[Redis], Awaitable[Any]],
    ) -> Any:
        start_time = time.time()
        try:
            client = await self.connection_factory.get_client()
            return await func(client)
        except RedisException:
            raise
        except RedisError as e:
            raise self._translate(operation, key, e) from e
        finally:
            logger.debug(
                f"Redis {operation} completed",
                extra={
                    "operation": operation,
                    "key": key,
                    "execution_time_ms": round((time.time() - start_time) * 1000, 2),
                },
            )

    def _translate(
        self, operation: str, key: Optional[str], error: RedisError
    ) -> RedisException:
        if isinstance(error, RedisTimeoutError):
            return RedisOperationTimeoutException(
                operation=operation,
                timeout_seconds=self.connection_factory.operation_timeout,
                key=key,
                original_error=error,
            )
        if isinstance(error, RedisConnectionError):
            return RedisConnectionException(
                message=f"Redis connection lost during {operation}",
                original_error=error,
            )
        return RedisException(
            message=f"Redis {operation} failed: {error}",
            operation=operation,
            key=key,
            original_error=error,
        )
