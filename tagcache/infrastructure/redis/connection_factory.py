"""
Redis Connection Factory

Connection pool management for the Redis cache backend.
Builds one pool per factory from a Redis URL, checks it with a ping and
hands out clients bound to it.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import (
    AuthenticationError as RedisAuthError,
    RedisError,
)

from opentelemetry import trace
from opentelemetry.instrumentation.redis import RedisInstrumentor

from ...core.config import get_settings
from .exceptions import (
    RedisConfigurationException,
    RedisConnectionException,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class RedisConnectionFactory:
    """
    Factory for creating and managing Redis connections.

    Clients are created lazily on first use. Values travel as raw bytes,
    so responses are never decoded.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        max_connections: Optional[int] = None,
        connection_timeout: Optional[float] = None,
        operation_timeout: Optional[float] = None,
        instrument: bool = True,
    ):
        settings = get_settings()
        self.redis_url = redis_url or settings.REDIS_URL
        self.max_connections = max_connections or settings.REDIS_MAX_CONNECTIONS
        self.connection_timeout = (
            connection_timeout or settings.REDIS_CONNECTION_TIMEOUT
        )
        self.operation_timeout = operation_timeout or settings.REDIS_OPERATION_TIMEOUT

        self._pool: Optional[ConnectionPool] = None
        self._initialized = False
        self._lock = asyncio.Lock()

        if instrument:
            # Initialize OpenTelemetry instrumentation
            try:
                RedisInstrumentor().instrument()
                logger.info("Redis OpenTelemetry instrumentation enabled")
            except Exception as e:
                logger.warning(
                    f"Failed to enable Redis OpenTelemetry instrumentation: {e}"
                )

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the connection pool and test it."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            parsed_url = urlparse(self.redis_url)
            if parsed_url.scheme not in ("redis", "rediss", "unix"):
                raise RedisConfigurationException(
                    message=f"Unsupported Redis URL scheme: {parsed_url.scheme}",
                    config_key="REDIS_URL",
                    config_value=self.redis_url,
                )

            try:
                pool = ConnectionPool.from_url(
                    self.redis_url,
                    max_connections=self.max_connections,
                    socket_connect_timeout=self.connection_timeout,
                    socket_timeout=self.operation_timeout,
                    retry_on_timeout=True,
                    decode_responses=False,
                )
            except (ValueError, RedisError) as e:
                raise RedisConfigurationException(
                    message=f"Invalid Redis configuration: {e}",
                    config_key="REDIS_URL",
                    config_value=self.redis_url,
                    original_error=e,
                ) from e

            await self._test_connection(pool, parsed_url.hostname, parsed_url.port)

            self._pool = pool
            self._initialized = True
            logger.info(
                "Redis connection factory initialized",
                extra={
                    "host": parsed_url.hostname,
                    "port": parsed_url.port,
                    "max_connections": self.max_connections,
                },
            )

    async def _test_connection(
        self, pool: ConnectionPool, host: Optional[str], port: Optional[int]
    ) -> None:
        """Test connection pool with a ping."""
        try:
            redis_client = Redis(connection_pool=pool)
            await redis_client.ping()
            logger.debug("Redis connection test successful")
        except RedisAuthError as e:
            await pool.disconnect()
            raise RedisConnectionException(
                message="Redis authentication failed during initialization",
                host=host,
                port=port,
                original_error=e,
            ) from e
        except (RedisError, OSError) as e:
            await pool.disconnect()
            raise RedisConnectionException(
                message="Redis connection test failed",
                host=host,
                port=port,
                original_error=e,
            ) from e

    async def get_client(self) -> Redis:
        """Get a Redis client bound to the shared pool."""
        await self.initialize()
        return Redis(connection_pool=self._pool)

    async def health_check(self) -> Dict[str, Any]:
        """Ping Redis and report latency."""
        with tracer.start_as_current_span("redis.health_check") as span:
            start_time = time.time()
            try:
                client = await self.get_client()
                await client.ping()
                response_time = (time.time() - start_time) * 1000
                span.set_attribute("redis.response_time_ms", response_time)
                return {
                    "status": "healthy",
                    "response_time_ms": round(response_time, 2),
                    "max_connections": self.max_connections,
                }
            except Exception as e:
                logger.error(f"Redis health check failed: {e}")
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                return {
                    "status": "unhealthy",
                    "response_time_ms": round((time.time() - start_time) * 1000, 2),
                    "error": str(e),
                }

    async def close(self) -> None:
        """Disconnect every pooled connection."""
        async with self._lock:
            if self._pool is not None:
                await self._pool.disconnect()
                self._pool = None
            self._initialized = False
            logger.info("Redis connection factory closed")
