"""
Redis Infrastructure Exceptions

Redis-specific refinements of the cache backend exceptions.
"""

from typing import Optional

from ...domain.cache.exceptions import (
    CacheBackendException,
    CacheConfigurationException,
)


class RedisException(CacheBackendException):
    """Base exception for Redis-related errors.

    Wraps redis-py errors and keeps the original one as __cause__.
    """

    def __init__(
        self,
        message: str = "Redis operation failed",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        error_code: str = "REDIS_ERROR",
    ):
        super().__init__(
            message=message,
            operation=operation,
            key=key,
            backend="redis",
            original_error=original_error,
            error_code=error_code,
        )


class RedisConnectionException(RedisException):
    """Raised when Redis connection fails or is lost."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        host: Optional[str] = None,
        port: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            original_error=original_error,
            error_code="REDIS_CONNECTION_ERROR",
        )
        if host:
            self.details["host"] = host
        if port:
            self.details["port"] = port


class RedisOperationTimeoutException(RedisException):
    """Raised when Redis operation times out."""

    def __init__(
        self,
        operation: str,
        timeout_seconds: float,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=f"Redis operation '{operation}' timed out after {timeout_seconds}s",
            operation=operation,
            key=key,
            original_error=original_error,
            error_code="REDIS_TIMEOUT_ERROR",
        )
        self.details["timeout_seconds"] = timeout_seconds


class RedisConfigurationException(CacheConfigurationException):
    """Raised when Redis configuration is invalid."""
