"""
Redis Infrastructure Module

This module provides:
- RedisConnectionFactory: Connection pool management
- Redis exception hierarchy wrapping redis-py errors
"""

from .connection_factory import RedisConnectionFactory
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisOperationTimeoutException,
    RedisConfigurationException,
)

__all__ = [
    "RedisConnectionFactory",
    "RedisException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisConfigurationException",
]
