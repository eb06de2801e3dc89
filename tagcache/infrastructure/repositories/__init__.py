"""
Cache Backend Implementations

In-process and Redis backends plus the selector registry.
"""

from .memory_cache_repository import InMemoryCacheBackend
from .redis_cache_repository import RedisCacheBackend
from .registry import (
    BACKEND_REGISTRY,
    available_backends,
    create_backend,
    register_backend,
)

__all__ = [
    "InMemoryCacheBackend",
    "RedisCacheBackend",
    "BACKEND_REGISTRY",
    "available_backends",
    "create_backend",
    "register_backend",
]
