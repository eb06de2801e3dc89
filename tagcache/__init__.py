"""
tagcache

Namespaced, tag-aware async cache facade over interchangeable key-value
backends (in-process memory or Redis).
"""

from .constants import APP_VERSION
from .domain.cache.value_objects import StoreResult, derive_key_id, derive_tag_id
from .infrastructure.repositories.registry import create_backend, register_backend
from .services.cache.tagged_cache import TaggedCache, create_cache

__version__ = APP_VERSION

__all__ = [
    "TaggedCache",
    "create_cache",
    "StoreResult",
    "create_backend",
    "register_backend",
    "derive_key_id",
    "derive_tag_id",
]
