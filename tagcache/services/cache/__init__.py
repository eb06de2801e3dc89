"""
Cache Service Module
"""

from .tagged_cache import TaggedCache, create_cache

__all__ = ["TaggedCache", "create_cache"]
