"""
Backend Registry

Maps a backend selector string to a factory. Backends are looked up in
this table only; unknown selectors fail at construction time.
"""

import logging
from typing import Any, Callable, Dict, List

from ...constants import MEMORY_BACKEND, REDIS_BACKEND
from ...domain.cache.exceptions import CacheConfigurationException
from ...domain.cache.repository_interfaces import CacheBackend
from .memory_cache_repository import InMemoryCacheBackend
from .redis_cache_repository import RedisCacheBackend

logger = logging.getLogger(__name__)

BackendFactory = Callable[..., CacheBackend]

BACKEND_REGISTRY: Dict[str, BackendFactory] = {
    MEMORY_BACKEND: InMemoryCacheBackend,
    REDIS_BACKEND: RedisCacheBackend,
}


def register_backend(name: str, factory: BackendFactory, replace: bool = False) -> None:
    """Register an additional backend under a selector name."""
    selector = name.strip().lower()
    if not selector:
        raise ValueError("Backend selector cannot be empty")
    if selector in BACKEND_REGISTRY and not replace:
        raise ValueError(f"Backend already registered: {selector}")

    BACKEND_REGISTRY[selector] = factory
    logger.info(f"Registered cache backend {selector}", extra={"backend": selector})


def available_backends() -> List[str]:
    return sorted(BACKEND_REGISTRY)


def create_backend(selector: str, **options: Any) -> CacheBackend:
    """
    Create a backend from its selector.

    Args:
        selector: Registered backend name (case-insensitive)
        **options: Keyword arguments for the backend factory

    Raises:
        CacheConfigurationException: If selector is unknown
    """
    try:
        factory = BACKEND_REGISTRY[selector.strip().lower()]
    except KeyError:
        raise CacheConfigurationException(
            f"Unknown cache backend: {selector}. Available: {available_backends()}",
            config_key="CACHE_BACKEND",
            config_value=selector,
        )
    return factory(**options)
