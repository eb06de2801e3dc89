"""
Tagged Cache Service

Public cache facade. Namespaces every key with the facade's domain,
keeps tag membership through the TagIndex and delegates storage to a
pluggable backend.

No operation raises on backend or serialization failure: failures are
logged, recorded on the current span and reported as False, the
caller's default, or a per-key False.
"""

import asyncio
from typing import Any, Dict, Iterable, Optional, Union

from opentelemetry import trace

from ...core.config import Settings, get_settings
from ...core.logging import get_logger
from ...core.serialization import JsonSerializer, Serializer, get_serializer
from ...domain.cache.domain_services import TagIndex
from ...domain.cache.repository_interfaces import CacheBackend
from ...domain.cache.value_objects import (
    KeyId,
    StoreResult,
    TagId,
    derive_key_id,
    domain_prefix,
)
from ...infrastructure.repositories.registry import create_backend

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)


class TaggedCache:
    """
    Namespaced, tag-aware cache.

    Keys are stored as ``lowercase(domain + "_" + key)``; tag member lists
    are stored next to them under ``lowercase(domain + "_" + tag) + "#tag"``.

    Known limits:
        - ``fetch`` cannot tell a stored falsy value (0, "", [], False)
          from a miss; use ``contains`` for presence.
        - Keys ending in ``#tag`` (any case) are reserved for tag records;
          ``store``, ``store_by_tag`` and ``delete`` refuse them with False.
        - ``delete_all`` flushes the whole backend, including other domains.
          ``delete_domain`` removes only keys carrying this domain's prefix.
    """

    def __init__(
        self,
        domain: str,
        backend: CacheBackend,
        serializer: Optional[Serializer] = None,
        default_expire: int = 0,
    ):
        if not domain or not str(domain).strip():
            raise ValueError("Cache domain cannot be empty")
        if default_expire < 0:
            raise ValueError("Default expire cannot be negative")

        self._domain = str(domain)
        self.backend = backend
        self.serializer = serializer or JsonSerializer()
        self.default_expire = default_expire
        self.tag_index = TagIndex(self._domain, backend, self.serializer)

    @property
    def domain(self) -> str:
        return self._domain

    def key_id(self, key: str) -> KeyId:
        return derive_key_id(self._domain, key)

    async def initialize(self) -> None:
        await self.backend.initialize()
        logger.info(
            "Tagged cache initialized", domain=self._domain, backend=self.backend.name
        )

    async def close(self) -> None:
        await self.backend.close()

    # Store operations

    async def store(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """
        Store a value under key.

        Args:
            key: Logical key within the domain
            value: Any value the serializer accepts
            expire: Lifetime in seconds, 0 for no expiry, None for the default

        Returns:
            Backend success flag
        """
        with tracer.start_as_current_span("tagged_cache.store") as span:
            span.set_attribute("cache.domain", self._domain)
            span.set_attribute("cache.key", str(key))
            return await self._store_key(key, value, expire)

    async def store_by_tag(
        self, key: str, value: Any, tag: str, expire: Optional[int] = None
    ) -> StoreResult:
        """
        Store a value and register its key under tag.

        The tag is only touched when the value store succeeded. There is no
        rollback: if the index update fails the value stays in the cache,
        unreachable through the tag, and the result has ``partial`` set.
        """
        with tracer.start_as_current_span("tagged_cache.store_by_tag") as span:
            span.set_attribute("cache.domain", self._domain)
            span.set_attribute("cache.key", str(key))
            span.set_attribute("cache.tag", str(tag))

            if not await self._store_key(key, value, expire):
                return StoreResult(stored=False, indexed=False)

            try:
                indexed = await self.tag_index.add_member(tag, str(key))
            except Exception as e:
                indexed = False
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Tag index update failed",
                    domain=self._domain,
                    key=key,
                    tag=tag,
                    error=str(e),
                )

            if not indexed:
                logger.warning(
                    "Value stored but not reachable through tag",
                    domain=self._domain,
                    key=key,
                    tag=tag,
                )
            span.set_attribute("cache.indexed", indexed)
            return StoreResult(stored=True, indexed=indexed)

    # Fetch operations

    async def fetch(self, key: str, default: Any = False) -> Any:
        """Fetch the value stored under key, or default on miss or falsy value."""
        with tracer.start_as_current_span("tagged_cache.fetch") as span:
            span.set_attribute("cache.domain", self._domain)
            span.set_attribute("cache.key", str(key))
            return await self._fetch_key(key, default)

    async def fetch_by_tag(self, tag: str, default: Any = False) -> Dict[str, Any]:
        """
        Fetch every member of tag.

        Returns:
            Mapping of the caller's original keys to their values (or
            default for members that expired or were deleted)
        """
        with tracer.start_as_current_span("tagged_cache.fetch_by_tag") as span:
            span.set_attribute("cache.domain", self._domain)
            span.set_attribute("cache.tag", str(tag))

            try:
                members = await self.tag_index.list_members(tag)
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Failed to list tag members",
                    domain=self._domain,
                    tag=tag,
                    error=str(e),
                )
                return {}

            span.set_attribute("cache.tag_members", len(members))
            values = await asyncio.gather(
                *(self._fetch_key(member, default) for member in members)
            )
            return dict(zip(members, values))

    async def contains(self, key: str) -> bool:
        """Check whether key holds a value, falsy values included."""
        with tracer.start_as_current_span("tagged_cache.contains") as span:
            span.set_attribute("cache.domain", self._domain)
            span.set_attribute("cache.key", str(key))
            try:
                return await self.backend.fetch(self.key_id(key).value) is not None
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Cache presence check failed",
                    domain=self._domain,
                    key=key,
                    error=str(e),
                )
                return False

    # Delete operations

    async def delete(self, keys: Union[str, Iterable[str]]) -> Dict[str, bool]:
        """
        Delete one or more keys.

        A single string is treated as a one-element list.

        Returns:
            Per-key deletion result; False for keys that were absent or
            could not be deleted
        """
        if isinstance(keys, str):
            keys = [keys]

        with tracer.start_as_current_span("tagged_cache.delete") as span:
            span.set_attribute("cache.domain", self._domain)
            result: Dict[str, bool] = {}
            for key in keys:
                if key in result:
                    continue
                key_id = self.key_id(key)
                if self._is_reserved(key, key_id, "delete"):
                    result[key] = False
                    continue
                result[key] = await self._delete_raw(key, key_id.value)

            span.set_attribute("cache.deleted", sum(result.values()))
            return result

    async def delete_tag(self, tag: str) -> Dict[str, bool]:
        """
        Delete every member of tag together with the tag record.

        Returns:
            Per-key results; the tag record's entry is keyed by its tag id
        """
        with tracer.start_as_current_span("tagged_cache.delete_tag") as span:
            span.set_attribute("cache.domain", self._domain)
            span.set_attribute("cache.tag", str(tag))

            try:
                members = await self.tag_index.list_members_for_delete(tag)
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Failed to list tag members for delete",
                    domain=self._domain,
                    tag=tag,
                    error=str(e),
                )
                return {}

            *value_members, tag_id = members
            result = await self.delete(value_members)

            try:
                result[tag_id] = await self.tag_index.clear(tag)
            except Exception as e:
                result[tag_id] = False
                logger.error(
                    "Failed to delete tag record",
                    domain=self._domain,
                    tag=tag,
                    error=str(e),
                )

            logger.info(
                "Tag deleted",
                domain=self._domain,
                tag=tag,
                members=len(value_members),
                deleted=sum(result.values()),
            )
            return result

    async def delete_all(self) -> bool:
        """
        Flush the backend.

        Clears every entry of the backend, not only this domain's. Use
        ``delete_domain`` to limit the blast radius.
        """
        with tracer.start_as_current_span("tagged_cache.delete_all") as span:
            span.set_attribute("cache.domain", self._domain)
            logger.warning(
                "Flushing entire cache backend, all domains affected",
                domain=self._domain,
                backend=self.backend.name,
            )
            try:
                return bool(await self.backend.flush())
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Cache flush failed", domain=self._domain, error=str(e)
                )
                return False

    async def delete_domain(self) -> int:
        """
        Delete every key carrying this domain's prefix, tag records included.

        Prefix matching is textual: a domain named ``app`` also matches keys
        of a domain named ``app_v2``.

        Returns:
            Number of entries deleted
        """
        with tracer.start_as_current_span("tagged_cache.delete_domain") as span:
            span.set_attribute("cache.domain", self._domain)
            prefix = domain_prefix(self._domain)
            deleted = 0

            try:
                raw_keys = [raw async for raw in self.backend.scan(prefix)]
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Failed to enumerate domain keys",
                    domain=self._domain,
                    error=str(e),
                )
                return 0

            for raw_key in raw_keys:
                if await self._delete_raw(raw_key, raw_key):
                    deleted += 1

            span.set_attribute("cache.deleted", deleted)
            logger.info(
                "Domain entries deleted",
                domain=self._domain,
                scanned=len(raw_keys),
                deleted=deleted,
            )
            return deleted

    # Health

    async def health_check(self) -> Dict[str, Any]:
        """Report backend health for this facade."""
        with tracer.start_as_current_span("tagged_cache.health_check") as span:
            try:
                health = await self.backend.health_check()
                status = health.model_dump()
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Cache health check failed", domain=self._domain, error=str(e)
                )
                status = {
                    "status": "unhealthy",
                    "backend": self.backend.name,
                    "error": str(e),
                }

            status["domain"] = self._domain
            status["serializer"] = self.serializer.name
            return status

    # Internals

    async def _store_key(self, key: str, value: Any, expire: Optional[int]) -> bool:
        key_id = self.key_id(key)
        lifetime = self.default_expire if expire is None else expire
        span = trace.get_current_span()

        if self._is_reserved(key, key_id, "store"):
            span.set_attribute("cache.stored", False)
            return False

        try:
            payload = self.serializer.dumps(value)
            stored = bool(await self.backend.store(key_id.value, payload, lifetime))
        except Exception as e:
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            logger.error(
                "Cache store failed",
                domain=self._domain,
                key=key,
                key_id=key_id.value,
                error=str(e),
            )
            return False

        span.set_attribute("cache.stored", stored)
        logger.debug(
            "Cache store", domain=self._domain, key_id=key_id.value, expire=lifetime
        )
        return stored

    def _is_reserved(self, key: str, key_id: KeyId, operation: str) -> bool:
        if not TagId.is_tag_id(key_id.value):
            return False
        logger.warning(
            "Key collides with tag record namespace",
            domain=self._domain,
            key=key,
            key_id=key_id.value,
            operation=operation,
        )
        return True

    async def _fetch_key(self, key: str, default: Any) -> Any:
        key_id = self.key_id(key)
        span = trace.get_current_span()

        try:
            raw = await self.backend.fetch(key_id.value)
            value = self.serializer.loads(raw) if raw is not None else None
        except Exception as e:
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            logger.error(
                "Cache fetch failed",
                domain=self._domain,
                key=key,
                key_id=key_id.value,
                error=str(e),
            )
            return default

        span.set_attribute("cache.hit", raw is not None)
        if not value:
            return default
        return value

    async def _delete_raw(self, label: str, raw_key: str) -> bool:
        try:
            return bool(await self.backend.delete(raw_key))
        except Exception as e:
            logger.error(
                "Cache delete failed",
                domain=self._domain,
                key=label,
                key_id=raw_key,
                error=str(e),
            )
            return False

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def create_cache(
    domain: Optional[str] = None,
    backend: Union[str, CacheBackend, None] = None,
    serializer: Union[str, Serializer, None] = None,
    settings: Optional[Settings] = None,
    **backend_options: Any,
) -> TaggedCache:
    """
    Build a TaggedCache, filling unset arguments from settings.

    Args:
        domain: Cache domain, defaults to CACHE_DOMAIN
        backend: Backend instance or selector, defaults to CACHE_BACKEND
        serializer: Serializer instance or name, defaults to CACHE_SERIALIZER
        settings: Settings to read defaults from
        **backend_options: Passed to the backend factory when a selector is used
    """
    settings = settings or get_settings()

    if backend is None or isinstance(backend, str):
        backend = create_backend(backend or settings.CACHE_BACKEND, **backend_options)
    if serializer is None or isinstance(serializer, str):
        serializer = get_serializer(serializer or settings.CACHE_SERIALIZER)

    return TaggedCache(
        domain=domain or settings.CACHE_DOMAIN,
        backend=backend,
        serializer=serializer,
        default_expire=settings.CACHE_DEFAULT_EXPIRE,
    )
