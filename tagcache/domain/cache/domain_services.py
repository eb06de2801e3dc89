"""
Cache Domain Services

Tag index maintenance on top of a cache backend.
The member list of each tag is stored in the same backend as the cached
values, under the tag id.
"""

import asyncio
import logging
import weakref
from typing import Any, List, Optional

from opentelemetry import trace

from ...core.serialization import Serializer
from .entities import TagRecord
from .exceptions import CacheException
from .repository_interfaces import CacheBackend
from .value_objects import TagId, derive_tag_id

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class TagIndex:
    """
    Domain service maintaining tag membership.

    Two listing modes exist on purpose. ``list_members`` is for reads and
    returns value members only. ``list_members_for_delete`` appends the tag
    id itself so a cascade delete removes the record together with its
    members.
    """

    def __init__(self, domain: str, backend: CacheBackend, serializer: Serializer):
        self.domain = domain
        self.backend = backend
        self.serializer = serializer
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def tag_id(self, tag: str) -> TagId:
        return derive_tag_id(self.domain, tag)

    async def list_members(self, tag: str) -> List[str]:
        """Members of tag for reading. Empty list when the tag is unknown."""
        record = await self._load(tag)
        return record.to_value()

    async def list_members_for_delete(self, tag: str) -> List[str]:
        """Members of tag followed by the tag id as a trailing synthetic member."""
        members = await self.list_members(tag)
        members.append(self.tag_id(tag).value)
        return members

    async def add_member(self, tag: str, key: str) -> bool:
        """
        Register key under tag.

        Idempotent: keys deriving the same key id as an existing member are not
        appended, the first spelling stays. The record is written back
        either way. Writers on the same tag are serialized by a
        per-tag lock, then the backend's ``update`` applies the change.

        Returns:
            True if the tag record was written
        """
        tag_id = self.tag_id(tag)

        with tracer.start_as_current_span("tag_index.add_member") as span:
            span.set_attribute("cache.tag", tag)
            span.set_attribute("cache.key", key)

            def mutate(current: Optional[bytes]) -> bytes:
                record = self._record(tag, self._decode(tag, current))
                added = record.add_member(key)
                span.set_attribute("cache.tag_member_added", added)
                span.set_attribute("cache.tag_size", len(record))
                return self.serializer.dumps(record.to_value())

            async with self._lock_for(tag_id.value):
                result = await self.backend.update(tag_id.value, mutate)

            if not result:
                logger.warning(
                    f"Tag record write rejected for {tag_id}",
                    extra={"tag": tag, "key": key, "domain": self.domain},
                )
            return result

    async def clear(self, tag: str) -> bool:
        """Delete the tag record. Members are left untouched."""
        return await self.backend.delete(self.tag_id(tag).value)

    async def _load(self, tag: str) -> TagRecord:
        raw = await self.backend.fetch(self.tag_id(tag).value)
        return self._record(tag, self._decode(tag, raw))

    def _record(self, tag: str, value: Any) -> TagRecord:
        return TagRecord.from_value(tag, value, domain=self.domain)

    def _decode(self, tag: str, raw: Optional[bytes]) -> Any:
        if raw is None:
            return None
        try:
            value = self.serializer.loads(raw)
            self._record(tag, value)
            return value
        except (CacheException, ValueError) as e:
            logger.warning(
                f"Discarding unreadable tag record for {tag}: {e}",
                extra={"tag": tag, "domain": self.domain},
            )
            return None

    def _lock_for(self, tag_id: str) -> asyncio.Lock:
        lock = self._locks.get(tag_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tag_id] = lock
        return lock
