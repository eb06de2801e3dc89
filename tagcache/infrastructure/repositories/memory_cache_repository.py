"""
In-Process Cache Backend

Dictionary-backed implementation of the backend contract for a single
process. Expiry is enforced lazily: an expired entry is dropped the next
time it is read, scanned or deleted.
"""

import asyncio
import logging
import time
from typing import AsyncIterator, Callable, Dict, Optional, Tuple

from ...constants import MEMORY_BACKEND
from ...domain.cache.repository_interfaces import CacheBackend, Mutator
from ...domain.cache.value_objects import BackendHealth

logger = logging.getLogger(__name__)


class InMemoryCacheBackend(CacheBackend):
    """Process-local backend. Every entry lives in one dict guarded by a lock."""

    name = MEMORY_BACKEND

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def store(self, key: str, value: bytes, expire: int = 0) -> bool:
        async with self._lock:
            self._entries[key] = (value, self._expires_at(expire))
        return True

    async def fetch(self, key: str) -> Optional[bytes]:
        async with self._lock:
            return self._get_live(key)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if self._get_live(key) is None:
                return False
            del self._entries[key]
            return True

    async def flush(self) -> bool:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(
            "In-memory cache flushed", extra={"backend": self.name, "count": count}
        )
        return True

    async def scan(self, prefix: str) -> AsyncIterator[str]:
        async with self._lock:
            keys = [
                key
                for key in list(self._entries)
                if key.startswith(prefix) and self._get_live(key) is not None
            ]
        for key in keys:
            yield key

    async def update(self, key: str, mutator: Mutator, expire: int = 0) -> bool:
        """Atomic read-modify-write: the mutator runs while the lock is held."""
        async with self._lock:
            updated = mutator(self._get_live(key))
            if updated is not None:
                self._entries[key] = (updated, self._expires_at(expire))
        return True

    async def health_check(self) -> BackendHealth:
        async with self._lock:
            entries = len(self._entries)
        return BackendHealth(
            status="healthy", backend=self.name, details={"entries": entries}
        )

    def _expires_at(self, expire: int) -> Optional[float]:
        if expire and expire > 0:
            return self._clock() + expire
        return None

    def _get_live(self, key: str) -> Optional[bytes]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def __len__(self) -> int:
        return len(self._entries)
