"""
Cache Repository Interfaces

Abstract backend contract consumed by the tag index and the cache facade.
Backends know nothing about domains or tags: they store raw bytes under
raw string keys.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Callable, Optional

from .value_objects import BackendHealth

Mutator = Callable[[Optional[bytes]], Optional[bytes]]


class CacheBackend(ABC):
    """
    Abstract key-value backend.

    Implementations must make store, fetch and delete atomic per key.
    No cross-key transaction is expected.
    """

    name: str = "abstract"

    async def initialize(self) -> None:
        """Acquire backend resources. Default: nothing to do."""

    async def close(self) -> None:
        """Release backend resources. Default: nothing to do."""

    @abstractmethod
    async def store(self, key: str, value: bytes, expire: int = 0) -> bool:
        """Store bytes under key. expire is in seconds, 0 means no expiry."""
        pass

    @abstractmethod
    async def fetch(self, key: str) -> Optional[bytes]:
        """Fetch bytes stored under key, None on miss."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key. Returns False if nothing was deleted."""
        pass

    @abstractmethod
    async def flush(self) -> bool:
        """Remove every entry held by the backend, whatever its domain."""
        pass

    @abstractmethod
    def scan(self, prefix: str) -> AsyncIterator[str]:
        """Iterate over the raw keys starting with prefix."""
        pass

    async def update(self, key: str, mutator: Mutator, expire: int = 0) -> bool:
        """
        Read-modify-write of a single key.

        ``mutator`` receives the current bytes (or None) and returns the new
        bytes, or None to leave the entry untouched. The default is a plain
        fetch then store; callers needing isolation must serialize access
        themselves or use a backend that overrides this with compare-and-swap.
        """
        current = await self.fetch(key)
        updated = mutator(current)
        if updated is None:
            return True
        return await self.store(key, updated, expire)

    @abstractmethod
    async def health_check(self) -> BackendHealth:
        """Probe the backend."""
        pass

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
