"""
Main pytest configuration for tagcache tests.

Fixtures and markers shared by unit and integration tests.
"""

import os

import pytest
import pytest_asyncio

# Set test environment variables before importing library modules
os.environ["ENVIRONMENT"] = "test"
os.environ["CACHE_DOMAIN"] = "testapp"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "DEBUG"

from tagcache.core.serialization import JsonSerializer, PickleSerializer
from tagcache.infrastructure.repositories.memory_cache_repository import (
    InMemoryCacheBackend,
)
from tagcache.services.cache.tagged_cache import TaggedCache


class FakeClock:
    """Manually advanced monotonic clock for expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def memory_backend(clock):
    """In-memory backend driven by the fake clock."""
    return InMemoryCacheBackend(clock=clock)


@pytest_asyncio.fixture
async def cache(memory_backend):
    """TaggedCache for the myapp domain on a shared in-memory backend."""
    async with TaggedCache("myapp", memory_backend, JsonSerializer()) as tagged_cache:
        yield tagged_cache


@pytest_asyncio.fixture
async def pickle_cache(memory_backend):
    """TaggedCache using the pickle serializer."""
    async with TaggedCache("myapp", memory_backend, PickleSerializer()) as tagged_cache:
        yield tagged_cache


@pytest.fixture
def heroes():
    """Sample tagged values."""
    return {
        "batman": {
            "name": "Bruce Wayne",
            "enemies": ["Joker", "Two Face", "Bane", "Hush", "Mr. Freeze"],
        },
        "spiderman": {
            "name": "Peter Parker",
            "enemies": ["Carnage", "Hobgoblin", "Kingpin", "Venom", "Goblin"],
        },
    }


# Test markers and configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "concurrency: marks concurrent access tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "redis" in item.nodeid:
            item.add_marker(pytest.mark.redis)
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
