"""
Value Serialization

Converts cached values to and from the bytes handed to a backend.
"""

import json
import pickle
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from ..constants import JSON_SERIALIZER, PICKLE_SERIALIZER
from ..domain.cache.exceptions import (
    CacheConfigurationException,
    CacheSerializationException,
)


class Serializer(ABC):
    """Bytes codec for cached values."""

    name: str = "abstract"

    @abstractmethod
    def dumps(self, value: Any) -> bytes:
        pass

    @abstractmethod
    def loads(self, data: bytes) -> Any:
        pass


class JsonSerializer(Serializer):
    """
    JSON codec.

    Round-trips dicts, lists, strings, numbers, booleans and None. Any other
    type is rejected with CacheSerializationException; tuples come back as
    lists. Use PickleSerializer for arbitrary objects.
    """

    name = JSON_SERIALIZER

    def dumps(self, value: Any) -> bytes:
        try:
            return json.dumps(value).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CacheSerializationException(
                f"Failed to serialize value of type {type(value).__name__}",
                serializer=self.name,
                original_error=e,
            ) from e

    def loads(self, data: bytes) -> Any:
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return json.loads(data)
        except (TypeError, ValueError) as e:
            raise CacheSerializationException(
                "Failed to deserialize cached value",
                serializer=self.name,
                original_error=e,
            ) from e


class PickleSerializer(Serializer):
    """Pickle codec. Exact round trip for any picklable object; trusted caches only."""

    name = PICKLE_SERIALIZER

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def dumps(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise CacheSerializationException(
                f"Failed to pickle value of type {type(value).__name__}",
                serializer=self.name,
                original_error=e,
            ) from e

    def loads(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, TypeError, ValueError) as e:
            raise CacheSerializationException(
                "Failed to unpickle cached value",
                serializer=self.name,
                original_error=e,
            ) from e


SERIALIZERS: Dict[str, Callable[[], Serializer]] = {
    JSON_SERIALIZER: JsonSerializer,
    PICKLE_SERIALIZER: PickleSerializer,
}


def get_serializer(name: str) -> Serializer:
    """Create a serializer from its configured name."""
    try:
        factory = SERIALIZERS[name.lower()]
    except KeyError:
        raise CacheConfigurationException(
            f"Unknown serializer: {name}. Available: {sorted(SERIALIZERS)}",
            config_key="CACHE_SERIALIZER",
            config_value=name,
        )
    return factory()
