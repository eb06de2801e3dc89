"""
Cache Value Objects

Immutable value objects for the cache domain.
Derives backend-facing identifiers from a (domain, key) or (domain, tag) pair.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ...constants import KEY_SEPARATOR, TAG_SUFFIX


@dataclass(frozen=True)
class KeyId:
    """
    Backend key for a logical cache key.

    Always lowercase, so two keys differing only in case share one entry.
    """

    value: str

    @classmethod
    def derive(cls, domain: str, key: str) -> "KeyId":
        """Create key id as lowercase(domain + "_" + key)."""
        return cls(f"{domain}{KEY_SEPARATOR}{key}".lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TagId:
    """
    Backend key under which a tag's member list is stored.

    Lives in the same key space as regular entries and carries the
    reserved "#tag" suffix.
    """

    value: str

    @classmethod
    def derive(cls, domain: str, tag: str) -> "TagId":
        """Create tag id from the key id of the tag name."""
        return cls(f"{KeyId.derive(domain, tag).value}{TAG_SUFFIX}")

    @staticmethod
    def is_tag_id(raw: str) -> bool:
        """Check whether a raw backend key is a tag record key."""
        return raw.endswith(TAG_SUFFIX)

    def __str__(self) -> str:
        return self.value


def derive_key_id(domain: str, key: str) -> KeyId:
    """Derive the backend key id for ``key`` inside ``domain``."""
    return KeyId.derive(domain, key)


def derive_tag_id(domain: str, tag: str) -> TagId:
    """Derive the backend tag id for ``tag`` inside ``domain``."""
    return TagId.derive(domain, tag)


def domain_prefix(domain: str) -> str:
    """Prefix shared by every key id of a domain."""
    return f"{domain}{KEY_SEPARATOR}".lower()


@dataclass(frozen=True)
class StoreResult:
    """
    Outcome of a tagged store.

    ``stored`` is the backend result for the value itself, ``indexed`` tells
    whether the key also made it into the tag record. A stored but unindexed
    value exists yet is unreachable through the tag.
    """

    stored: bool
    indexed: bool

    @property
    def partial(self) -> bool:
        """Value was written but the tag index update failed."""
        return self.stored and not self.indexed

    def __bool__(self) -> bool:
        return self.stored


class BackendHealth(BaseModel):
    """Health report returned by a cache backend."""

    status: str = Field(..., description="healthy or unhealthy")
    backend: str = Field(..., description="Backend selector name")
    response_time_ms: float = Field(
        0.0, ge=0, description="Round trip time of the probe"
    )
    details: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = Field(None, description="Error message if probe failed")

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"
