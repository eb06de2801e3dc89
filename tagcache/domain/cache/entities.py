"""
Cache Domain Entities

Domain entities for the tag index.
"""

from dataclasses import dataclass, field
from typing import Any, List

from .value_objects import KeyId, derive_key_id


@dataclass
class TagRecord:
    """
    Member list of a tag.

    Ordered and duplicate free. Holds logical keys, not key ids, but two
    keys deriving the same key id inside ``domain`` count as one member:
    the first spelling is kept.
    """

    tag: str
    domain: str = ""
    members: List[str] = field(default_factory=list)

    @classmethod
    def from_value(cls, tag: str, value: Any, domain: str = "") -> "TagRecord":
        """Build a record from a deserialized backend value."""
        if not value:
            return cls(tag=tag, domain=domain)
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"Tag record for {tag!r} is not a list")

        record = cls(tag=tag, domain=domain)
        for member in value:
            record.add_member(str(member))
        return record

    def add_member(self, key: str) -> bool:
        """Append key unless an equivalent key is present. Returns True if the record changed."""
        if self.has_member(key):
            return False
        self.members.append(key)
        return True

    def has_member(self, key: str) -> bool:
        key_id = self._key_id(key)
        return any(self._key_id(member) == key_id for member in self.members)

    def to_value(self) -> List[str]:
        """Value written back to the backend."""
        return list(self.members)

    def _key_id(self, key: str) -> KeyId:
        return derive_key_id(self.domain, key)

    def __len__(self) -> int:
        return len(self.members)
