"""Listing entries and the consumers that receive them."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol


class EntryKind(str, Enum):
    """Kind of a discovered entry."""

    OBJECT = "OBJECT"
    PREFIX = "PREFIX"


@dataclass(frozen=True)
class Entry:
    """One entry discovered by a listing call.

    ``size`` and ``last_modified`` are only meaningful for ``OBJECT`` entries;
    for ``PREFIX`` entries they are always ``0`` and ``None``.
    """

    kind: EntryKind
    bucket: str
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None

    @classmethod
    def object(
        cls, bucket: str, key: str, size: int, last_modified: Optional[datetime]
    ) -> "Entry":
        return cls(EntryKind.OBJECT, bucket, key, size, last_modified)

    @classmethod
    def prefix(cls, bucket: str, key: str) -> "Entry":
        return cls(EntryKind.PREFIX, bucket, key)

    @property
    def is_prefix(self) -> bool:
        return self.kind is EntryKind.PREFIX


class EntryConsumer(Protocol):
    """Receives every entry discovered by a listing call, in page order."""

    def consume(self, entry: Entry) -> None:
        """Handle one discovered entry."""
        ...


class CollectingConsumer:
    """Accumulates entries in memory; used by the discovery pass."""

    def __init__(self) -> None:
        self.entries: list[Entry] = []

    def consume(self, entry: Entry) -> None:
        self.entries.append(entry)

    @property
    def prefixes(self) -> list[Entry]:
        return [entry for entry in self.entries if entry.is_prefix]

    @property
    def objects(self) -> list[Entry]:
        return [entry for entry in self.entries if not entry.is_prefix]
