"""Object storage listing operations."""

from .entries import CollectingConsumer, Entry, EntryConsumer, EntryKind
from .lister import Lister, ListingResult, Pagination, S3Lister

__all__ = [
    "CollectingConsumer",
    "Entry",
    "EntryConsumer",
    "EntryKind",
    "Lister",
    "ListingResult",
    "Pagination",
    "S3Lister",
]
