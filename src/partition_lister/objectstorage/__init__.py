"""Object storage operations for S3-compatible services."""

from .clients import S3ClientConfig, S3ClientManager
from .listing import (
    CollectingConsumer,
    Entry,
    EntryConsumer,
    EntryKind,
    Lister,
    ListingResult,
    Pagination,
    S3Lister,
)

__all__ = [
    "CollectingConsumer",
    "Entry",
    "EntryConsumer",
    "EntryKind",
    "Lister",
    "ListingResult",
    "Pagination",
    "S3ClientConfig",
    "S3ClientManager",
    "S3Lister",
]
