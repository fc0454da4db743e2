"""Paginated S3 listing that streams entries to a consumer.

A listing call never raises for store-side failures: a page request that fails
is logged and the prefix is treated as exhausted, so callers receive whatever
was enumerated up to that point together with a ``ListingResult`` describing
how far the call got.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from partition_lister.core import get_logger
from partition_lister.core.exceptions import ListingError, ValidationError
from partition_lister.objectstorage.clients import S3ClientConfig, S3ClientManager

from .entries import Entry, EntryConsumer

logger = get_logger(__name__)


@dataclass(frozen=True)
class Pagination:
    """Page limits for one listing call.

    Attributes:
        max_pages: Stop after this many pages; 0 means no limit
        max_keys: Keys requested per page (1-1000)
    """

    max_pages: int = 0
    max_keys: int = 1000

    def __post_init__(self) -> None:
        if self.max_pages < 0:
            raise ValidationError(f"max_pages must be >= 0, got: {self.max_pages}")
        if not 1 <= self.max_keys <= 1000:
            raise ValidationError(
                f"max_keys must be between 1 and 1000, got: {self.max_keys}"
            )

    def reached(self, pages: int) -> bool:
        return self.max_pages != 0 and pages >= self.max_pages


@dataclass(frozen=True)
class ListingResult:
    """Outcome of one listing call."""

    bucket: str
    prefix: str
    entry_count: int
    page_count: int
    complete: bool
    error: Optional[str] = None


class Lister(Protocol):
    """Listing capability used by the producer and the workers."""

    def list(
        self,
        bucket: str,
        prefix: str,
        consumer: EntryConsumer,
        pagination: Pagination,
        delimiter: Optional[str] = None,
    ) -> ListingResult:
        ...


@dataclass
class _Progress:
    entries: int = 0
    pages: int = 0


class S3Lister:
    """Enumerates a bucket/prefix page by page.

    One lister owns one S3 client. Listers are not shared between threads.
    """

    def __init__(self, config: S3ClientConfig, attempts: int = 1):
        """Initialize S3 lister.

        Args:
            config: S3 client configuration
            attempts: Attempts per listing call; a failed call is only
                re-attempted while it has not emitted any entry yet
        """
        if attempts < 1:
            raise ValidationError(f"attempts must be >= 1, got: {attempts}")
        self.client_manager = S3ClientManager(config)
        self.attempts = attempts

    def list(
        self,
        bucket: str,
        prefix: str,
        consumer: EntryConsumer,
        pagination: Pagination,
        delimiter: Optional[str] = None,
    ) -> ListingResult:
        """List entries under ``prefix`` and hand each one to ``consumer``.

        ``PREFIX`` entries are only produced when a delimiter is given.

        Args:
            bucket: Bucket name
            prefix: Key prefix, empty for the bucket root
            consumer: Receives every discovered entry
            pagination: Page limits for this call
            delimiter: Hierarchy delimiter for grouped listings

        Returns:
            ListingResult with counts; ``complete`` is False when the store
            failed before the listing was exhausted or the page cap reached
        """
        attempt = 0
        while True:
            attempt += 1
            progress = _Progress()
            try:
                self._list_pages(bucket, prefix, consumer, pagination, delimiter, progress)
            except ListingError as e:
                if progress.entries == 0 and attempt < self.attempts:
                    logger.warning(
                        "Listing failed, retrying",
                        bucket=bucket,
                        prefix=prefix,
                        attempt=attempt,
                        error=str(e),
                    )
                    continue
                logger.error(
                    "Listing failed, treating prefix as exhausted",
                    bucket=bucket,
                    prefix=prefix,
                    entry_count=progress.entries,
                    error=str(e),
                )
                return ListingResult(
                    bucket=bucket,
                    prefix=prefix,
                    entry_count=progress.entries,
                    page_count=progress.pages,
                    complete=False,
                    error=str(e),
                )

            logger.info(
                "Listing finished",
                bucket=bucket,
                prefix=prefix,
                entry_count=progress.entries,
                page_count=progress.pages,
            )
            return ListingResult(
                bucket=bucket,
                prefix=prefix,
                entry_count=progress.entries,
                page_count=progress.pages,
                complete=True,
            )

    def _list_pages(
        self,
        bucket: str,
        prefix: str,
        consumer: EntryConsumer,
        pagination: Pagination,
        delimiter: Optional[str],
        progress: _Progress,
    ) -> None:
        params = {
            "Bucket": bucket,
            "PaginationConfig": {"PageSize": pagination.max_keys},
        }
        if prefix:
            params["Prefix"] = prefix
        if delimiter:
            params["Delimiter"] = delimiter

        logger.debug("Retrieving object listing", bucket=bucket, prefix=prefix)

        try:
            paginator = self.client_manager.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                progress.pages += 1
                logger.debug(
                    "Processing page", page=progress.pages, bucket=bucket, prefix=prefix
                )

                for obj in page.get("Contents", []):
                    consumer.consume(
                        Entry.object(
                            bucket, obj["Key"], obj.get("Size", 0), obj.get("LastModified")
                        )
                    )
                    progress.entries += 1

                if delimiter:
                    for prefix_info in page.get("CommonPrefixes", []):
                        consumer.consume(Entry.prefix(bucket, prefix_info["Prefix"]))
                        progress.entries += 1

                # The paginator is lazy, so breaking here stops further requests
                if pagination.reached(progress.pages):
                    break

        except (BotoCoreError, ClientError) as e:
            raise ListingError(f"Failed to list s3://{bucket}/{prefix}: {e}") from e
