"""Traversal jobs, partition naming and output targets."""

import os
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import IO, Optional, Type

from partition_lister.core import get_logger
from partition_lister.core.exceptions import OutputTargetError, ValidationError
from partition_lister.formatting import RecordFormatter
from partition_lister.objectstorage.listing import Entry, Pagination

logger = get_logger(__name__)

RECORD_SEPARATOR = "\n"

_UNSAFE_NAME_CHARS = {"/", "\\", os.sep, "\0"}


def partition_id_from_key(key: str, delimiter: str = "/") -> str:
    """Derive the partition identifier from a ``PREFIX`` entry key.

    Trailing delimiters are stripped and the last delimiter-separated segment
    is taken literally, e.g. ``data/2024/`` gives ``2024``.

    Raises:
        ValidationError: If the segment is empty or cannot name a file
    """
    stripped = key
    while stripped.endswith(delimiter):
        stripped = stripped[: -len(delimiter)]

    segment = stripped.split(delimiter)[-1]
    if not segment or segment in (".", ".."):
        raise ValidationError(f"Cannot derive a partition id from key: {key!r}")
    if any(char in segment for char in _UNSAFE_NAME_CHARS):
        raise ValidationError(
            f"Partition id {segment!r} from key {key!r} is not a valid file name"
        )
    return segment


def output_target_path(output_dir: Path, output_prefix: str, partition_id: str) -> Path:
    """Deterministic output location for a partition."""
    return Path(output_dir) / f"{output_prefix}_{partition_id}"


@dataclass(frozen=True)
class TraversalJob:
    """Deep listing of one partition into its own output target.

    A job is created once by the producer and handed to exactly one worker.
    """

    partition_id: str
    bucket: str
    prefix: str
    output_target: Path
    formatter: RecordFormatter
    pagination: Pagination


class FileEntryWriter:
    """Entry consumer that appends formatted records to one output target.

    Opening truncates any previous content and writes the leading record
    separator, so a target exists and is non-empty even for an empty partition.
    """

    def __init__(self, path: Path, formatter: RecordFormatter):
        self.path = Path(path)
        self.formatter = formatter
        self.records_written = 0
        self._handle: Optional[IO[str]] = None

    def open(self) -> "FileEntryWriter":
        try:
            self._handle = open(self.path, "w", encoding="utf-8")
            self._handle.write(RECORD_SEPARATOR)
        except OSError as e:
            self.close()
            raise OutputTargetError(f"Cannot create file: {self.path}: {e}") from e
        return self

    def consume(self, entry: Entry) -> None:
        if self._handle is None:
            raise OutputTargetError(f"Output target is not open: {self.path}")
        try:
            self._handle.write(self.formatter.format(entry))
        except OSError as e:
            raise OutputTargetError(f"Cannot write to file: {self.path}: {e}") from e
        self.records_written += 1

    def close(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            try:
                handle.close()
            except OSError as e:
                raise OutputTargetError(f"Cannot close file: {self.path}: {e}") from e

    def __enter__(self) -> "FileEntryWriter":
        return self.open()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()
