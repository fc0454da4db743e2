"""Rendering of listing entries as output records.

Formatters are stateless and may be shared between workers; each call returns
one complete line terminated by ``\\n``.
"""

import csv
import io
import json
from datetime import datetime
from typing import Optional, Protocol

from partition_lister.core.exceptions import FormatError
from partition_lister.objectstorage.listing import Entry, EntryKind

CSV_FIELDS = ("kind", "bucket", "key", "size", "last_modified")


class RecordFormatter(Protocol):
    """Renders one entry as one line of text."""

    name: str

    def format(self, entry: Entry) -> str:
        ...


def _timestamp(entry: Entry) -> str:
    return entry.last_modified.isoformat() if entry.last_modified else ""


class CsvRecordFormatter:
    """``kind,bucket,key,size,last_modified`` with standard CSV quoting."""

    name = "csv"

    def format(self, entry: Entry) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(
            [entry.kind.value, entry.bucket, entry.key, entry.size, _timestamp(entry)]
        )
        return buffer.getvalue()


class JsonRecordFormatter:
    """One JSON object per line."""

    name = "json"

    def format(self, entry: Entry) -> str:
        record = {
            "kind": entry.kind.value,
            "bucket": entry.bucket,
            "key": entry.key,
            "size": entry.size,
            "last_modified": _timestamp(entry) or None,
        }
        return json.dumps(record) + "\n"


FORMATTERS = {
    "csv": CsvRecordFormatter,
    "json": JsonRecordFormatter,
}


def get_formatter(name: str) -> RecordFormatter:
    """Look up a formatter by name.

    Raises:
        FormatError: If the format is not supported
    """
    try:
        return FORMATTERS[name.lower()]()
    except KeyError:
        raise FormatError(
            f"Unknown output format: {name}. Must be one of: {', '.join(FORMATTERS)}"
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def parse_record(line: str, format_name: str) -> Entry:
    """Parse a line written by the formatter named ``format_name``.

    Raises:
        FormatError: If the format is unknown or the line is malformed
    """
    get_formatter(format_name)
    try:
        if format_name.lower() == "json":
            record = json.loads(line)
        else:
            row = next(csv.reader([line.rstrip("\n")]))
            if len(row) != len(CSV_FIELDS):
                raise ValueError(f"expected {len(CSV_FIELDS)} fields, got {len(row)}")
            record = dict(zip(CSV_FIELDS, row))

        return Entry(
            kind=EntryKind(record["kind"]),
            bucket=record["bucket"],
            key=record["key"],
            size=int(record["size"]),
            last_modified=_parse_timestamp(record["last_modified"]),
        )
    except (ValueError, KeyError, StopIteration) as e:
        raise FormatError(f"Malformed {format_name} record {line!r}: {e}") from e
