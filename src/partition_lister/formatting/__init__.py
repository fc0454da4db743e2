"""Output record formats."""

from .records import (
    CsvRecordFormatter,
    JsonRecordFormatter,
    RecordFormatter,
    get_formatter,
    parse_record,
)

__all__ = [
    "CsvRecordFormatter",
    "JsonRecordFormatter",
    "RecordFormatter",
    "get_formatter",
    "parse_record",
]
