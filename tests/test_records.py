"""Tests for output record formatting."""

import json

import pytest

from partition_lister.core.exceptions import FormatError
from partition_lister.formatting import (
    CsvRecordFormatter,
    JsonRecordFormatter,
    get_formatter,
    parse_record,
)
from partition_lister.objectstorage import EntryKind

from conftest import MODIFIED, obj, pre


class TestCsvRecordFormatter:
    """Test CSV records."""

    def test_object_record(self):
        """Test an object renders as one terminated CSV line."""
        line = CsvRecordFormatter().format(obj("data/a/1.txt", size=42))

        assert line == "OBJECT,test-bucket,data/a/1.txt,42,2024-05-01T12:30:00+00:00\n"

    def test_prefix_record_has_no_metadata(self):
        """Test prefix records carry zero size and no timestamp."""
        line = CsvRecordFormatter().format(pre("data/a/"))

        assert line == "PREFIX,test-bucket,data/a/,0,\n"

    def test_key_with_separator_is_quoted(self):
        """Test keys containing commas and quotes survive a round trip."""
        entry = obj('data/a/report, "final".csv', size=7)
        line = CsvRecordFormatter().format(entry)

        assert line.count("\n") == 1
        assert parse_record(line, "csv") == entry


class TestJsonRecordFormatter:
    """Test JSON records."""

    def test_object_record(self):
        """Test an object renders as one JSON document per line."""
        line = JsonRecordFormatter().format(obj("data/a/1.txt", size=42))

        assert line.endswith("\n")
        assert json.loads(line) == {
            "kind": "OBJECT",
            "bucket": "test-bucket",
            "key": "data/a/1.txt",
            "size": 42,
            "last_modified": "2024-05-01T12:30:00+00:00",
        }

    def test_prefix_record(self):
        """Test prefix records have a null timestamp."""
        record = json.loads(JsonRecordFormatter().format(pre("data/a/")))

        assert record["kind"] == "PREFIX"
        assert record["last_modified"] is None


class TestParseRecord:
    """Test reading records back."""

    @pytest.mark.parametrize("fmt", ["csv", "json"])
    def test_round_trip_object(self, fmt):
        """Test kind, key, size and timestamp are reproduced."""
        entry = obj("data/b/object.bin", size=1024)
        parsed = parse_record(get_formatter(fmt).format(entry), fmt)

        assert parsed.kind is EntryKind.OBJECT
        assert parsed.key == "data/b/object.bin"
        assert parsed.size == 1024
        assert parsed.last_modified == MODIFIED

    @pytest.mark.parametrize("fmt", ["csv", "json"])
    def test_round_trip_prefix(self, fmt):
        """Test prefix entries are reproduced."""
        entry = pre("data/b/")
        assert parse_record(get_formatter(fmt).format(entry), fmt) == entry

    def test_malformed_csv(self):
        """Test rows with the wrong field count are rejected."""
        with pytest.raises(FormatError, match="Malformed csv record"):
            parse_record("OBJECT,test-bucket\n", "csv")

    def test_malformed_json(self):
        """Test invalid JSON is rejected."""
        with pytest.raises(FormatError):
            parse_record("{not json", "json")

    def test_unknown_kind(self):
        """Test unknown entry kinds are rejected."""
        with pytest.raises(FormatError):
            parse_record("FOLDER,test-bucket,a/,0,\n", "csv")


class TestGetFormatter:
    """Test formatter lookup."""

    def test_known_formats(self):
        """Test lookup by name, case-insensitively."""
        assert isinstance(get_formatter("csv"), CsvRecordFormatter)
        assert isinstance(get_formatter("JSON"), JsonRecordFormatter)

    def test_unknown_format(self):
        """Test unknown formats fail with FormatError."""
        with pytest.raises(FormatError, match="Unknown output format: xml"):
            get_formatter("xml")
