"""Test configuration and fixtures for partition-lister."""

import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

from partition_lister.core import ExportSettings
from partition_lister.export import TraversalJob
from partition_lister.formatting import get_formatter
from partition_lister.objectstorage import Entry, ListingResult, Pagination

TEST_CREDENTIALS = {
    "access_key_id": "test_key",
    "secret_access_key": "test_secret",
    "region_name": "us-east-1",
}

MODIFIED = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


class FakeLister:
    """In-memory listing capability.

    Grouped calls (with a delimiter) return ``shallow``; ungrouped calls return
    ``deep[prefix]``. Prefixes in ``failing`` emit their entries and then
    report an incomplete listing. When ``gate`` is given, every deep call
    signals ``entered`` and waits for ``gate`` before emitting anything.
    """

    def __init__(
        self,
        shallow: Optional[list[Entry]] = None,
        deep: Optional[dict[str, list[Entry]]] = None,
        failing: frozenset = frozenset(),
        gate: Optional[threading.Event] = None,
    ):
        self.shallow = shallow or []
        self.deep = deep or {}
        self.failing = failing
        self.gate = gate
        self.entered = threading.Event()
        self.calls: list[tuple[str, Optional[str], Pagination]] = []
        self._lock = threading.Lock()

    def list(self, bucket, prefix, consumer, pagination, delimiter=None):
        with self._lock:
            self.calls.append((prefix, delimiter, pagination))

        if delimiter:
            entries = self.shallow
        else:
            entries = self.deep.get(prefix, [])
            if self.gate is not None:
                self.entered.set()
                self.gate.wait(5)

        for entry in entries:
            consumer.consume(entry)

        complete = prefix not in self.failing
        return ListingResult(
            bucket=bucket,
            prefix=prefix,
            entry_count=len(entries),
            page_count=1,
            complete=complete,
            error=None if complete else "listing failed",
        )


def obj(key: str, size: int = 10, bucket: str = "test-bucket") -> Entry:
    return Entry.object(bucket, key, size, MODIFIED)


def pre(key: str, bucket: str = "test-bucket") -> Entry:
    return Entry.prefix(bucket, key)


def make_job(
    output_dir: Path, partition_id: str, prefix: Optional[str] = None, fmt: str = "csv"
) -> TraversalJob:
    return TraversalJob(
        partition_id=partition_id,
        bucket="test-bucket",
        prefix=prefix if prefix is not None else f"{partition_id}/",
        output_target=Path(output_dir) / f"advertiser_{partition_id}",
        formatter=get_formatter(fmt),
        pagination=Pagination(),
    )


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def export_settings(temp_dir):
    """Export settings pointing at a temporary output location."""
    return ExportSettings(
        bucket="test-bucket",
        prefix="",
        output_location=str(temp_dir / "target"),
        workers=3,
        queue_size=2,
        **TEST_CREDENTIALS,
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep PARTITION_LISTER_* variables of the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("PARTITION_LISTER_"):
            monkeypatch.delenv(name)
