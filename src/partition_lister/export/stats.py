"""Run counters and the summary returned by an export."""

import threading
from collections import Counter
from dataclasses import dataclass

COUNTERS = (
    "partitions_discovered",
    "root_objects",
    "dispatched",
    "skipped",
    "rejected",
    "completed",
    "partial",
    "failed",
    "entries_written",
)


class ExportStats:
    """Thread-safe counters updated by the producer and the workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[str] = Counter()

    def increment(self, name: str, amount: int = 1) -> None:
        if name not in COUNTERS:
            raise KeyError(f"Unknown counter: {name}")
        with self._lock:
            self._counts[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {name: self._counts[name] for name in COUNTERS}


@dataclass(frozen=True)
class ExportSummary:
    """Outcome of one export run."""

    bucket: str
    prefix: str
    workers: int
    partitions_discovered: int
    root_objects: int
    dispatched: int
    skipped: int
    rejected: int
    completed: int
    partial: int
    failed: int
    entries_written: int
    duration_seconds: float
    interrupted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.failed == 0 and not self.interrupted
