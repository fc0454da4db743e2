"""Bounded job queue shared by the producer and the worker pool."""

import threading
from collections import deque
from typing import Deque, Optional

from partition_lister.core.exceptions import QueueClosedError, ValidationError

from .jobs import TraversalJob

DEFAULT_POLL_INTERVAL = 0.05


class JobQueue:
    """Fixed-capacity channel of traversal jobs.

    ``put`` blocks while the queue is full. ``close`` marks the end of
    production; once closed and drained, ``get`` returns ``None``. All state
    is guarded by one condition, so a stop event checked in ``get`` is seen
    before any job is popped. Waits are sliced by ``poll_interval`` so that
    events set without a ``wake`` are still noticed.
    """

    def __init__(self, capacity: int, poll_interval: float = DEFAULT_POLL_INTERVAL):
        if capacity < 1:
            raise ValidationError(f"Queue capacity must be >= 1, got: {capacity}")
        self.capacity = capacity
        self.poll_interval = poll_interval
        self._jobs: Deque[TraversalJob] = deque()
        self._condition = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    def qsize(self) -> int:
        with self._condition:
            return len(self._jobs)

    def put(self, job: TraversalJob, cancel: Optional[threading.Event] = None) -> bool:
        """Enqueue a job, blocking while the queue is full.

        Returns:
            True once enqueued, False if ``cancel`` fired while waiting

        Raises:
            QueueClosedError: If the queue has been closed
        """
        with self._condition:
            if self._closed:
                raise QueueClosedError("Cannot enqueue on a closed job queue")
            while len(self._jobs) >= self.capacity:
                if cancel is not None and cancel.is_set():
                    return False
                self._condition.wait(self.poll_interval)
            self._jobs.append(job)
            self._condition.notify_all()
            return True

    def get(self, stop: Optional[threading.Event] = None) -> Optional[TraversalJob]:
        """Take the next job.

        Returns ``None`` without taking a job when ``stop`` is set, and
        ``None`` when the queue is closed and empty.
        """
        with self._condition:
            while True:
                if stop is not None and stop.is_set():
                    return None
                if self._jobs:
                    job = self._jobs.popleft()
                    self._condition.notify_all()
                    return job
                if self._closed:
                    return None
                self._condition.wait(self.poll_interval)

    def wake(self) -> None:
        """Wake every blocked caller so it re-checks its stop or cancel event."""
        with self._condition:
            self._condition.notify_all()

    def close(self) -> None:
        """Signal that no further jobs will arrive.

        Raises:
            QueueClosedError: If the queue is already closed
        """
        with self._condition:
            if self._closed:
                raise QueueClosedError("Job queue already closed")
            self._closed = True
            self._condition.notify_all()
