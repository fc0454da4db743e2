"""Join point for the worker pool."""

import threading
from typing import Optional

from partition_lister.core.exceptions import CompletionError


class CompletionTracker:
    """Tracks that every registered worker reports completion exactly once."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._pending: set[int] = set()
        self._finished: set[int] = set()
        # Set once the last registered worker reports done
        self.all_done = threading.Event()

    def register(self, worker_id: int) -> None:
        with self._condition:
            if worker_id in self._pending or worker_id in self._finished:
                raise CompletionError(f"Worker{worker_id} is already registered")
            self._pending.add(worker_id)

    def done(self, worker_id: int) -> None:
        """Record completion of one worker.

        Raises:
            CompletionError: If the worker is unknown or already completed
        """
        with self._condition:
            if worker_id in self._finished:
                raise CompletionError(f"Worker{worker_id} reported completion twice")
            if worker_id not in self._pending:
                raise CompletionError(f"Worker{worker_id} is not registered")
            self._pending.remove(worker_id)
            self._finished.add(worker_id)
            if not self._pending:
                self.all_done.set()
            self._condition.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no registered worker is pending.

        Returns:
            True if all workers completed, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(lambda: not self._pending, timeout)

    @property
    def completed(self) -> int:
        with self._condition:
            return len(self._finished)

    @property
    def pending(self) -> int:
        with self._condition:
            return len(self._pending)
