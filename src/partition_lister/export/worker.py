"""Listing workers and the pool that runs them.

Each worker runs on its own thread for the lifetime of the pool. It takes jobs
from the shared queue until the queue is closed and drained, or until its own
stop event is set. The stop event interrupts the wait for the next job but
never a job that is already being processed.
"""

import threading
from enum import Enum
from typing import Callable, Optional

from partition_lister.core import get_logger, get_tracer
from partition_lister.core.exceptions import OutputTargetError
from partition_lister.objectstorage.listing import Lister

from .completion import CompletionTracker
from .job_queue import JobQueue
from .jobs import FileEntryWriter, TraversalJob
from .stats import ExportStats

logger = get_logger(__name__)
tracer = get_tracer(__name__)

ListerFactory = Callable[[], Lister]


class JobOutcome(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class Termination(str, Enum):
    INPUT_CLOSED = "input_closed"
    STOPPED = "stopped"
    ERROR = "error"


class Worker:
    """Deep-lists partitions taken from the shared job queue."""

    def __init__(
        self,
        worker_id: int,
        jobs: JobQueue,
        lister_factory: ListerFactory,
        done_callback: Callable[[int], None],
        stats: Optional[ExportStats] = None,
    ):
        self.worker_id = worker_id
        self.jobs = jobs
        self.lister_factory = lister_factory
        self.done_callback = done_callback
        self.stats = stats or ExportStats()
        self.termination: Optional[Termination] = None
        self.jobs_processed = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Worker{self.worker_id} already started")
        self._thread = threading.Thread(
            target=self._run, name=f"worker{self.worker_id}", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self.jobs.wake()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        termination = Termination.INPUT_CLOSED
        try:
            lister = self.lister_factory()
            while True:
                job = self.jobs.get(self._stop)
                if job is None:
                    if self._stop.is_set():
                        termination = Termination.STOPPED
                    break
                self.process(job, lister)
        except Exception:
            termination = Termination.ERROR
            logger.exception("Worker terminated by error", worker_id=self.worker_id)
        finally:
            self.termination = termination
            logger.info(
                "Worker finished",
                worker_id=self.worker_id,
                termination=termination.value,
                jobs_processed=self.jobs_processed,
            )
            self.done_callback(self.worker_id)

    def process(self, job: TraversalJob, lister: Lister) -> JobOutcome:
        """List one partition into its output target.

        A target that cannot be opened or written fails only this job.
        """
        log = logger.bind(worker_id=self.worker_id, partition_id=job.partition_id)
        log.info("Processing job", prefix=job.prefix, output_target=str(job.output_target))
        self.jobs_processed += 1

        with tracer.start_as_current_span(
            "partition",
            attributes={"partition_id": job.partition_id, "worker_id": self.worker_id},
        ):
            writer = FileEntryWriter(job.output_target, job.formatter)
            try:
                with writer:
                    result = lister.list(job.bucket, job.prefix, writer, job.pagination)
            except OutputTargetError as e:
                self.stats.increment("failed")
                self.stats.increment("entries_written", writer.records_written)
                log.error("Job failed", error=str(e))
                self._remove_target(job, log)
                return JobOutcome.FAILED

        self.stats.increment("entries_written", writer.records_written)
        if not result.complete:
            self.stats.increment("partial")
            log.warning(
                "Job finished with partial output",
                entry_count=writer.records_written,
                error=result.error,
            )
            return JobOutcome.PARTIAL

        self.stats.increment("completed")
        log.info("Job completed", entry_count=writer.records_written)
        return JobOutcome.COMPLETED

    @staticmethod
    def _remove_target(job: TraversalJob, log) -> None:
        # The next run skips any target that exists
        try:
            job.output_target.unlink(missing_ok=True)
        except OSError as e:
            log.warning(
                "Could not remove partial output",
                output_target=str(job.output_target),
                error=str(e),
            )
            return
        log.info("Removed partial output", output_target=str(job.output_target))


class WorkerPool:
    """Fixed set of workers sharing one job queue."""

    def __init__(
        self,
        size: int,
        jobs: JobQueue,
        lister_factory: ListerFactory,
        tracker: Optional[CompletionTracker] = None,
        stats: Optional[ExportStats] = None,
    ):
        self.tracker = tracker or CompletionTracker()
        self.workers = [
            Worker(worker_id, jobs, lister_factory, self.tracker.done, stats)
            for worker_id in range(1, size + 1)
        ]

    def start(self) -> None:
        # Register everyone first so the join cannot pass before the last start
        for worker in self.workers:
            self.tracker.register(worker.worker_id)
        for worker in self.workers:
            logger.info("Starting worker", worker_id=worker.worker_id)
            worker.start()

    def stop(self) -> None:
        for worker in self.workers:
            worker.stop()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every worker has reported completion."""
        return self.tracker.wait(timeout)
