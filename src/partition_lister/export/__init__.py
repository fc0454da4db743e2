"""Partition export: discovery, job dispatch and the worker pool."""

from .completion import CompletionTracker
from .job_queue import JobQueue
from .jobs import (
    FileEntryWriter,
    TraversalJob,
    output_target_path,
    partition_id_from_key,
)
from .producer import Partition, Producer
from .runner import discover_partitions, run_export
from .stats import ExportStats, ExportSummary
from .worker import JobOutcome, Termination, Worker, WorkerPool

__all__ = [
    "CompletionTracker",
    "ExportStats",
    "ExportSummary",
    "FileEntryWriter",
    "JobOutcome",
    "JobQueue",
    "Partition",
    "Producer",
    "Termination",
    "TraversalJob",
    "Worker",
    "WorkerPool",
    "discover_partitions",
    "output_target_path",
    "partition_id_from_key",
    "run_export",
]
