"""Per-partition object listings for S3-compatible storage.

A shallow, delimiter-grouped listing of a root prefix discovers its
partitions (the immediate child prefixes). Each partition becomes a job on a
bounded queue, and a pool of workers deep-lists every partition into its own
output file. Existing output files are skipped, so repeating a run completes
whatever an earlier run left unfinished.

Usage:
    >>> from partition_lister import load_export_settings, run_export
    >>> export_settings = load_export_settings(bucket="my-bucket", prefix="data/")
    >>> summary = run_export(export_settings)
    >>> summary.completed

Advanced Usage:
    >>> from partition_lister.export import JobQueue, Producer, WorkerPool
    >>> from partition_lister.objectstorage import S3Lister, Pagination
"""

__version__ = "0.1.0"

from .core import ExportSettings, load_export_settings
from .export import ExportSummary, discover_partitions, run_export
from .formatting import get_formatter, parse_record
from .objectstorage import Entry, EntryKind, S3ClientConfig, S3Lister

__all__ = [
    "ExportSettings",
    "load_export_settings",
    "ExportSummary",
    "discover_partitions",
    "run_export",
    "get_formatter",
    "parse_record",
    "Entry",
    "EntryKind",
    "S3ClientConfig",
    "S3Lister",
]
