"""Export orchestration: one producer, a worker pool and the final join."""

import threading
import time
from pathlib import Path
from typing import Optional

from partition_lister.core import ExportSettings, get_logger
from partition_lister.core.exceptions import ConfigurationError
from partition_lister.formatting import RecordFormatter, get_formatter
from partition_lister.objectstorage import Pagination, S3ClientConfig, S3Lister

from .completion import CompletionTracker
from .job_queue import JobQueue
from .producer import Partition, Producer
from .stats import ExportStats, ExportSummary
from .worker import ListerFactory, WorkerPool

logger = get_logger(__name__)

WAIT_SLICE_SECONDS = 0.5


def shallow_pagination(export_settings: ExportSettings) -> Pagination:
    return Pagination(
        max_pages=export_settings.shallow_max_pages,
        max_keys=export_settings.shallow_max_keys,
    )


def deep_pagination(export_settings: ExportSettings) -> Pagination:
    return Pagination(
        max_pages=export_settings.deep_max_pages,
        max_keys=export_settings.deep_max_keys,
    )


def s3_lister_factory(export_settings: ExportSettings) -> ListerFactory:
    """Factory giving every caller a lister with its own S3 client."""
    config = S3ClientConfig.from_settings(export_settings)
    attempts = export_settings.listing_attempts

    def factory() -> S3Lister:
        return S3Lister(config, attempts=attempts)

    return factory


def build_producer(
    export_settings: ExportSettings,
    lister_factory: ListerFactory,
    formatter: Optional[RecordFormatter] = None,
    stats: Optional[ExportStats] = None,
) -> Producer:
    return Producer(
        lister=lister_factory(),
        bucket=export_settings.bucket,
        prefix=export_settings.prefix,
        formatter=formatter or get_formatter(export_settings.output_format),
        output_dir=Path(export_settings.output_location),
        output_prefix=export_settings.output_prefix,
        shallow=shallow_pagination(export_settings),
        deep=deep_pagination(export_settings),
        delimiter=export_settings.delimiter,
        force=export_settings.force,
        stats=stats,
    )


def discover_partitions(
    export_settings: ExportSettings, lister_factory: Optional[ListerFactory] = None
) -> list[Partition]:
    """Run only the discovery pass."""
    factory = lister_factory or s3_lister_factory(export_settings)
    return build_producer(export_settings, factory).discover()


def _prepare_output_dir(location: str) -> Path:
    output_dir = Path(location)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot create output location '{location}': {e}"
        ) from e
    return output_dir


def run_export(
    export_settings: ExportSettings, lister_factory: Optional[ListerFactory] = None
) -> ExportSummary:
    """Export a flat listing of every partition under the root prefix.

    The run returns once every worker has reported completion. Interrupting
    it with Ctrl-C stops the workers from taking new jobs; jobs already in
    progress still finish.

    Raises:
        FormatError: If the output format is unknown
        ConfigurationError: If the output location cannot be created
    """
    formatter = get_formatter(export_settings.output_format)
    _prepare_output_dir(export_settings.output_location)
    factory = lister_factory or s3_lister_factory(export_settings)

    stats = ExportStats()
    jobs = JobQueue(export_settings.queue_size)
    tracker = CompletionTracker()
    pool = WorkerPool(export_settings.workers, jobs, factory, tracker, stats)
    producer = build_producer(export_settings, factory, formatter, stats)

    logger.info(
        "Starting export",
        bucket=export_settings.bucket,
        prefix=export_settings.prefix,
        workers=export_settings.workers,
        queue_size=export_settings.queue_size,
    )

    producer_errors: list[Exception] = []

    def produce() -> None:
        try:
            producer.run(jobs, cancel=tracker.all_done)
        except Exception as e:
            logger.exception("Producer failed")
            producer_errors.append(e)

    started = time.perf_counter()
    pool.start()
    producer_thread = threading.Thread(target=produce, name="producer", daemon=True)
    producer_thread.start()

    interrupted = False
    try:
        # Wait in slices so the main thread still receives KeyboardInterrupt
        while not pool.wait(WAIT_SLICE_SECONDS):
            pass
    except KeyboardInterrupt:
        interrupted = True
        logger.warning("Interrupted, stopping workers")
        pool.stop()
        pool.wait()

    producer_thread.join()
    duration = time.perf_counter() - started

    if producer_errors:
        raise producer_errors[0]

    counts = stats.snapshot()
    summary = ExportSummary(
        bucket=export_settings.bucket,
        prefix=export_settings.prefix,
        workers=export_settings.workers,
        duration_seconds=duration,
        interrupted=interrupted,
        **counts,
    )
    logger.info("Export finished", duration_seconds=round(duration, 3), **counts)
    return summary
