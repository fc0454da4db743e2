"""Partition discovery and job production."""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from partition_lister.core import get_logger, get_tracer
from partition_lister.core.exceptions import ValidationError
from partition_lister.formatting import RecordFormatter
from partition_lister.objectstorage.listing import (
    CollectingConsumer,
    Lister,
    Pagination,
)

from .job_queue import JobQueue
from .jobs import TraversalJob, output_target_path, partition_id_from_key
from .stats import ExportStats

logger = get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass(frozen=True)
class Partition:
    """A partition found by the discovery pass."""

    partition_id: str
    key: str
    output_target: Path

    @property
    def output_exists(self) -> bool:
        return self.output_target.exists()


class Producer:
    """Runs the shallow discovery pass and enqueues one job per partition."""

    def __init__(
        self,
        lister: Lister,
        bucket: str,
        prefix: str,
        formatter: RecordFormatter,
        output_dir: Path,
        output_prefix: str,
        shallow: Pagination,
        deep: Pagination,
        delimiter: str = "/",
        force: bool = False,
        stats: Optional[ExportStats] = None,
    ):
        self.lister = lister
        self.bucket = bucket
        self.prefix = prefix
        self.formatter = formatter
        self.output_dir = Path(output_dir)
        self.output_prefix = output_prefix
        self.shallow = shallow
        self.deep = deep
        self.delimiter = delimiter
        self.force = force
        self.stats = stats or ExportStats()

    def discover(self) -> list[Partition]:
        """Run the shallow pass and return the partitions it found.

        Objects sitting directly under the root prefix are counted but never
        become partitions. Prefixes whose identifier cannot name an output
        target are logged and left out.
        """
        with tracer.start_as_current_span(
            "discover", attributes={"bucket": self.bucket, "prefix": self.prefix}
        ):
            collected = CollectingConsumer()
            result = self.lister.list(
                self.bucket, self.prefix, collected, self.shallow, delimiter=self.delimiter
            )

        if not result.complete:
            logger.warning(
                "Discovery pass incomplete, continuing with partitions found so far",
                bucket=self.bucket,
                prefix=self.prefix,
                error=result.error,
            )

        root_objects = collected.objects
        if root_objects:
            self.stats.increment("root_objects", len(root_objects))
            logger.info(
                "Objects at root prefix are not dispatched",
                bucket=self.bucket,
                prefix=self.prefix,
                object_count=len(root_objects),
            )

        partitions = []
        for entry in collected.prefixes:
            self.stats.increment("partitions_discovered")
            try:
                partition_id = partition_id_from_key(entry.key, self.delimiter)
            except ValidationError as e:
                self.stats.increment("rejected")
                logger.warning("Skipping prefix", key=entry.key, error=str(e))
                continue

            partitions.append(
                Partition(
                    partition_id=partition_id,
                    key=entry.key,
                    output_target=output_target_path(
                        self.output_dir, self.output_prefix, partition_id
                    ),
                )
            )

        logger.info(
            "Discovery pass finished",
            bucket=self.bucket,
            prefix=self.prefix,
            partition_count=len(partitions),
        )
        return partitions

    def build_job(self, partition: Partition) -> TraversalJob:
        return TraversalJob(
            partition_id=partition.partition_id,
            bucket=self.bucket,
            prefix=partition.key,
            output_target=partition.output_target,
            formatter=self.formatter,
            pagination=self.deep,
        )

    def run(self, jobs: JobQueue, cancel: Optional[threading.Event] = None) -> int:
        """Discover partitions and enqueue their jobs, then close ``jobs``.

        Blocks while the queue is full. If ``cancel`` fires during such a wait
        the remaining partitions are abandoned. The queue is closed exactly
        once, whatever happens.

        Returns:
            Number of jobs enqueued
        """
        logger.info("Starting producer", bucket=self.bucket, prefix=self.prefix)
        dispatched = 0
        try:
            for partition in self.discover():
                if not self.force and partition.output_exists:
                    self.stats.increment("skipped")
                    logger.info(
                        "Output already exists, skipping",
                        partition_id=partition.partition_id,
                        output_target=str(partition.output_target),
                    )
                    continue

                if not jobs.put(self.build_job(partition), cancel=cancel):
                    logger.warning(
                        "Worker pool finished early, remaining partitions not dispatched",
                        partition_id=partition.partition_id,
                    )
                    break

                dispatched += 1
                self.stats.increment("dispatched")
                logger.debug("Job enqueued", partition_id=partition.partition_id)
        finally:
            jobs.close()

        logger.info("Finish producer", dispatched=dispatched)
        return dispatched
