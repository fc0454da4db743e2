"""Tests for partition discovery and job production."""

import threading

from partition_lister.export import ExportStats, JobQueue, Producer
from partition_lister.formatting import get_formatter
from partition_lister.objectstorage import Pagination

from conftest import FakeLister, obj, pre

SHALLOW = Pagination(max_pages=5, max_keys=5)
DEEP = Pagination(max_pages=0, max_keys=1000)


def make_producer(lister, output_dir, prefix="", force=False, delimiter="/", stats=None):
    return Producer(
        lister=lister,
        bucket="test-bucket",
        prefix=prefix,
        formatter=get_formatter("csv"),
        output_dir=output_dir,
        output_prefix="advertiser",
        shallow=SHALLOW,
        deep=DEEP,
        delimiter=delimiter,
        force=force,
        stats=stats,
    )


def drain(jobs):
    result = []
    while (job := jobs.get()) is not None:
        result.append(job)
    return result


class TestProducer:
    """Test the producer against an in-memory lister."""

    def test_one_job_per_partition(self, temp_dir):
        """Test three prefixes yield three jobs and a closed queue."""
        lister = FakeLister(shallow=[pre("a/"), pre("b/"), pre("c/")])
        jobs = JobQueue(5)

        dispatched = make_producer(lister, temp_dir).run(jobs)

        assert dispatched == 3
        assert jobs.closed
        produced = drain(jobs)
        assert [job.partition_id for job in produced] == ["a", "b", "c"]
        assert [job.prefix for job in produced] == ["a/", "b/", "c/"]
        assert [job.output_target.name for job in produced] == [
            "advertiser_a",
            "advertiser_b",
            "advertiser_c",
        ]
        assert all(job.pagination == DEEP for job in produced)

    def test_shallow_pass_is_grouped_and_capped(self, temp_dir):
        """Test discovery uses the delimiter and the shallow pagination."""
        lister = FakeLister(shallow=[pre("data/a/")])

        make_producer(lister, temp_dir, prefix="data/").run(JobQueue(1))

        assert lister.calls == [("data/", "/", SHALLOW)]

    def test_job_prefix_under_root_prefix(self, temp_dir):
        """Test job prefixes are the root prefix plus the partition id."""
        lister = FakeLister(shallow=[pre("data/advertisers/42/")])
        jobs = JobQueue(1)

        make_producer(lister, temp_dir, prefix="data/advertisers/").run(jobs)

        job = jobs.get()
        assert job.partition_id == "42"
        assert job.prefix == "data/advertisers/42/"

    def test_root_objects_not_dispatched(self, temp_dir):
        """Test bare objects at the root never become jobs."""
        stats = ExportStats()
        lister = FakeLister(shallow=[obj("readme.txt"), pre("a/")])
        jobs = JobQueue(5)

        assert make_producer(lister, temp_dir, stats=stats).run(jobs) == 1
        assert stats.get("root_objects") == 1
        assert [job.partition_id for job in drain(jobs)] == ["a"]

    def test_existing_output_skipped(self, temp_dir):
        """Test idempotent skip of partitions that already have output."""
        (temp_dir / "advertiser_a").write_text("\nprevious run\n")
        stats = ExportStats()
        lister = FakeLister(shallow=[pre("a/"), pre("b/"), pre("c/")])
        jobs = JobQueue(5)

        assert make_producer(lister, temp_dir, stats=stats).run(jobs) == 2
        assert [job.partition_id for job in drain(jobs)] == ["b", "c"]
        assert stats.get("skipped") == 1
        assert (temp_dir / "advertiser_a").read_text() == "\nprevious run\n"

    def test_force_dispatches_existing_output(self, temp_dir):
        """Test force ignores existing output."""
        (temp_dir / "advertiser_a").write_text("\n")
        lister = FakeLister(shallow=[pre("a/")])
        jobs = JobQueue(5)

        assert make_producer(lister, temp_dir, force=True).run(jobs) == 1

    def test_no_partitions_closes_queue(self, temp_dir):
        """Test an empty root closes the queue with no jobs."""
        jobs = JobQueue(1)

        assert make_producer(FakeLister(), temp_dir).run(jobs) == 0
        assert jobs.closed
        assert jobs.get() is None

    def test_unusable_partition_rejected(self, temp_dir):
        """Test prefixes that cannot name an output are left out."""
        stats = ExportStats()
        lister = FakeLister(shallow=[pre("x/y-"), pre("ok-")])
        jobs = JobQueue(5)

        producer = make_producer(lister, temp_dir, delimiter="-", stats=stats)

        assert producer.run(jobs) == 1
        assert stats.get("rejected") == 1
        assert stats.get("partitions_discovered") == 2

    def test_incomplete_discovery_keeps_found_partitions(self, temp_dir):
        """Test a failed shallow pass degrades the partition set."""
        lister = FakeLister(shallow=[pre("a/")], failing=frozenset({""}))

        partitions = make_producer(lister, temp_dir).discover()

        assert [p.partition_id for p in partitions] == ["a"]

    def test_blocks_on_full_queue_until_consumed(self, temp_dir):
        """Test backpressure between the producer and its consumer."""
        lister = FakeLister(shallow=[pre("a/"), pre("b/"), pre("c/")])
        jobs = JobQueue(1)
        producer = make_producer(lister, temp_dir)

        thread = threading.Thread(target=producer.run, args=(jobs,), daemon=True)
        thread.start()
        thread.join(0.3)
        assert thread.is_alive()
        assert jobs.qsize() == 1

        assert [job.partition_id for job in drain(jobs)] == ["a", "b", "c"]
        thread.join(2)
        assert not thread.is_alive()

    def test_cancel_abandons_remaining_partitions(self, temp_dir):
        """Test a producer blocked on a full queue gives up when cancelled."""
        lister = FakeLister(shallow=[pre("a/"), pre("b/"), pre("c/")])
        jobs = JobQueue(1)
        cancel = threading.Event()
        cancel.set()

        assert make_producer(lister, temp_dir).run(jobs, cancel=cancel) == 1
        assert jobs.closed
