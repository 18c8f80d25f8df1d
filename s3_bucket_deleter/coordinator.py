"""
Phase barrier coordinator: the whole deletion run for one bucket.

For every page of the version listing, delete markers are removed by a
fresh pool which is drained before the same page's versions are submitted
to another fresh pool. Deleting a version while its delete marker is still
being removed races on the backend side, so the barrier is per page.

Once the version listing is exhausted, plain objects from a second listing
pass run through a single pool, and only when that pool has drained is the
bucket itself removed.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator
from typing import Protocol

from .cancel import Cancellation
from .config import DeleterConfig
from .executor import DeleteExecutor, ObjectDeleter
from .finalizer import BucketRemover, finalize_bucket
from .models import DeletionJob, DeletionStats
from .pool import WorkerPool
from .producer import PagedLister, PageProducer
from .retry import RetryPolicy

module_logger = logging.getLogger(__name__)


class ObjectStore(PagedLister, ObjectDeleter, BucketRemover, Protocol):
    """Everything a run needs from the backend."""


class Phase(enum.Enum):
    LISTING_VERSIONS = "listing-versions"
    DELETING_MARKERS = "markers"
    DELETING_VERSIONS = "versions"
    LISTING_OBJECTS = "listing-objects"
    DELETING_OBJECTS = "objects"
    DELETING_BUCKET = "bucket"
    DONE = "done"
    FATAL = "fatal"


class BucketDeleter:
    """
    Empties a versioned bucket and then deletes it.

    Attributes:
        store: Object store client shared by all workers.
        workers: Worker threads per pool.
        queue_size: Capacity of each pool's job queue.
        retry_policy: Backoff applied to every delete call.
        cancellation: Token checked by listings, deletes and backoff sleeps.
        stats: Counters of the current (or last) run.
        transitions: Phases entered during the run, with the page number
            for per-page phases.
    """

    def __init__(
        self,
        store: ObjectStore,
        workers: int = 50,
        queue_size: int | None = None,
        retry_policy: RetryPolicy | None = None,
        cancellation: Cancellation | None = None,
        logger: logging.Logger | None = None,
        verbose: bool = False,
    ) -> None:
        self.store = store
        self.workers = workers
        self.queue_size = queue_size or workers * 2
        self.retry_policy = retry_policy or RetryPolicy()
        self.cancellation = cancellation or Cancellation()
        self.logger = logger or module_logger
        self.verbose = verbose
        self.stats = DeletionStats()
        self.phase: Phase | None = None
        self.transitions: list[tuple[Phase, int | None]] = []

    @classmethod
    def from_config(
        cls,
        config: DeleterConfig,
        store: ObjectStore,
        cancellation: Cancellation | None = None,
        logger: logging.Logger | None = None,
    ) -> BucketDeleter:
        return cls(
            store,
            workers=config.workers,
            queue_size=config.queue_size,
            retry_policy=config.retry_policy(),
            cancellation=cancellation or Cancellation(config.timeout),
            logger=logger,
            verbose=config.verbose,
        )

    def _enter(self, phase: Phase, page: int | None = None) -> None:
        self.phase = phase
        self.transitions.append((phase, page))

    def run(self, bucket: str) -> DeletionStats:
        """
        Delete every delete marker, version and object, then the bucket.

        Args:
            bucket: Name of the bucket to remove.

        Returns:
            Statistics of the run.

        Raises:
            FatalError: ListingError, FinalizeError or RunCancelled.
            Exception: Anything unexpected raised by a worker, after its
                pool has drained.
        """
        self.stats = DeletionStats()
        self.transitions = []
        executor = DeleteExecutor(
            self.store,
            self.retry_policy,
            cancellation=self.cancellation,
            stats=self.stats,
            logger=self.logger,
            verbose=self.verbose,
        )
        producer = PageProducer(self.store, self.cancellation, logger=self.logger)

        try:
            self._delete_versions(bucket, producer, executor)
            self._delete_objects(bucket, producer, executor)
            self.logger.info(f"Content of {bucket} processed: {self.stats.summary()}")

            self._enter(Phase.DELETING_BUCKET)
            self.cancellation.check(f"deleting bucket {bucket}")
            finalize_bucket(
                self.store, bucket, self.stats.abandoned, logger=self.logger
            )
        except KeyboardInterrupt:
            self.cancellation.cancel()
            self._enter(Phase.FATAL)
            raise
        except Exception:
            self._enter(Phase.FATAL)
            self.logger.info(f"Stopped {bucket} after: {self.stats.summary()}")
            raise

        self._enter(Phase.DONE)
        self.logger.info(f"Finished {bucket}: {self.stats.summary()}")
        return self.stats

    def _delete_versions(
        self, bucket: str, producer: PageProducer, executor: DeleteExecutor
    ) -> None:
        self._enter(Phase.LISTING_VERSIONS)
        for page in producer.list_versions_and_markers(bucket):
            self._enter(Phase.DELETING_MARKERS, page.number)
            if page.markers:
                self.logger.info(
                    f"Deleting {len(page.markers)} delete markers "
                    f"(page {page.number})..."
                )
            self._drain(Phase.DELETING_MARKERS, page.markers, executor)

            self._enter(Phase.DELETING_VERSIONS, page.number)
            if page.versions:
                self.logger.info(
                    f"Deleting {len(page.versions)} versions (page {page.number})..."
                )
            self._drain(Phase.DELETING_VERSIONS, page.versions, executor)
            if not page.is_last:
                self._enter(Phase.LISTING_VERSIONS)

    def _delete_objects(
        self, bucket: str, producer: PageProducer, executor: DeleteExecutor
    ) -> None:
        self._enter(Phase.LISTING_OBJECTS)
        self.logger.info(f"Deleting all objects in {bucket}...")

        def jobs() -> Iterator[DeletionJob]:
            for page in producer.list_objects(bucket):
                if self.phase is not Phase.DELETING_OBJECTS:
                    self._enter(Phase.DELETING_OBJECTS, page.number)
                yield from page.objects

        self._drain(Phase.DELETING_OBJECTS, jobs(), executor, lazy=True)

    def _drain(
        self,
        phase: Phase,
        jobs: Iterable[DeletionJob],
        executor: DeleteExecutor,
        lazy: bool = False,
    ) -> None:
        """
        Run `jobs` through a fresh pool and return once it has drained.

        An empty, fully materialised job list is a no-op drain and starts no
        threads. When `jobs` is lazy its listing runs here, so a failure
        cancels the queued work, drains the pool and then propagates.
        """
        if not lazy and not jobs:
            return
        pool = WorkerPool.start(
            executor.delete_one, self.workers, self.queue_size, name=phase.value
        )
        try:
            for job in jobs:
                pool.submit(job)
        except BaseException:
            self.cancellation.cancel()
            pool.close()
            pool.wait()
            raise
        pool.close()
        pool.wait()
        self.logger.debug(f"Pool {phase.value} drained: {pool.processed} jobs")
