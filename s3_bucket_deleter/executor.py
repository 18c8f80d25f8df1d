"""Single-object deletion with exponential backoff."""

from __future__ import annotations

import logging
from typing import Protocol

from .cancel import Cancellation
from .errors import StoreError
from .models import DeletionJob, DeletionStats, Outcome
from .retry import RetryPolicy

module_logger = logging.getLogger(__name__)


class ObjectDeleter(Protocol):
    def delete_object(
        self, bucket: str, key: str, version_id: str | None = None
    ) -> None: ...


class DeleteExecutor:
    """
    Deletes one object, version or delete marker, retrying failed calls.

    Failures are best effort: once the retry budget is spent the job is
    abandoned with a single warning and the caller carries on. A bucket left
    non-empty surfaces later, when the bucket itself is removed.

    Shared by every worker of a run; it holds no per-job state.
    """

    def __init__(
        self,
        store: ObjectDeleter,
        retry_policy: RetryPolicy,
        cancellation: Cancellation | None = None,
        stats: DeletionStats | None = None,
        logger: logging.Logger | None = None,
        verbose: bool = False,
    ) -> None:
        self.store = store
        self.retry_policy = retry_policy
        self.cancellation = cancellation or Cancellation()
        self.stats = stats or DeletionStats()
        self.logger = logger or module_logger
        self._success_level = logging.INFO if verbose else logging.DEBUG

    def delete_one(self, job: DeletionJob) -> Outcome:
        """
        Delete one entity, retrying store failures per the retry policy.

        Args:
            job: The object, version or delete marker to remove.

        Returns:
            SUCCESS once a call succeeds, FAILED when the attempt budget is
            spent, SKIPPED when the run was cancelled first.
        """
        attempt = 0
        while True:
            if self.cancellation.cancelled:
                return self._finish(Outcome.SKIPPED, attempt)
            attempt += 1
            try:
                self.store.delete_object(job.bucket, job.key, job.version_id)
            except StoreError as e:
                if not self.retry_policy.should_retry(attempt):
                    self.logger.warning(
                        f"Unable to delete {job.describe()} after {attempt} "
                        f"attempt(s): {e}"
                    )
                    return self._finish(Outcome.FAILED, attempt)
                delay = self.retry_policy.delay(attempt)
                self.logger.debug(
                    f"RT: {attempt} Unable to delete {job.describe()}, "
                    f"retrying in {delay:.2f}s: {e}"
                )
                if self.cancellation.sleep(delay):
                    return self._finish(Outcome.SKIPPED, attempt)
                continue

            if attempt > 1:
                self.logger.log(
                    self._success_level,
                    f"Deleted {job.describe()} after {attempt} attempts",
                )
            else:
                self.logger.log(self._success_level, f"Deleted {job.describe()}")
            return self._finish(Outcome.SUCCESS, attempt)

    def _finish(self, outcome: Outcome, attempts: int) -> Outcome:
        self.stats.record(outcome, attempts)
        return outcome
