"""
Fixed-size worker pool draining a bounded job queue.

A pool lives for one phase: start it, submit jobs, close it, wait for it.
`submit` blocks while the queue is full, which keeps memory bounded however
fast the listings come back.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Lock
from typing import Any

from .models import DeletionJob

logger = logging.getLogger(__name__)

_CLOSED = object()


class WorkerPool:
    """
    N worker threads sharing one bounded queue.

    Every submitted job is taken off the queue by exactly one worker. A
    handler exception is logged, the worker keeps draining, and the first
    such exception is raised again from `wait()`.

    Attributes:
        name: Label used in thread names and log lines.
        workers: Number of worker threads.
        processed: Jobs taken off the queue and handled so far.
    """

    def __init__(
        self,
        handler: Callable[[DeletionJob], Any],
        workers: int,
        queue_size: int,
        name: str = "delete",
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if queue_size < 1:
            raise ValueError("queue_size must be >= 1")
        self.handler = handler
        self.workers = workers
        self.name = name
        self.processed = 0
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
        self._executor: ThreadPoolExecutor | None = None
        self._futures: list = []
        self._errors: list[BaseException] = []
        self._lock = Lock()
        self._closed = False

    @classmethod
    def start(
        cls,
        handler: Callable[[DeletionJob], Any],
        workers: int,
        queue_size: int,
        name: str = "delete",
    ) -> WorkerPool:
        pool = cls(handler, workers, queue_size, name)
        pool._launch()
        return pool

    def _launch(self) -> None:
        if self._executor is not None:
            raise RuntimeError(f"Pool {self.name} already started")
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix=f"{self.name}-worker"
        )
        self._futures = [
            self._executor.submit(self._work) for _ in range(self.workers)
        ]

    def _work(self) -> None:
        while True:
            job = self._queue.get()
            if job is _CLOSED:
                return
            try:
                self.handler(job)
            except Exception as e:
                logger.exception(f"Worker in pool {self.name} failed on {job}")
                with self._lock:
                    self._errors.append(e)
            finally:
                with self._lock:
                    self.processed += 1

    def submit(self, job: DeletionJob) -> None:
        """Queue a job, blocking while the queue is full."""
        if self._closed:
            raise RuntimeError(f"Pool {self.name} is closed")
        if self._executor is None:
            raise RuntimeError(f"Pool {self.name} was never started")
        self._queue.put(job)

    def close(self) -> None:
        """Signal that no further jobs will be submitted."""
        if self._closed:
            return
        self._closed = True
        for _ in range(self.workers):
            self._queue.put(_CLOSED)

    def wait(self) -> None:
        """
        Block until every worker has seen the close signal and finished.

        Raises:
            Exception: The first exception raised by the handler, if any.
        """
        if not self._closed:
            raise RuntimeError(f"Pool {self.name} must be closed before waiting")
        if self._executor is None:
            return
        for future in as_completed(self._futures):
            future.result()
        self._executor.shutdown(wait=True)
        self._executor = None
        if self._errors:
            raise self._errors[0]
