"""
Unit tests for WorkerPool.
"""

import threading

import pytest

from s3_bucket_deleter import DeletionJob, WorkerPool


def _jobs(n):
    return [DeletionJob("bucket", f"key-{i}") for i in range(n)]


def test_every_job_reaches_exactly_one_worker():
    """More jobs than queue slots: nothing dropped, nothing duplicated."""
    seen = []
    lock = threading.Lock()

    def handler(job):
        with lock:
            seen.append(job.key)

    pool = WorkerPool.start(handler, workers=4, queue_size=2)
    for job in _jobs(500):
        pool.submit(job)
    pool.close()
    pool.wait()

    assert sorted(seen) == sorted(j.key for j in _jobs(500))
    assert pool.processed == 500


def test_submit_blocks_when_queue_is_full():
    release = threading.Event()
    pool = WorkerPool.start(lambda job: release.wait(5), workers=1, queue_size=1)
    pool.submit(DeletionJob("bucket", "held-by-worker"))
    # Fits once the worker has taken the first job
    pool.submit(DeletionJob("bucket", "fills-queue"))

    blocked = threading.Thread(
        target=pool.submit, args=(DeletionJob("bucket", "blocked"),)
    )
    blocked.start()
    blocked.join(0.2)
    assert blocked.is_alive()

    release.set()
    blocked.join(5)
    assert not blocked.is_alive()
    pool.close()
    pool.wait()
    assert pool.processed == 3


def test_submit_after_close_is_rejected():
    pool = WorkerPool.start(lambda job: None, workers=2, queue_size=2)
    pool.close()
    pool.wait()
    with pytest.raises(RuntimeError):
        pool.submit(DeletionJob("bucket", "late"))


def test_wait_requires_close():
    pool = WorkerPool.start(lambda job: None, workers=1, queue_size=1)
    with pytest.raises(RuntimeError):
        pool.wait()
    pool.close()
    pool.wait()


def test_handler_error_is_raised_from_wait_after_draining():
    handled = []

    def handler(job):
        if job.key == "key-3":
            raise KeyError("boom")
        handled.append(job.key)

    pool = WorkerPool.start(handler, workers=2, queue_size=1)
    for job in _jobs(10):
        pool.submit(job)
    pool.close()
    with pytest.raises(KeyError):
        pool.wait()
    assert len(handled) == 9
    assert pool.processed == 10


def test_invalid_sizes_rejected():
    with pytest.raises(ValueError):
        WorkerPool(lambda job: None, workers=0, queue_size=1)
    with pytest.raises(ValueError):
        WorkerPool(lambda job: None, workers=1, queue_size=0)
