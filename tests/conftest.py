"""
Pytest fixtures and an in-memory object store for the deleter tests.
"""

import threading
import time
from collections import Counter

import pytest

from s3_bucket_deleter import RetryPolicy, StoreError


def version_page(markers=(), versions=(), truncated=False):
    """Build a raw list_object_versions page from (key, version_id) pairs."""
    return {
        "DeleteMarkers": [{"Key": k, "VersionId": v} for k, v in markers],
        "Versions": [{"Key": k, "VersionId": v} for k, v in versions],
        "IsTruncated": truncated,
    }


def object_page(keys=(), truncated=False):
    """Build a raw list_objects_v2 page from keys."""
    return {
        "Contents": [{"Key": k} for k in keys],
        "KeyCount": len(keys),
        "IsTruncated": truncated,
    }


class FakeStore:
    """
    Scripted object store.

    Listings replay the given raw pages. Every call is appended to `calls`
    in the order it reached the store. Entries listed but never deleted make
    `delete_bucket` fail with BucketNotEmpty.
    """

    def __init__(
        self,
        version_pages=None,
        object_pages=None,
        failures=None,
        version_listing_error_at=None,
        object_listing_error_at=None,
        delete_delay=0.0,
    ):
        self.version_pages = version_pages or [version_page()]
        self.object_pages = object_pages or [object_page()]
        # (key, version_id) -> failures before success; -1 fails forever
        self.failures = dict(failures or {})
        self.version_listing_error_at = version_listing_error_at
        self.object_listing_error_at = object_listing_error_at
        self.delete_delay = delete_delay
        self.calls = []
        self.attempts = Counter()
        self.deleted = set()
        self._lock = threading.Lock()

        self.contents = set()
        for page in self.version_pages:
            for entry in page.get("DeleteMarkers", []) + page.get("Versions", []):
                self.contents.add((entry["Key"], entry["VersionId"]))
        for page in self.object_pages:
            for entry in page.get("Contents", []):
                self.contents.add((entry["Key"], None))

    def _record(self, call):
        with self._lock:
            self.calls.append(call)

    def list_object_versions_pages(self, bucket):
        for number, page in enumerate(self.version_pages, 1):
            self._record(("list_versions", number))
            if number == self.version_listing_error_at:
                raise StoreError("listing exploded", "InternalError")
            yield page

    def list_objects_pages(self, bucket):
        for number, page in enumerate(self.object_pages, 1):
            self._record(("list_objects", number))
            if number == self.object_listing_error_at:
                raise StoreError("listing exploded", "InternalError")
            yield page

    def delete_object(self, bucket, key, version_id=None):
        self._record(("delete", key, version_id))
        if self.delete_delay:
            time.sleep(self.delete_delay)
        with self._lock:
            self.attempts[(key, version_id)] += 1
            remaining = self.failures.get((key, version_id), 0)
            if remaining == -1:
                raise StoreError(f"cannot delete {key}", "InternalError")
            if remaining > 0:
                self.failures[(key, version_id)] = remaining - 1
                raise StoreError(f"cannot delete {key} yet", "SlowDown")
            self.deleted.add((key, version_id))

    def delete_bucket(self, bucket):
        self._record(("delete_bucket", bucket))
        if self.contents - self.deleted:
            raise StoreError(
                "The bucket you tried to delete is not empty", "BucketNotEmpty"
            )

    def deletes(self):
        return [c for c in self.calls if c[0] == "delete"]


@pytest.fixture
def fast_retry():
    """Three attempts, no waiting."""
    return RetryPolicy.no_wait(max_attempts=3)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


class BrokenDeleteStore(FakeStore):
    """Store whose deletes fail with a non-store error."""

    def delete_object(self, bucket, key, version_id=None):
        self._record(("delete", key, version_id))
        raise TypeError("unexpected")


class InterruptedListingStore(FakeStore):
    """Store whose version listing is interrupted by Ctrl-C."""

    def list_object_versions_pages(self, bucket):
        self._record(("list_versions", 1))
        raise KeyboardInterrupt
        yield  # pragma: no cover
