"""Walks paged listings and turns each entry into a DeletionJob."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Protocol

from .cancel import Cancellation
from .errors import ListingError, StoreError
from .models import DeletionJob, JobKind, Page

module_logger = logging.getLogger(__name__)


class PagedLister(Protocol):
    def list_object_versions_pages(self, bucket: str) -> Iterator[dict[str, Any]]: ...

    def list_objects_pages(self, bucket: str) -> Iterator[dict[str, Any]]: ...


class PageProducer:
    """
    Lazily yields listing pages in the order the backend returns them.

    Pages are never skipped, reordered or merged; empty pages come through
    as empty Page objects. Any listing failure ends the run as ListingError.
    """

    def __init__(
        self,
        store: PagedLister,
        cancellation: Cancellation | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.cancellation = cancellation or Cancellation()
        self.logger = logger or module_logger

    def _walk(
        self, pages: Iterator[dict[str, Any]], bucket: str, what: str
    ) -> Iterator[tuple[int, dict[str, Any]]]:
        number = 0
        while True:
            self.cancellation.check(f"listing {what} page {number + 1} of {bucket}")
            try:
                raw = next(pages)
            except StopIteration:
                return
            except StoreError as e:
                raise ListingError(f"Unable to list {what} for {bucket}: {e}") from e
            number += 1
            yield number, raw

    def list_versions_and_markers(self, bucket: str) -> Iterator[Page]:
        """
        Yield the version listing page by page.

        Args:
            bucket: Name of the bucket.

        Returns:
            Pages carrying marker and version jobs.

        Raises:
            ListingError: If a listing request fails.
            RunCancelled: If the run is cancelled before a request.
        """
        pages = iter(self.store.list_object_versions_pages(bucket))
        for number, raw in self._walk(pages, bucket, "object versions"):
            page = Page(
                number=number,
                markers=[
                    DeletionJob(bucket, m["Key"], m["VersionId"], JobKind.MARKER)
                    for m in raw.get("DeleteMarkers", [])
                ],
                versions=[
                    DeletionJob(bucket, v["Key"], v["VersionId"], JobKind.VERSION)
                    for v in raw.get("Versions", [])
                ],
                is_last=not raw.get("IsTruncated", False),
            )
            self.logger.debug(
                f"Versions page {number}: {len(page.markers)} markers, "
                f"{len(page.versions)} versions"
            )
            yield page

    def list_objects(self, bucket: str) -> Iterator[Page]:
        """
        Yield the plain object listing page by page.

        Args:
            bucket: Name of the bucket.

        Returns:
            Pages carrying object jobs without version ids.

        Raises:
            ListingError: If a listing request fails.
            RunCancelled: If the run is cancelled before a request.
        """
        pages = iter(self.store.list_objects_pages(bucket))
        for number, raw in self._walk(pages, bucket, "objects"):
            page = Page(
                number=number,
                objects=[
                    DeletionJob(bucket, content["Key"], None, JobKind.OBJECT)
                    for content in raw.get("Contents", [])
                ],
                is_last=not raw.get("IsTruncated", False),
            )
            self.logger.debug(f"Objects page {number}: {len(page.objects)} objects")
            yield page
