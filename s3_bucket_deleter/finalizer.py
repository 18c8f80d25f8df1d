"""Removes the bucket once it has been emptied."""

from __future__ import annotations

import logging
from typing import Protocol

from .errors import FinalizeError, StoreError

module_logger = logging.getLogger(__name__)


class BucketRemover(Protocol):
    def delete_bucket(self, bucket: str) -> None: ...


def finalize_bucket(
    store: BucketRemover,
    bucket: str,
    abandoned: int = 0,
    logger: logging.Logger | None = None,
) -> None:
    """
    Delete the bucket itself. Called once, after every content phase drained.

    There is no retry here: a failure means either abandoned deletes left
    content behind or something changed the bucket underneath us.

    Args:
        store: Object store to call.
        bucket: Name of the bucket to delete.
        abandoned: Number of deletes given up on, reported on failure.
        logger: Logger for progress lines.

    Raises:
        FinalizeError: If the bucket could not be removed.
    """
    logger = logger or module_logger
    logger.info(f"Deleting bucket {bucket}...")
    try:
        store.delete_bucket(bucket)
    except StoreError as e:
        message = f"Unable to delete bucket {bucket}: {e}"
        if e.code == "BucketNotEmpty" or abandoned:
            message += f" ({abandoned} delete(s) were abandoned)"
        raise FinalizeError(message) from e
    logger.info(f"Deleted bucket {bucket}")
