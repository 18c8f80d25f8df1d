"""
boto3 adapter exposing the small object-store surface the deleter needs.

One client is shared by every worker thread. boto3 clients are thread-safe
and pool their own connections, so no extra locking happens here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

import boto3
import botocore.config
import botocore.exceptions

from .errors import StoreError, UsageError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

    from .config import DeleterConfig

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000
STORE_ERRORS = (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError)


def error_code(exc: Exception) -> str:
    """Backend error code of a botocore exception, empty if there is none."""
    if isinstance(exc, botocore.exceptions.ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def build_session(
    config: DeleterConfig, region: str | None = None
) -> boto3.session.Session:
    """Session backed by the shared AWS config and credential files."""
    return boto3.session.Session(profile_name=config.profile, region_name=region)


def build_boto_config(config: DeleterConfig) -> botocore.config.Config:
    return botocore.config.Config(
        max_pool_connections=config.connection_pool_size,
        retries={"max_attempts": 3, "mode": "standard"},
    )


class S3Store:
    """
    Object store backed by an S3 (or S3-compatible) client.

    Attributes:
        client: The shared boto3 S3 client.
        page_size: Entries requested per listing page.
    """

    def __init__(self, client: S3Client, page_size: int = PAGE_SIZE) -> None:
        self.client = client
        self.page_size = page_size

    @classmethod
    def from_config(cls, config: DeleterConfig, region: str) -> S3Store:
        """
        Build a store whose client is bound to the bucket's region.

        Args:
            config: Run configuration (profile, endpoint, pool size).
            region: Region the bucket lives in.

        Returns:
            A store sharing one client across all workers.

        Raises:
            UsageError: If the session or client cannot be created.
        """
        try:
            session = build_session(config, region)
            client = session.client(
                "s3",
                region_name=region,
                endpoint_url=config.endpoint_url,
                config=build_boto_config(config),
            )
        except botocore.exceptions.BotoCoreError as e:
            raise UsageError(f"Unable to setup s3 connection: {e}") from e
        logger.debug(f"Created S3 client for region {region}")
        return cls(client)

    def _pages(self, operation: str, bucket: str) -> Iterator[dict[str, Any]]:
        paginator = self.client.get_paginator(operation)
        pages = iter(
            paginator.paginate(
                Bucket=bucket, PaginationConfig={"PageSize": self.page_size}
            )
        )
        while True:
            try:
                page = next(pages)
            except StopIteration:
                return
            except STORE_ERRORS as e:
                raise StoreError(
                    f"{operation} failed for bucket {bucket}: {e}", error_code(e)
                ) from e
            yield page

    def list_object_versions_pages(self, bucket: str) -> Iterator[dict[str, Any]]:
        """Raw `list_object_versions` pages; each `next()` is one request."""
        return self._pages("list_object_versions", bucket)

    def list_objects_pages(self, bucket: str) -> Iterator[dict[str, Any]]:
        """Raw `list_objects_v2` pages; each `next()` is one request."""
        return self._pages("list_objects_v2", bucket)

    def delete_object(
        self, bucket: str, key: str, version_id: str | None = None
    ) -> None:
        """
        Delete one object, or one version of it when `version_id` is given.

        Args:
            bucket: Name of the bucket.
            key: Object key.
            version_id: Version or delete marker id; None for a plain delete.

        Raises:
            StoreError: If the request fails.
        """
        delete_kwargs = {"Bucket": bucket, "Key": key}
        if version_id:
            delete_kwargs["VersionId"] = version_id
        try:
            self.client.delete_object(**delete_kwargs)
        except STORE_ERRORS as e:
            raise StoreError(f"Unable to delete {key!r}: {e}", error_code(e)) from e

    def delete_bucket(self, bucket: str) -> None:
        """
        Delete the (empty) bucket.

        Raises:
            StoreError: If the request fails, e.g. with BucketNotEmpty.
        """
        try:
            self.client.delete_bucket(Bucket=bucket)
        except STORE_ERRORS as e:
            raise StoreError(
                f"Unable to delete bucket {bucket}: {e}", error_code(e)
            ) from e
