"""Find the region a bucket lives in before any client work starts."""

from __future__ import annotations

import logging

import botocore.exceptions
import requests

from .config import DeleterConfig
from .errors import UsageError
from .store import build_boto_config, build_session

logger = logging.getLogger(__name__)

REGION_HEADER = "x-amz-bucket-region"


def _probe_region(
    bucket_name: str, region_hint: str, timeout: float = 10.0
) -> str | None:
    """
    Ask S3 where a bucket lives with an unsigned HEAD request.

    S3 answers with the bucket's region in a response header even when
    the request itself is refused (301, 403), so no credentials are needed.

    Args:
        bucket_name: Name of the bucket.
        region_hint: Region whose endpoint receives the probe.
        timeout: Request timeout in seconds.

    Returns:
        The region, or None when the endpoint did not say.
    """
    url = f"https://s3.{region_hint}.amazonaws.com/{bucket_name}"
    try:
        response = requests.head(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        logger.warning(f"Region probe for {bucket_name} failed: {e}")
        return None
    if response.status_code == 404:
        raise UsageError(f"Unable to find bucket for {bucket_name}")
    return response.headers.get(REGION_HEADER) or None


def _location_constraint(config: DeleterConfig) -> str:
    try:
        session = build_session(config, config.region_hint)
        client = session.client(
            "s3", endpoint_url=config.endpoint_url, config=build_boto_config(config)
        )
        response = client.get_bucket_location(Bucket=config.bucket)
    except (
        botocore.exceptions.ClientError,
        botocore.exceptions.BotoCoreError,
    ) as e:
        raise UsageError(f"Unable to find bucket for {config.bucket}: {e}") from e
    location = response.get("LocationConstraint")
    return "us-east-1" if not location else location


def get_bucket_region(config: DeleterConfig) -> str:
    """
    Determine the region of the configured bucket.

    An explicit region wins. Custom endpoints (MinIO, Wasabi, Ceph) are asked
    through GetBucketLocation; AWS is probed first and falls back to the
    same call.

    Raises:
        UsageError: If the bucket cannot be located.
    """
    if config.region:
        return config.region
    if not config.endpoint_url:
        region = _probe_region(config.bucket, config.region_hint)
        if region:
            return region
    return _location_constraint(config)
