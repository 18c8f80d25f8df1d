"""Run configuration."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from .errors import UsageError
from .retry import RetryPolicy

DEFAULT_WORKERS = 50
DEFAULT_REGION_HINT = "us-west-2"


@dataclass
class DeleterConfig:
    """Configuration settings for a bucket deletion run."""

    bucket: str
    workers: int = DEFAULT_WORKERS
    queue_size: int | None = None
    max_retries: int = 10
    retry_delay: float = 0.5
    retry_multiplier: float = 1.5
    max_retry_delay: float = 60.0
    retry_jitter: float = 0.5
    timeout: float | None = None
    region: str | None = None
    region_hint: str = DEFAULT_REGION_HINT
    profile: str | None = None
    endpoint_url: str | None = None
    connection_pool_size: int | None = None
    verbose: bool = False
    assume_yes: bool = False

    def __post_init__(self) -> None:
        if self.queue_size is None:
            self.queue_size = self.workers * 2
        if self.connection_pool_size is None:
            self.connection_pool_size = self.workers

    @classmethod
    def from_arguments(cls, args: argparse.Namespace) -> DeleterConfig:
        """
        Create configuration from parsed command line arguments.

        Raises:
            UsageError: If the bucket name is missing or a setting is invalid.
        """
        config = cls(
            bucket=(args.bucket or "").strip(),
            workers=args.workers,
            queue_size=args.queue_size,
            max_retries=args.max_retries,
            timeout=args.timeout,
            region=args.region,
            profile=args.profile,
            endpoint_url=args.endpoint_url,
            verbose=args.verbose,
            assume_yes=args.yes,
        )
        config.validate()
        return config

    def validate(self) -> None:
        if not self.bucket:
            raise UsageError("You must specify a bucket name with -b/--bucket")
        if self.workers < 1:
            raise UsageError(f"Worker count must be positive, got {self.workers}")
        if self.queue_size is not None and self.queue_size < 1:
            raise UsageError(f"Queue size must be positive, got {self.queue_size}")
        if self.max_retries < 1:
            raise UsageError(
                f"Retry attempts must be positive, got {self.max_retries}"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise UsageError(f"Timeout must be positive, got {self.timeout}")

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            initial_interval=self.retry_delay,
            multiplier=self.retry_multiplier,
            max_interval=self.max_retry_delay,
            max_attempts=self.max_retries,
            randomization_factor=self.retry_jitter,
        )
