"""Bulk deletion of versioned S3 buckets."""

from .cancel import Cancellation
from .config import DeleterConfig
from .coordinator import BucketDeleter, Phase
from .errors import (
    DeleterError,
    FatalError,
    FinalizeError,
    ListingError,
    RunCancelled,
    StoreError,
    UsageError,
)
from .executor import DeleteExecutor
from .models import DeletionJob, DeletionStats, JobKind, Outcome, Page
from .pool import WorkerPool
from .producer import PageProducer
from .retry import RetryPolicy

__version__ = "0.1.0"

__all__ = [
    "BucketDeleter",
    "Cancellation",
    "DeleteExecutor",
    "DeleterConfig",
    "DeleterError",
    "DeletionJob",
    "DeletionStats",
    "FatalError",
    "FinalizeError",
    "JobKind",
    "ListingError",
    "Outcome",
    "Page",
    "PageProducer",
    "Phase",
    "RetryPolicy",
    "RunCancelled",
    "StoreError",
    "UsageError",
    "WorkerPool",
]
