"""Exception hierarchy for the bucket deleter."""

from __future__ import annotations


class DeleterError(Exception):
    """Base class for every error raised by this package."""


class StoreError(DeleterError):
    """
    A single call against the object store failed.

    Attributes:
        code: Backend error code (e.g. 'AccessDenied', 'BucketNotEmpty'),
            empty when the failure happened below the HTTP layer.
    """

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.code = code


class FatalError(DeleterError):
    """An error that terminates the whole run."""


class UsageError(FatalError):
    """Invalid invocation: missing bucket name, bad settings, unknown region."""


class ListingError(FatalError):
    """A paged listing call failed. Listings are never retried here."""


class FinalizeError(FatalError):
    """The final bucket removal failed."""


class RunCancelled(FatalError):
    """The run was cancelled or ran past its deadline."""
