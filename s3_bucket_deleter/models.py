"""Jobs, listing pages, outcomes and run statistics."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from threading import Lock


class JobKind(enum.Enum):
    MARKER = "Marker"
    VERSION = "Version"
    OBJECT = "Object"


@dataclass(frozen=True)
class DeletionJob:
    """One deletable entity: a plain object, an object version, or a delete marker."""

    bucket: str
    key: str
    version_id: str | None = None
    kind: JobKind = JobKind.OBJECT

    def describe(self) -> str:
        if self.version_id:
            return f"{self.kind.value} {self.key!r} ({self.version_id})"
        return f"{self.kind.value} {self.key!r}"


@dataclass
class Page:
    """
    One page of a listing.

    Version listings fill `markers` and `versions`; object listings fill
    `objects`. A page with no entries is still a page.
    """

    number: int
    markers: list[DeletionJob] = field(default_factory=list)
    versions: list[DeletionJob] = field(default_factory=list)
    objects: list[DeletionJob] = field(default_factory=list)
    is_last: bool = True

    def __len__(self) -> int:
        return len(self.markers) + len(self.versions) + len(self.objects)


class Outcome(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"  # retry budget exhausted, job abandoned
    SKIPPED = "skipped"  # run cancelled before the job was attempted


@dataclass
class DeletionStats:
    """Statistics for tracking deletion progress."""

    deleted: int = 0
    retried: int = 0
    abandoned: int = 0
    skipped: int = 0
    started_at: float = field(default_factory=time.monotonic)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def record(self, outcome: Outcome, attempts: int = 1) -> None:
        """Thread-safe accounting of one finished job."""
        with self._lock:
            if outcome is Outcome.SUCCESS:
                self.deleted += 1
            elif outcome is Outcome.FAILED:
                self.abandoned += 1
            else:
                self.skipped += 1
            self.retried += max(0, attempts - 1)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def summary(self) -> str:
        with self._lock:
            elapsed = self.elapsed
            rate = self.deleted / elapsed if elapsed > 0 else 0
            return (
                f"deleted={self.deleted} retried={self.retried} "
                f"abandoned={self.abandoned} skipped={self.skipped} "
                f"elapsed={elapsed:.2f}s rate={rate:.1f}/s"
            )
