"""Cooperative cancellation shared by the producer, workers and backoff sleeps."""

from __future__ import annotations

import threading
import time

from .errors import RunCancelled


class Cancellation:
    """
    A cancel flag with an optional deadline.

    Every blocking step of a run checks the token: before each listing call,
    before each delete attempt, and while sleeping between retries.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def sleep(self, seconds: float) -> bool:
        """
        Sleep for up to `seconds`, waking early on cancellation.

        Returns:
            True if the token was cancelled before or during the sleep.
        """
        if self.cancelled:
            return True
        if seconds <= 0:
            return False
        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            self._event.wait(remaining)
            self._event.set()
            return True
        return self._event.wait(seconds) or self.cancelled

    def check(self, where: str) -> None:
        """Raise RunCancelled if the token has fired."""
        if self.cancelled:
            raise RunCancelled(f"Run cancelled before {where}")
