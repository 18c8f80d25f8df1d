"""Exponential backoff for per-object delete retries."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Stateless exponential backoff.

    Attempt numbers start at 1. After a failed attempt n the caller waits
    `delay(n)` seconds and tries again, as long as `should_retry(n)` holds.

    Attributes:
        initial_interval: Wait after the first failed attempt, in seconds.
        multiplier: Growth factor between consecutive waits.
        max_interval: Upper bound for a single wait.
        max_attempts: Total attempts allowed, including the first one.
        randomization_factor: Jitter as a fraction of the interval; 0 disables it.
    """

    initial_interval: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 60.0
    max_attempts: int = 10
    randomization_factor: float = 0.5

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_interval < 0 or self.max_interval < 0:
            raise ValueError("intervals must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if not 0 <= self.randomization_factor < 1:
            raise ValueError("randomization_factor must be in [0, 1)")

    @classmethod
    def no_wait(cls, max_attempts: int = 3) -> RetryPolicy:
        """Policy that retries immediately; used when waiting is pointless."""
        return cls(
            initial_interval=0.0,
            max_interval=0.0,
            max_attempts=max_attempts,
            randomization_factor=0.0,
        )

    def should_retry(self, attempt: int) -> bool:
        """
        Decide whether another attempt is allowed.

        Args:
            attempt: Number of the attempt that just failed, starting at 1.

        Returns:
            True while the attempt budget is not spent.
        """
        return attempt < self.max_attempts

    def _base_interval(self, attempt: int) -> float:
        if (
            self.initial_interval == 0
            or self.multiplier == 1
            or self.max_interval <= self.initial_interval
        ):
            return min(self.initial_interval, self.max_interval)
        # Past the cap the interval stops growing, so the power is never taken there
        to_cap = math.log(self.max_interval, self.multiplier) - math.log(
            self.initial_interval, self.multiplier
        )
        if attempt - 1 >= to_cap:
            return self.max_interval
        return self.initial_interval * self.multiplier ** (attempt - 1)

    def delay(self, attempt: int) -> float:
        """
        Seconds to wait after failed attempt `attempt`.

        Args:
            attempt: Number of the attempt that just failed, starting at 1.

        Returns:
            The capped, optionally jittered, interval.
        """
        interval = self._base_interval(attempt)
        if self.randomization_factor:
            spread = interval * self.randomization_factor
            interval = random.uniform(interval - spread, interval + spread)
        return min(interval, self.max_interval)
