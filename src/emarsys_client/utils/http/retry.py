"""Retry policy for Emarsys API requests.

This module describes how often, and how long apart, a request is retried.
Delays grow exponentially and carry jitter so that clients retrying the
same failure do not hit the API in lockstep.

The retry loop itself lives in the client; only errors flagged as
retryable are retried.
"""

import random
from dataclasses import dataclass
from typing import Iterator, Optional

DEFAULT_MAX_RETRIES = 5


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with jitter, bounded by a retry count.

    The delay before retry ``n`` is drawn uniformly from
    ``interval * (1 - randomization_factor)`` to
    ``interval * (1 + randomization_factor)``, after which ``interval`` is
    multiplied by ``multiplier`` (up to ``max_interval``).

    :param max_retries: Retries after the first attempt
    :type max_retries: int
    :param initial_interval: First delay in seconds, before jitter
    :type initial_interval: float
    :param multiplier: Growth factor applied after each retry
    :type multiplier: float
    :param randomization_factor: Relative jitter applied to each delay
    :type randomization_factor: float
    :param max_interval: Upper bound for the un-jittered delay in seconds
    :type max_interval: float
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_interval: float = 0.5
    multiplier: float = 1.5
    randomization_factor: float = 0.5
    max_interval: float = 60.0

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_interval < 0 or self.max_interval < 0:
            raise ValueError("intervals must be >= 0")
        if not 0 <= self.randomization_factor <= 1:
            raise ValueError("randomization_factor must be between 0 and 1")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def intervals(self, rng: Optional[random.Random] = None) -> Iterator[float]:
        """Yield the delay before each retry, ``max_retries`` values in total."""
        uniform = (rng or random).uniform
        interval = self.initial_interval
        for _ in range(self.max_retries):
            delta = interval * self.randomization_factor
            yield uniform(interval - delta, interval + delta)
            interval = min(interval * self.multiplier, self.max_interval)

    @classmethod
    def no_delay(cls, max_retries: int = DEFAULT_MAX_RETRIES) -> "RetryPolicy":
        """Same retry budget, zero sleep between attempts."""
        return cls(
            max_retries=max_retries,
            initial_interval=0.0,
            randomization_factor=0.0,
        )
