"""Backoff strategy used by the transport for transient failures.

Example:
    >>> strategy = ExponentialBackoff(max_retries=3, base_delay=0.5, max_delay=8.0)
    >>> [strategy.should_retry(a) for a in range(4)]
    [True, True, True, False]
"""

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class ExponentialBackoff:
    """Exponential backoff with optional jitter.

    Delay = min(base_delay * (multiplier ** attempt), max_delay) +/- jitter

    Attributes:
        max_retries: Maximum number of retries after the first attempt
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds
        multiplier: Exponential multiplier
        jitter: Add randomness to prevent thundering herd
        jitter_range: Range of jitter as fraction of delay (0.0-1.0)
    """

    max_retries: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0
    multiplier: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.25

    def next_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Delay before retry number ``attempt`` (zero-based).

        A server-supplied ``Retry-After`` wins, capped at ``max_delay``.
        """
        if retry_after is not None:
            return max(0.0, min(retry_after, self.max_delay))

        delay = min(self.base_delay * (self.multiplier ** attempt), self.max_delay)
        if self.jitter:
            jitter_amount = delay * self.jitter_range
            delay += random.uniform(-jitter_amount, jitter_amount)
            delay = max(0.0, delay)
        return delay

    def should_retry(self, attempt: int) -> bool:
        """True while fewer than ``max_retries`` retries have been made."""
        return attempt < self.max_retries
