"""Token bucket rate limiter for venue REST APIs."""

import asyncio
import time
from dataclasses import dataclass, field

from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.rate_limiter")


@dataclass
class TokenBucket:
    """Token bucket for rate limiting."""

    capacity: float
    refill_rate: float  # tokens per second
    tokens: float = field(default=0.0)
    last_refill: float = field(default_factory=time.monotonic)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self) -> None:
        """Initialize bucket with full capacity."""
        if self.capacity <= 0 or self.refill_rate <= 0:
            raise ValueError("capacity and refill_rate must be positive")
        self.tokens = self.capacity

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    async def acquire(self, tokens: float = 1.0) -> float:
        """
        Acquire tokens, waiting if necessary.

        Args:
            tokens: Number of tokens to acquire

        Returns:
            Time waited in seconds
        """
        async with self._lock:
            self._refill()

            wait_time = 0.0
            if self.tokens < tokens:
                deficit = tokens - self.tokens
                wait_time = deficit / self.refill_rate
                await asyncio.sleep(wait_time)
                self._refill()

            self.tokens -= tokens
            return wait_time


class RateLimiter:
    """
    Per-venue request pacing.

    Public market-data endpoints are limited per IP; each provider owns one
    limiter sized for its venue.
    """

    def __init__(self, name: str, requests_per_second: float = 10.0) -> None:
        """
        Initialize rate limiter.

        Args:
            name: Venue name (for log messages)
            requests_per_second: Sustained request rate, also the burst size
        """
        self.name = name
        self._bucket = TokenBucket(
            capacity=max(requests_per_second, 1.0),
            refill_rate=requests_per_second,
        )

    async def acquire(self) -> float:
        """
        Acquire a request slot.

        Returns:
            Time waited in seconds
        """
        wait_time = await self._bucket.acquire()
        if wait_time > 0:
            logger.debug(f"{self.name} request waited {wait_time:.3f}s due to rate limit")
        return wait_time

