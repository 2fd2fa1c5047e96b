"""
Token bucket rate limiter for gateway requests.

Keeps quote fan-out within the aggregator's public rate limits. Quote
and swap-build requests draw from separate buckets so a burst of quotes
never delays building an execution transaction.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Final

from jupiter_arb.utils.time import get_monotonic_us


DEFAULT_QUOTES_PER_SECOND: Final[float] = 10.0
DEFAULT_SWAPS_PER_SECOND: Final[float] = 2.0


@dataclass
class TokenBucket:
    """
    Token bucket implementation for rate limiting.

    Tokens are added at a constant rate up to a maximum capacity.
    Each request consumes one token.
    """

    capacity: float
    refill_rate: float  # tokens per second
    tokens: float = field(init=False)
    last_refill_us: int = field(init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.refill_rate <= 0:
            raise ValueError(f"refill_rate must be positive, got {self.refill_rate}")
        self.tokens = float(self.capacity)
        self.last_refill_us = get_monotonic_us()

    def _refill(self) -> None:
        now = get_monotonic_us()
        elapsed_seconds = (now - self.last_refill_us) / 1_000_000
        self.tokens = min(self.capacity, self.tokens + elapsed_seconds * self.refill_rate)
        self.last_refill_us = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            self._refill()

            if self.tokens < 1.0:
                wait_seconds = (1.0 - self.tokens) / self.refill_rate
                await asyncio.sleep(wait_seconds)
                self._refill()

            self.tokens -= 1.0

    def try_acquire(self) -> bool:
        """Take one token without waiting."""
        self._refill()
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False


class RateLimiter:
    """Separate buckets for quote and swap-build requests."""

    def __init__(
        self,
        quotes_per_second: float = DEFAULT_QUOTES_PER_SECOND,
        swaps_per_second: float = DEFAULT_SWAPS_PER_SECOND,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            quotes_per_second: Sustained quote request rate.
            swaps_per_second: Sustained swap-build request rate.
        """
        # Burst capacity of one second's worth of requests
        self._quote_bucket = TokenBucket(capacity=max(quotes_per_second, 1.0), refill_rate=quotes_per_second)
        self._swap_bucket = TokenBucket(capacity=max(swaps_per_second, 1.0), refill_rate=swaps_per_second)

    async def acquire_quote(self) -> None:
        await self._quote_bucket.acquire()

    async def acquire_swap(self) -> None:
        await self._swap_bucket.acquire()

    @property
    def available_quotes(self) -> float:
        return self._quote_bucket.tokens
