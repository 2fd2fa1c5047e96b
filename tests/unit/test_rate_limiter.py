"""
Unit tests for the token bucket rate limiter.
"""

import pytest

from jupiter_arb.gateway.rate_limiter import RateLimiter, TokenBucket
from jupiter_arb.utils.time import get_monotonic_us


class TestTokenBucket:
    """Tests for TokenBucket."""

    def test_starts_full(self) -> None:
        bucket = TokenBucket(capacity=3, refill_rate=1.0)

        assert bucket.try_acquire()
        assert bucket.try_acquire()
        assert bucket.try_acquire()
        assert not bucket.try_acquire()

    def test_rejects_non_positive_rate(self) -> None:
        with pytest.raises(ValueError):
            TokenBucket(capacity=1, refill_rate=0)

    @pytest.mark.asyncio
    async def test_acquire_waits_for_refill(self) -> None:
        bucket = TokenBucket(capacity=1, refill_rate=50.0)
        await bucket.acquire()

        start = get_monotonic_us()
        await bucket.acquire()
        elapsed_us = get_monotonic_us() - start

        # One token at 50/s takes about 20ms
        assert elapsed_us >= 10_000


class TestRateLimiter:
    """Tests for RateLimiter."""

    @pytest.mark.asyncio
    async def test_quote_and_swap_buckets_are_separate(self) -> None:
        limiter = RateLimiter(quotes_per_second=1.0, swaps_per_second=1.0)

        await limiter.acquire_quote()
        assert limiter.available_quotes < 1.0

        # The swap bucket is still full, so this does not wait
        start = get_monotonic_us()
        await limiter.acquire_swap()
        assert get_monotonic_us() - start < 500_000

    def test_burst_capacity(self) -> None:
        limiter = RateLimiter(quotes_per_second=5.0)

        assert limiter.available_quotes == 5.0
