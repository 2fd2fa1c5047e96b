"""
Time utilities.

Microsecond timestamps for latency measurement and ISO timestamps
for trade records.
"""

import time
from datetime import UTC, datetime


def get_timestamp_us() -> int:
    """Current Unix timestamp in microseconds."""
    return time.time_ns() // 1000


def get_monotonic_us() -> int:
    """
    Monotonic clock reading in microseconds.

    Use for elapsed-time measurement; it does not jump when the
    wall clock is adjusted.
    """
    return time.monotonic_ns() // 1000


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(tz=UTC).isoformat()


class LatencyTimer:
    """
    Context manager for measuring operation latency.

    Example:
        >>> with LatencyTimer() as timer:
        ...     do_something()
        >>> print(f"Latency: {timer.latency_us}μs")
    """

    __slots__ = ("start_us", "end_us", "latency_us")

    def __init__(self) -> None:
        self.start_us: int = 0
        self.end_us: int = 0
        self.latency_us: int = 0

    def __enter__(self) -> "LatencyTimer":
        self.start_us = get_monotonic_us()
        return self

    def __exit__(self, *args: object) -> None:
        self.end_us = get_monotonic_us()
        self.latency_us = self.end_us - self.start_us


def format_duration_us(duration_us: int) -> str:
    """
    Format a duration in microseconds for human-readable display.

    Examples:
        >>> format_duration_us(500)
        '500μs'
        >>> format_duration_us(1500)
        '1.50ms'
        >>> format_duration_us(1500000)
        '1.50s'
    """
    if duration_us < 1000:
        return f"{duration_us}μs"
    elif duration_us < 1_000_000:
        return f"{duration_us / 1000:.2f}ms"
    else:
        return f"{duration_us / 1_000_000:.2f}s"
