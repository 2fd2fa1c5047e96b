"""Utility functions for the arbitrage engine."""

from jupiter_arb.utils.addresses import short_address, validate_mint_address
from jupiter_arb.utils.amounts import (
    profit_percent,
    to_base_units,
    to_ui_units,
)
from jupiter_arb.utils.time import (
    LatencyTimer,
    format_duration_us,
    get_monotonic_us,
    get_timestamp_us,
    utc_now_iso,
)


__all__ = [
    "LatencyTimer",
    "format_duration_us",
    "get_monotonic_us",
    "get_timestamp_us",
    "profit_percent",
    "short_address",
    "to_base_units",
    "to_ui_units",
    "utc_now_iso",
    "validate_mint_address",
]
