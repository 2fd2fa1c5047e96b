"""
Conversion between UI token amounts and on-chain base units.

On-chain amounts are unsigned integers of base units (lamports for SOL,
micro-units for a 6-decimal stablecoin). Users configure trade sizes in
UI units, so every conversion into base units truncates toward zero.

The round trip ``to_base_units(to_ui_units(a, d), d)`` is therefore not
exact: it can land one unit below ``a`` when the float division is not
representable. That loss is accepted here and must not be "corrected" by
rounding up, since rounding up could spend more than the wallet holds.

The one-unit bound only holds for ``a < EXACT_ROUND_TRIP_LIMIT`` (2**52,
about 4.5 million SOL in lamports). Above it a float cannot carry every
base unit and the round trip may lose several.
"""

from typing import Final


MAX_DECIMALS: Final[int] = 18
EXACT_ROUND_TRIP_LIMIT: Final[int] = 2**52


def _check_decimals(decimals: int) -> None:
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be within 0..{MAX_DECIMALS}, got {decimals}")


def to_base_units(ui_amount: float, decimals: int) -> int:
    """
    Convert a UI amount to integer base units, truncating toward zero.

    Args:
        ui_amount: Human-readable amount (e.g. 1.5 SOL).
        decimals: Token decimal precision.

    Returns:
        Amount in base units.

    Example:
        >>> to_base_units(1.5, 9)
        1500000000
        >>> to_base_units(0.0000001, 6)
        0
    """
    _check_decimals(decimals)
    return int(ui_amount * 10**decimals)


def to_ui_units(amount: int, decimals: int) -> float:
    """
    Convert integer base units to a UI amount.

    Precision is lost for amounts at or above ``EXACT_ROUND_TRIP_LIMIT``.

    Example:
        >>> to_ui_units(1_500_000, 6)
        1.5
    """
    _check_decimals(decimals)
    return amount / 10**decimals


def profit_percent(amount_in: int, amount_out: int) -> float:
    """Signed round-trip profit of ``amount_out`` over ``amount_in``, in percent."""
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive, got {amount_in}")
    return (amount_out - amount_in) / amount_in * 100.0

