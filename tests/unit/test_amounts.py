"""
Unit tests for amount conversion and address helpers.
"""

import pytest

from jupiter_arb.utils.addresses import short_address, validate_mint_address
from jupiter_arb.utils.amounts import EXACT_ROUND_TRIP_LIMIT, profit_percent, to_base_units, to_ui_units
from tests.mocks.factories import SOL


class TestToBaseUnits:
    """Tests for to_base_units."""

    def test_whole_and_fractional(self) -> None:
        assert to_base_units(1.5, 9) == 1_500_000_000
        assert to_base_units(2, 6) == 2_000_000
        assert to_base_units(7, 0) == 7

    def test_truncates_toward_zero(self) -> None:
        """Sub-unit remainders are dropped, never rounded up."""
        assert to_base_units(0.0000001, 6) == 0
        assert to_base_units(1.2345678, 6) == 1_234_567
        assert to_base_units(0.9999999999, 9) == 999_999_999

    @pytest.mark.parametrize("decimals", [-1, 19])
    def test_rejects_invalid_decimals(self, decimals: int) -> None:
        with pytest.raises(ValueError):
            to_base_units(1.0, decimals)


class TestToUiUnits:
    """Tests for to_ui_units."""

    def test_scales_down(self) -> None:
        assert to_ui_units(1_500_000, 6) == 1.5
        assert to_ui_units(1, 9) == pytest.approx(1e-9)
        assert to_ui_units(42, 0) == 42.0

    def test_rejects_invalid_decimals(self) -> None:
        with pytest.raises(ValueError):
            to_ui_units(1, 25)

    @pytest.mark.parametrize(
        ("amount", "decimals"),
        [
            (1, 9),
            (123_456_789, 6),
            (1_000_000_001, 9),
            (999_999_999_999, 18),
            (987_654_321_012_345, 9),
            (EXACT_ROUND_TRIP_LIMIT - 1, 6),
            (3, 0),
        ],
    )
    def test_round_trip_within_one_unit(self, amount: int, decimals: int) -> None:
        """Truncation may lose at most one base unit."""
        result = to_base_units(to_ui_units(amount, decimals), decimals)

        assert abs(result - amount) <= 1
        assert result <= amount

    def test_large_amounts_lose_more_than_one_unit(self) -> None:
        """Beyond the limit a float drops more than one base unit."""
        amount = 10**17 + 3
        assert amount > EXACT_ROUND_TRIP_LIMIT

        result = to_base_units(to_ui_units(amount, 9), 9)

        assert result == 10**17
        assert amount - result > 1


class TestProfitPercent:
    """Tests for profit_percent."""

    def test_positive_and_negative(self) -> None:
        assert profit_percent(1_000_000_000, 1_010_000_000) == pytest.approx(1.0)
        assert profit_percent(1_000_000_000, 995_000_000) == pytest.approx(-0.5)
        assert profit_percent(1_000, 1_000) == 0.0

    def test_rejects_non_positive_input(self) -> None:
        with pytest.raises(ValueError):
            profit_percent(0, 10)


class TestAddresses:
    """Tests for address helpers."""

    def test_short_address(self) -> None:
        assert short_address(SOL.address) == "So11...1112"
        assert short_address("abc") == "abc"

    def test_validate_mint_address(self) -> None:
        assert validate_mint_address(SOL.address) == SOL.address

    @pytest.mark.parametrize("address", ["", "not-a-mint", "0OIl" * 11, "So1111"])
    def test_validate_rejects_malformed(self, address: str) -> None:
        with pytest.raises(ValueError, match="Malformed token address"):
            validate_mint_address(address)
