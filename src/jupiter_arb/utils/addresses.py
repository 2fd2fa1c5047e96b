"""Helpers for base58 account and mint addresses."""

from solders.pubkey import Pubkey


def validate_mint_address(address: str) -> str:
    """
    Check that ``address`` is a base58-encoded 32-byte public key.

    Raises:
        ValueError: If the address is malformed.
    """
    try:
        Pubkey.from_string(address)
    except ValueError as e:
        raise ValueError(f"Malformed token address {address!r}: {e}") from e
    return address


def short_address(address: str) -> str:
    """Shorten a base58 address for log lines (``So11...1112``)."""
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"
