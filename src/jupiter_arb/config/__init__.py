"""Configuration module for the arbitrage engine."""

from jupiter_arb.config.constants import (
    JUPITER_API_URL,
    JUPITER_TOKEN_API_URL,
    SOLANA_RPC_URL,
    WSOL_MINT,
)
from jupiter_arb.config.settings import Settings, load_settings


__all__ = [
    "Settings",
    "load_settings",
    "JUPITER_API_URL",
    "JUPITER_TOKEN_API_URL",
    "SOLANA_RPC_URL",
    "WSOL_MINT",
]
