"""Jupiter aggregator integration."""

from jupiter_arb.gateway.client import JupiterAPIError, JupiterClient, JupiterClientError
from jupiter_arb.gateway.rate_limiter import RateLimiter
from jupiter_arb.gateway.tokens import KNOWN_TOKENS, TokenRegistry


__all__ = [
    "KNOWN_TOKENS",
    "JupiterAPIError",
    "JupiterClient",
    "JupiterClientError",
    "RateLimiter",
    "TokenRegistry",
]
