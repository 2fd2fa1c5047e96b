"""
Token resolution.

Maps configured mint addresses to TokenInfo. Well-known mints resolve
from a built-in catalog; anything else is looked up through the token API.
"""

import logging
from typing import Final

from pydantic import ValidationError

from jupiter_arb.config.constants import BONK_MINT, JUP_MINT, USDC_MINT, USDT_MINT, WSOL_MINT
from jupiter_arb.core.errors import ConfigurationError
from jupiter_arb.core.types import TokenInfo
from jupiter_arb.gateway.client import JupiterClient, JupiterClientError
from jupiter_arb.gateway.models import TokenData
from jupiter_arb.utils.addresses import validate_mint_address


logger = logging.getLogger(__name__)


KNOWN_TOKENS: Final[dict[str, TokenInfo]] = {
    token.address: token
    for token in (
        TokenInfo("SOL", "Solana", WSOL_MINT, 9),
        TokenInfo("USDC", "USD Coin", USDC_MINT, 6),
        TokenInfo("USDT", "USDT", USDT_MINT, 6),
        TokenInfo("JUP", "Jupiter", JUP_MINT, 6),
        TokenInfo("BONK", "Bonk", BONK_MINT, 5),
    )
}


def token_from_data(data: TokenData) -> TokenInfo:
    """Build TokenInfo from a token API entry."""
    stats = data.stats_24h
    return TokenInfo(
        symbol=data.symbol or "UNKNOWN",
        name=data.name or "Unknown Token",
        address=data.id,
        decimals=data.decimals,
        volume_24h=stats.volume if stats else None,
        price_change_24h=stats.price_change if stats else None,
    )


class TokenRegistry:
    """Resolves and caches token metadata."""

    def __init__(self, client: JupiterClient) -> None:
        self._client = client
        self._cache: dict[str, TokenInfo] = dict(KNOWN_TOKENS)

    async def resolve(self, address: str) -> TokenInfo:
        """
        Resolve a single mint address.

        Raises:
            ConfigurationError: If the address is malformed or unknown.
        """
        try:
            validate_mint_address(address)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if address in self._cache:
            return self._cache[address]

        try:
            data = await self._client.search_token(address)
        except (JupiterClientError, ValidationError) as e:
            raise ConfigurationError(f"Could not resolve token {address}: {e}") from e

        if data is None:
            raise ConfigurationError(f"Unknown token mint {address}")

        token = token_from_data(data)
        self._cache[address] = token
        logger.info(f"Resolved {address} as {token.symbol} ({token.decimals} decimals)")
        return token

    async def resolve_all(self, addresses: list[str]) -> list[TokenInfo]:
        """Resolve addresses in order."""
        return [await self.resolve(address) for address in addresses]

    async def trending(self, limit: int = 10) -> list[TokenInfo]:
        """Top trending tokens from the token API."""
        return [token_from_data(data) for data in await self._client.get_trending_tokens(limit)]
