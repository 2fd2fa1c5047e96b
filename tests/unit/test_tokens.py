"""
Unit tests for token resolution and token API models.
"""

from unittest.mock import AsyncMock

import pytest

from jupiter_arb.config.constants import USDC_MINT, WSOL_MINT
from jupiter_arb.core.errors import ConfigurationError
from jupiter_arb.gateway.client import JupiterAPIError
from jupiter_arb.gateway.models import TokenData
from jupiter_arb.gateway.tokens import KNOWN_TOKENS, TokenRegistry, token_from_data


WIF_MINT = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"


def _wif_data() -> TokenData:
    return TokenData.model_validate(
        {
            "id": WIF_MINT,
            "name": "dogwifhat",
            "symbol": "WIF",
            "decimals": 6,
            "usdPrice": 2.31,
            "stats24h": {"priceChange": -3.5, "buyVolume": 1_000_000.0, "sellVolume": 250_000.0},
            "holderCount": 180_000,
        }
    )


@pytest.fixture
def client() -> AsyncMock:
    mock = AsyncMock()
    mock.search_token.return_value = _wif_data()
    mock.get_trending_tokens.return_value = [_wif_data()]
    return mock


class TestTokenFromData:
    """Tests for token_from_data."""

    def test_maps_fields_and_stats(self) -> None:
        token = token_from_data(_wif_data())

        assert token.symbol == "WIF"
        assert token.address == WIF_MINT
        assert token.decimals == 6
        assert token.volume_24h == 1_250_000.0
        assert token.price_change_24h == -3.5

    def test_missing_metadata(self) -> None:
        token = token_from_data(TokenData(id=WIF_MINT, decimals=9))

        assert token.symbol == "UNKNOWN"
        assert token.name == "Unknown Token"
        assert token.volume_24h is None


class TestTokenRegistry:
    """Tests for TokenRegistry."""

    @pytest.mark.asyncio
    async def test_known_tokens_need_no_lookup(self, client: AsyncMock) -> None:
        registry = TokenRegistry(client)

        tokens = await registry.resolve_all([WSOL_MINT, USDC_MINT])

        assert tokens == [KNOWN_TOKENS[WSOL_MINT], KNOWN_TOKENS[USDC_MINT]]
        assert tokens[0].decimals == 9
        client.search_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_token_is_looked_up_once(self, client: AsyncMock) -> None:
        registry = TokenRegistry(client)

        first = await registry.resolve(WIF_MINT)
        second = await registry.resolve(WIF_MINT)

        assert first is second
        assert first.symbol == "WIF"
        client.search_token.assert_awaited_once_with(WIF_MINT)

    @pytest.mark.asyncio
    async def test_unknown_mint_fails(self, client: AsyncMock) -> None:
        client.search_token.return_value = None

        with pytest.raises(ConfigurationError, match="Unknown token"):
            await TokenRegistry(client).resolve(WIF_MINT)

    @pytest.mark.asyncio
    async def test_malformed_mint_fails_without_lookup(self, client: AsyncMock) -> None:
        with pytest.raises(ConfigurationError, match="Malformed"):
            await TokenRegistry(client).resolve("not-a-mint")

        client.search_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_fails(self, client: AsyncMock) -> None:
        client.search_token.side_effect = JupiterAPIError("API error 503: unavailable", status=503)

        with pytest.raises(ConfigurationError, match="Could not resolve"):
            await TokenRegistry(client).resolve(WIF_MINT)

    @pytest.mark.asyncio
    async def test_trending(self, client: AsyncMock) -> None:
        tokens = await TokenRegistry(client).trending(5)

        assert [token.symbol for token in tokens] == ["WIF"]
        client.get_trending_tokens.assert_awaited_once_with(5)
