"""
Async Jupiter aggregator client.

Covers the three gateway calls the engine needs:
- quote: price a swap along the best route
- swap: build the unsigned transaction for a previously obtained quote
- tokens: token metadata lookup and the trending list

One pooled aiohttp session, orjson for (de)serialization and a token
bucket limiter in front of every request.
"""

import asyncio
import base64
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from jupiter_arb.config.constants import (
    DEFAULT_REQUEST_TIMEOUT_S,
    ENDPOINT_QUOTE,
    ENDPOINT_SWAP,
    ENDPOINT_TOKEN_SEARCH,
    ENDPOINT_TOKEN_TRENDING,
    JUPITER_API_URL,
    JUPITER_TOKEN_API_URL,
    SWAP_MODE_EXACT_IN,
)
from jupiter_arb.core.errors import QuoteError
from jupiter_arb.core.types import Quote
from jupiter_arb.gateway.models import QuoteResponse, SwapResponse, TokenData
from jupiter_arb.gateway.rate_limiter import RateLimiter


class JupiterClientError(Exception):
    """Base exception for Jupiter client errors."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class JupiterAPIError(JupiterClientError):
    """Error response returned by the Jupiter API."""

    pass


class JupiterClient:
    """
    Async Jupiter REST API client.

    Implements the ``QuoteGateway`` protocol.
    """

    def __init__(
        self,
        api_url: str = JUPITER_API_URL,
        token_api_url: str = JUPITER_TOKEN_API_URL,
        rate_limiter: RateLimiter | None = None,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
    ) -> None:
        """
        Initialize the Jupiter client.

        Args:
            api_url: Base URL of the quote/swap API.
            token_api_url: Base URL of the token API.
            rate_limiter: Optional rate limiter instance.
            timeout_s: Total timeout per request in seconds.
        """
        self._api_url = api_url.rstrip("/")
        self._token_api_url = token_api_url.rstrip("/")
        self._rate_limiter = rate_limiter or RateLimiter()
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=50,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )

        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def _request_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        session = await self._get_session()
        try:
            yield session
        except aiohttp.ClientError as e:
            raise JupiterClientError(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            raise JupiterClientError("Request timed out") from e

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an API request and return the parsed JSON body.

        Raises:
            JupiterAPIError: On an error response.
            JupiterClientError: On network or decoding errors.
        """
        async with self._request_context() as session:
            async with session.request(method, url, params=params, json=payload) as response:
                return await self._handle_response(response)

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        text = await response.text()

        try:
            data = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            if response.status >= 400:
                raise JupiterAPIError(f"HTTP {response.status}: {text[:200]}", status=response.status) from e
            raise JupiterClientError(f"Invalid JSON response: {e}") from e

        if response.status >= 400:
            message = data.get("error", text) if isinstance(data, dict) else text
            raise JupiterAPIError(f"API error {response.status}: {message}", status=response.status)

        return data

    # =========================================================================
    # Quote & Swap
    # =========================================================================

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> Quote:
        """
        Get the best ExactIn quote for a swap.

        Args:
            input_mint: Mint address to sell.
            output_mint: Mint address to buy.
            amount: Input amount in base units.
            slippage_bps: Slippage tolerance in basis points.

        Returns:
            Priced quote including the raw route payload.

        Raises:
            QuoteError: If the gateway cannot price the swap.
        """
        if amount <= 0:
            raise QuoteError(f"Cannot quote non-positive amount {amount}", input_mint, output_mint)

        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
            "swapMode": SWAP_MODE_EXACT_IN,
        }

        await self._rate_limiter.acquire_quote()
        try:
            data = await self._request("GET", f"{self._api_url}{ENDPOINT_QUOTE}", params=params)
            response = QuoteResponse.model_validate(data)
        except JupiterClientError as e:
            raise QuoteError(str(e), input_mint, output_mint) from e
        except ValidationError as e:
            raise QuoteError(f"Malformed quote response: {e}", input_mint, output_mint) from e

        return Quote(
            input_mint=response.input_mint,
            output_mint=response.output_mint,
            in_amount=response.in_amount,
            out_amount=response.out_amount,
            other_amount_threshold=response.other_amount_threshold,
            slippage_bps=response.slippage_bps,
            price_impact_pct=response.price_impact_pct,
            route=data,
        )

    async def get_swap_transaction(self, quote: Quote, user_public_key: str) -> bytes:
        """
        Build the unsigned swap transaction for a quote.

        Args:
            quote: Quote previously returned by ``get_quote``.
            user_public_key: Wallet that will sign and pay for the swap.

        Returns:
            Serialized, unsigned versioned transaction.

        Raises:
            JupiterClientError: If no signable transaction was produced.
        """
        payload = {
            "quoteResponse": quote.route,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
        }

        await self._rate_limiter.acquire_swap()
        data = await self._request("POST", f"{self._api_url}{ENDPOINT_SWAP}", payload=payload)

        try:
            response = SwapResponse.model_validate(data)
            return base64.b64decode(response.swap_transaction, validate=True)
        except (ValidationError, ValueError) as e:
            raise JupiterClientError(f"Malformed swap response: {e}") from e

    # =========================================================================
    # Tokens
    # =========================================================================

    async def search_token(self, mint: str) -> TokenData | None:
        """
        Look up token metadata by mint address.

        Returns:
            Token data, or None if the API does not know the mint.
        """
        await self._rate_limiter.acquire_quote()
        data = await self._request("GET", f"{self._token_api_url}{ENDPOINT_TOKEN_SEARCH}", params={"query": mint})

        for entry in data if isinstance(data, list) else []:
            token = TokenData.model_validate(entry)
            if token.id == mint:
                return token
        return None

    async def get_trending_tokens(self, limit: int = 10) -> list[TokenData]:
        """Get the top trending tokens over the last 24 hours."""
        await self._rate_limiter.acquire_quote()
        data = await self._request(
            "GET",
            f"{self._token_api_url}{ENDPOINT_TOKEN_TRENDING}",
            params={"limit": str(limit)},
        )

        if not isinstance(data, list):
            raise JupiterClientError(f"Unexpected trending response: {str(data)[:200]}")
        return [TokenData.model_validate(entry) for entry in data[:limit]]

    async def __aenter__(self) -> "JupiterClient":
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
