"""
Pydantic models for Jupiter API responses.

Amounts arrive as decimal strings and are validated into ints.
"""

from pydantic import BaseModel, Field


class SwapInfo(BaseModel):
    """Venue details of one route hop."""

    amm_key: str = Field(default="", alias="ammKey")
    label: str = ""
    input_mint: str = Field(default="", alias="inputMint")
    output_mint: str = Field(default="", alias="outputMint")
    in_amount: int = Field(default=0, alias="inAmount")
    out_amount: int = Field(default=0, alias="outAmount")

    model_config = {"populate_by_name": True}


class RoutePlanStep(BaseModel):
    """Single step of a quoted route."""

    swap_info: SwapInfo = Field(alias="swapInfo")
    percent: int = 100

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Quote endpoint response."""

    input_mint: str = Field(alias="inputMint")
    in_amount: int = Field(alias="inAmount", ge=0)
    output_mint: str = Field(alias="outputMint")
    out_amount: int = Field(alias="outAmount", ge=0)
    other_amount_threshold: int = Field(alias="otherAmountThreshold", ge=0)
    swap_mode: str = Field(default="ExactIn", alias="swapMode")
    slippage_bps: int = Field(alias="slippageBps")
    price_impact_pct: float = Field(default=0.0, alias="priceImpactPct")
    route_plan: list[RoutePlanStep] = Field(default_factory=list, alias="routePlan")
    context_slot: int | None = Field(default=None, alias="contextSlot")

    model_config = {"populate_by_name": True}

    @property
    def venues(self) -> list[str]:
        """Venue labels along the route."""
        return [step.swap_info.label for step in self.route_plan if step.swap_info.label]


class SwapResponse(BaseModel):
    """Swap endpoint response."""

    swap_transaction: str = Field(alias="swapTransaction")
    last_valid_block_height: int | None = Field(default=None, alias="lastValidBlockHeight")
    prioritization_fee_lamports: int | None = Field(default=None, alias="prioritizationFeeLamports")

    model_config = {"populate_by_name": True}


class TokenStats(BaseModel):
    """Rolling trading statistics of a token."""

    price_change: float | None = Field(default=None, alias="priceChange")
    buy_volume: float | None = Field(default=None, alias="buyVolume")
    sell_volume: float | None = Field(default=None, alias="sellVolume")

    model_config = {"populate_by_name": True}

    @property
    def volume(self) -> float | None:
        if self.buy_volume is None and self.sell_volume is None:
            return None
        return (self.buy_volume or 0.0) + (self.sell_volume or 0.0)


class TokenData(BaseModel):
    """Token entry from the token API."""

    id: str
    name: str = ""
    symbol: str = ""
    decimals: int = Field(ge=0, le=18)
    usd_price: float | None = Field(default=None, alias="usdPrice")
    stats_24h: TokenStats | None = Field(default=None, alias="stats24h")

    model_config = {"populate_by_name": True, "extra": "ignore"}
