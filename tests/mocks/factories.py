"""
Token constants and builders for quotes and opportunities.
"""

import math

from jupiter_arb.config.constants import BONK_MINT, JUP_MINT, USDC_MINT, USDT_MINT, WSOL_MINT
from jupiter_arb.core.types import ArbitrageOpportunity, Quote, TokenInfo


SOL = TokenInfo("SOL", "Solana", WSOL_MINT, 9)
USDC = TokenInfo("USDC", "USD Coin", USDC_MINT, 6)
USDT = TokenInfo("USDT", "USDT", USDT_MINT, 6)
JUP = TokenInfo("JUP", "Jupiter", JUP_MINT, 6)
BONK = TokenInfo("BONK", "Bonk", BONK_MINT, 5)

ONE_SOL = 1_000_000_000


def make_quote(
    input_mint: str,
    output_mint: str,
    in_amount: int,
    out_amount: int,
    slippage_bps: int = 50,
) -> Quote:
    """Quote with a minimum output derived from the slippage."""
    return Quote(
        input_mint=input_mint,
        output_mint=output_mint,
        in_amount=in_amount,
        out_amount=out_amount,
        other_amount_threshold=out_amount * (10_000 - slippage_bps) // 10_000,
        slippage_bps=slippage_bps,
        price_impact_pct=0.0,
        route={"inputMint": input_mint, "outputMint": output_mint, "inAmount": str(in_amount)},
    )


def make_opportunity(
    base: TokenInfo,
    quote: TokenInfo,
    profit_percent: float,
    base_amount: int = ONE_SOL,
    quote_amount: int = 100_000_000,
) -> ArbitrageOpportunity:
    """Opportunity whose profit amount matches ``profit_percent`` when finite."""
    finite = isinstance(profit_percent, float | int) and math.isfinite(profit_percent)
    profit_amount = int(base_amount * profit_percent / 100) if finite else 0
    return ArbitrageOpportunity(
        base_token=base,
        quote_token=quote,
        base_amount=base_amount,
        quote_amount=quote_amount,
        profit_amount=profit_amount,
        profit_percent=profit_percent,
        forward_quote=make_quote(base.address, quote.address, base_amount, quote_amount),
        reverse_quote=make_quote(quote.address, base.address, quote_amount, base_amount + profit_amount),
    )
