"""
Round-trip opportunity discovery.

For every (base, quote) pair the finder quotes base -> quote and then
quote -> base with the output of the first leg, and keeps the pairs
whose round trip returns more than the profit threshold.

Pairs are independent, so they are evaluated concurrently behind a
semaphore that bounds in-flight pair evaluations. Within a pair the two
quotes stay sequential since the reverse amount depends on the forward
quote.
"""

import asyncio
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from jupiter_arb.core.errors import QuoteError
from jupiter_arb.core.types import ArbitrageOpportunity, QuoteGateway, TokenInfo
from jupiter_arb.utils.amounts import profit_percent
from jupiter_arb.utils.time import LatencyTimer, format_duration_us


logger = logging.getLogger(__name__)


def _rank_key(opportunity: ArbitrageOpportunity) -> float:
    """Sort key; non-numeric and non-finite profits rank last."""
    value = opportunity.profit_percent
    if isinstance(value, bool) or not isinstance(value, int | float):
        return -math.inf
    if not math.isfinite(value):
        return -math.inf
    return float(value)


def rank_opportunities(opportunities: Iterable[ArbitrageOpportunity]) -> list[ArbitrageOpportunity]:
    """
    Rank opportunities by profit percent, highest first.

    The sort is stable, so equal profits keep discovery order. Never
    raises on unorderable values.
    """
    return sorted(opportunities, key=_rank_key, reverse=True)


@dataclass
class ScanStats:
    """Statistics of the most recent scan."""

    pairs_evaluated: int = 0
    pairs_skipped: int = 0
    pairs_failed: int = 0
    opportunities: int = 0
    best_profit_percent: float | None = None
    latency_us: int = 0


class OpportunityFinder:
    """
    Finds profitable round trips across base/quote token pairs.

    Features:
    - Bounded concurrent fan-out over pairs
    - Per-pair failure isolation (a failed quote skips only that pair)
    - Stable, total-order ranking
    """

    def __init__(
        self,
        gateway: QuoteGateway,
        min_profit_percent: float,
        slippage_bps: int,
        max_concurrency: int = 4,
    ) -> None:
        """
        Initialize the finder.

        Args:
            gateway: Quote gateway.
            min_profit_percent: Emit only round trips above this percent.
            slippage_bps: Slippage tolerance for discovery quotes.
            max_concurrency: Maximum pairs evaluated at the same time.
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")

        self._gateway = gateway
        self._min_profit_percent = min_profit_percent
        self._slippage_bps = slippage_bps
        self._max_concurrency = max_concurrency
        self._last_scan = ScanStats()

    @property
    def min_profit_percent(self) -> float:
        return self._min_profit_percent

    @property
    def last_scan(self) -> ScanStats:
        return self._last_scan

    async def find(
        self,
        base_tokens: list[TokenInfo],
        quote_tokens: list[TokenInfo],
        base_amount: int,
    ) -> list[ArbitrageOpportunity]:
        """
        Scan all pairs and return ranked opportunities.

        Args:
            base_tokens: Tokens the round trip starts and ends in.
            quote_tokens: Intermediate tokens.
            base_amount: Input amount for the forward leg, in base units.

        Returns:
            Opportunities above the threshold, best first. May be empty.
        """
        if base_amount <= 0:
            raise ValueError(f"base_amount must be positive, got {base_amount}")

        stats = ScanStats()
        pairs = [
            (base, quote)
            for base in base_tokens
            for quote in quote_tokens
            if base.address != quote.address
        ]
        stats.pairs_skipped = len(base_tokens) * len(quote_tokens) - len(pairs)

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(base: TokenInfo, quote: TokenInfo) -> tuple[ArbitrageOpportunity | None, float | None]:
            async with semaphore:
                return await self._evaluate_pair(base, quote, base_amount)

        with LatencyTimer() as timer:
            # gather keeps input order, so results stay in discovery order
            results = await asyncio.gather(
                *(_bounded(base, quote) for base, quote in pairs),
                return_exceptions=True,
            )

        found: list[ArbitrageOpportunity] = []
        for (base, quote), result in zip(pairs, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Unexpected error evaluating {base.symbol}/{quote.symbol}: {result!r}",
                    exc_info=result,
                )
                stats.pairs_failed += 1
                continue
            if isinstance(result, BaseException):
                raise result
            opportunity, profit = result
            if profit is None:
                stats.pairs_failed += 1
                continue
            stats.pairs_evaluated += 1
            if math.isfinite(profit) and (stats.best_profit_percent is None or profit > stats.best_profit_percent):
                stats.best_profit_percent = profit
            if opportunity is not None:
                found.append(opportunity)

        ranked = rank_opportunities(found)
        stats.opportunities = len(ranked)
        stats.latency_us = timer.latency_us
        self._last_scan = stats

        logger.debug(
            f"Scanned {len(pairs)} pairs in {format_duration_us(timer.latency_us)}: "
            f"{stats.opportunities} opportunities, {stats.pairs_failed} failed"
        )
        return ranked

    async def _evaluate_pair(
        self,
        base: TokenInfo,
        quote: TokenInfo,
        base_amount: int,
    ) -> tuple[ArbitrageOpportunity | None, float | None]:
        """
        Quote both legs of one pair.

        Returns:
            (opportunity or None, profit percent or None if quoting failed).
        """
        try:
            forward = await self._gateway.get_quote(base.address, quote.address, base_amount, self._slippage_bps)
        except QuoteError as e:
            logger.warning(f"Failed to get quote for {base.symbol} -> {quote.symbol}: {e}")
            return None, None

        try:
            reverse = await self._gateway.get_quote(
                quote.address, base.address, forward.out_amount, self._slippage_bps
            )
        except QuoteError as e:
            logger.warning(f"Failed to get quote for {quote.symbol} -> {base.symbol}: {e}")
            return None, None

        profit_amount = reverse.out_amount - base_amount
        pct = profit_percent(base_amount, reverse.out_amount)

        if not pct > self._min_profit_percent:
            return None, pct

        opportunity = ArbitrageOpportunity(
            base_token=base,
            quote_token=quote,
            base_amount=base_amount,
            quote_amount=forward.out_amount,
            profit_amount=profit_amount,
            profit_percent=pct,
            forward_quote=forward,
            reverse_quote=reverse,
        )
        return opportunity, pct
