"""
Round-trip execution sequencer.

Executes a chosen opportunity as two strictly sequential swaps:

1. re-quote base -> quote with the execution slippage
2. build, sign and send the forward swap
3. poll until the forward swap is confirmed
4. re-quote quote -> base with the amount leg 1 actually delivered
5. build, sign and send the reverse swap, then poll it to confirmation
6. produce a TradeRecord whatever the outcome

Failures before leg 1 settles moved no funds and are reported as FAILED.
Once leg 1 may have moved funds, any failure leaves the wallet holding
the quote token and is reported as PARTIAL at error level.
"""

import asyncio
import logging
from dataclasses import dataclass

from jupiter_arb.config.constants import (
    DEFAULT_CONFIRM_POLL_INTERVAL_S,
    DEFAULT_CONFIRM_TIMEOUT_S,
    DEFAULT_EXECUTION_SLIPPAGE_BPS,
)
from jupiter_arb.core.errors import (
    ExecutionError,
    LedgerError,
    PartialExecutionError,
    QuoteError,
    TransactionFailedError,
)
from jupiter_arb.core.types import (
    ArbitrageOpportunity,
    ExecutionStatus,
    LegResult,
    LegStatus,
    Ledger,
    Quote,
    QuoteGateway,
    TradeRecord,
    TradeSide,
    TransactionSigner,
)
from jupiter_arb.gateway.client import JupiterClientError
from jupiter_arb.utils.time import LatencyTimer, utc_now_iso


logger = logging.getLogger(__name__)


@dataclass
class ExecutorConfig:
    """Executor configuration."""

    slippage_bps: int = DEFAULT_EXECUTION_SLIPPAGE_BPS  # Wider than discovery slippage
    confirm_timeout_s: float = DEFAULT_CONFIRM_TIMEOUT_S
    confirm_poll_interval_s: float = DEFAULT_CONFIRM_POLL_INTERVAL_S
    dry_run: bool = True  # Quote both legs, sign and send nothing


class ExecutionSequencer:
    """
    Executes round-trip arbitrage opportunities.

    Features:
    - Fresh quotes for both legs at execution time
    - Leg 2 sized from leg 1's settled output
    - Confirmation polling with a bounded timeout
    - At most one execution in flight
    - Dry-run simulation mode
    """

    def __init__(
        self,
        gateway: QuoteGateway,
        ledger: Ledger,
        signer: TransactionSigner,
        config: ExecutorConfig | None = None,
    ) -> None:
        """
        Initialize executor.

        Args:
            gateway: Quote gateway used for re-quotes and swap transactions.
            ledger: Ledger used to send and confirm transactions.
            signer: Wallet that signs the swap transactions.
            config: Executor configuration.
        """
        self._gateway = gateway
        self._ledger = ledger
        self._signer = signer
        self._config = config or ExecutorConfig()
        self._guard = asyncio.Lock()

        # Statistics
        self._total_executions = 0
        self._successful_executions = 0
        self._failed_executions = 0
        self._partial_executions = 0

    @property
    def in_flight(self) -> bool:
        return self._guard.locked()

    @property
    def dry_run(self) -> bool:
        return self._config.dry_run

    async def execute(self, opportunity: ArbitrageOpportunity) -> TradeRecord:
        """
        Execute a round-trip opportunity.

        Args:
            opportunity: Opportunity to execute.

        Returns:
            TradeRecord describing the outcome. Failures are reported
            through the record's status, not raised.

        Raises:
            ExecutionError: If another execution is already in flight.
        """
        if self._guard.locked():
            raise ExecutionError(f"Execution already in flight, refusing {opportunity.pair_id}")

        async with self._guard:
            return await self._execute(opportunity)

    async def _execute(self, opportunity: ArbitrageOpportunity) -> TradeRecord:
        base = opportunity.base_token
        quote = opportunity.quote_token
        self._total_executions += 1

        leg1 = LegResult(
            side=TradeSide.BUY,
            input_mint=base.address,
            output_mint=quote.address,
            in_amount=opportunity.base_amount,
        )
        leg2 = LegResult(
            side=TradeSide.SELL,
            input_mint=quote.address,
            output_mint=base.address,
            in_amount=0,
        )

        status = ExecutionStatus.SUCCESS
        error: str | None = None

        logger.info(
            f"{'[DRY RUN] ' if self._config.dry_run else ''}Executing {opportunity.pair_id} "
            f"with {opportunity.base_amount} base units, expected {opportunity.profit_percent:.4f}%"
        )

        with LatencyTimer() as timer:
            try:
                if self._config.dry_run:
                    await self._simulate(opportunity, leg1, leg2)
                else:
                    await self._execute_forward(opportunity, leg1)
                    await self._execute_reverse(opportunity, leg1, leg2)
            except PartialExecutionError as e:
                status = ExecutionStatus.PARTIAL
                error = str(e)
                logger.error(f"PARTIAL EXECUTION on {opportunity.pair_id}: {e}; {e.describe_position()}")
            except ExecutionError as e:
                status = ExecutionStatus.FAILED
                error = str(e)
                logger.warning(f"Execution of {opportunity.pair_id} failed, no funds moved: {e}")
            except Exception as e:
                # Position is unknown once leg 1 was sent
                status = ExecutionStatus.PARTIAL if leg1.signature else ExecutionStatus.FAILED
                error = f"Unexpected error: {e}"
                logger.error(
                    f"Execution of {opportunity.pair_id} aborted: {e} "
                    f"(leg 1 tx {leg1.signature or 'not sent'})",
                    exc_info=True,
                )

        if status == ExecutionStatus.SUCCESS:
            self._successful_executions += 1
        elif status == ExecutionStatus.PARTIAL:
            self._partial_executions += 1
        else:
            self._failed_executions += 1

        record = self._build_record(opportunity, leg1, leg2, status, error, timer.latency_us)
        if record.is_success:
            logger.info(
                f"{'[DRY RUN] ' if record.dry_run else ''}Round trip {opportunity.pair_id} done: "
                f"in={record.in_amount} out={record.out_amount} profit={record.profit} "
                f"({record.latency_ms:.0f}ms)"
            )
        return record

    # =========================================================================
    # Live Legs
    # =========================================================================

    async def _execute_forward(self, opportunity: ArbitrageOpportunity, leg: LegResult) -> None:
        """Leg 1: base -> quote. Raises ExecutionError or PartialExecutionError."""
        base = opportunity.base_token
        quote = opportunity.quote_token

        with LatencyTimer() as timer:
            try:
                fresh = await self._gateway.get_quote(
                    base.address, quote.address, opportunity.base_amount, self._config.slippage_bps
                )
            except QuoteError as e:
                leg.status = LegStatus.FAILED
                leg.error = str(e)
                raise ExecutionError(f"Forward re-quote failed: {e}") from e

            leg.expected_out_amount = fresh.out_amount
            signature = await self._submit(fresh, leg)

            try:
                await self._ledger.wait_for_confirmation(
                    signature, self._config.confirm_timeout_s, self._config.confirm_poll_interval_s
                )
            except TransactionFailedError as e:
                leg.status = LegStatus.FAILED
                leg.error = str(e)
                raise ExecutionError(f"Forward swap failed on-chain: {e.error}") from e
            except LedgerError as e:
                leg.status = LegStatus.UNCONFIRMED
                leg.error = str(e)
                raise PartialExecutionError(
                    f"Forward swap not confirmed: {e}",
                    held_token=quote.symbol,
                    held_amount=None,
                    leg1_signature=signature,
                ) from e

            leg.status = LegStatus.CONFIRMED
            leg.actual_out_amount = await self._settled_amount(signature, quote.address, fresh)

        leg.latency_us = timer.latency_us
        logger.info(f"Leg 1 {base.symbol} -> {quote.symbol} confirmed: {signature} out={leg.actual_out_amount}")

    async def _execute_reverse(
        self,
        opportunity: ArbitrageOpportunity,
        leg1: LegResult,
        leg: LegResult,
    ) -> None:
        """Leg 2: quote -> base, sized from leg 1's settled output. Raises PartialExecutionError."""
        base = opportunity.base_token
        quote = opportunity.quote_token
        held = leg1.actual_out_amount or 0
        leg.in_amount = held

        def _partial(message: str) -> PartialExecutionError:
            return PartialExecutionError(
                message,
                held_token=quote.symbol,
                held_amount=held,
                leg1_signature=leg1.signature or "",
            )

        with LatencyTimer() as timer:
            try:
                fresh = await self._gateway.get_quote(quote.address, base.address, held, self._config.slippage_bps)
            except QuoteError as e:
                leg.status = LegStatus.FAILED
                leg.error = str(e)
                raise _partial(f"Reverse re-quote failed: {e}") from e

            leg.expected_out_amount = fresh.out_amount

            try:
                signature = await self._submit(fresh, leg)
            except ExecutionError as e:
                raise _partial(str(e)) from e

            try:
                await self._ledger.wait_for_confirmation(
                    signature, self._config.confirm_timeout_s, self._config.confirm_poll_interval_s
                )
            except TransactionFailedError as e:
                leg.status = LegStatus.FAILED
                leg.error = str(e)
                raise _partial(f"Reverse swap failed on-chain: {e.error}") from e
            except LedgerError as e:
                leg.status = LegStatus.UNCONFIRMED
                leg.error = str(e)
                raise _partial(f"Reverse swap not confirmed: {e}") from e

            leg.status = LegStatus.CONFIRMED
            leg.actual_out_amount = await self._settled_amount(signature, base.address, fresh)

        leg.latency_us = timer.latency_us
        logger.info(f"Leg 2 {quote.symbol} -> {base.symbol} confirmed: {signature} out={leg.actual_out_amount}")

    async def _submit(self, quote: Quote, leg: LegResult) -> str:
        """Build, sign and send a swap. Raises ExecutionError if nothing was sent."""
        try:
            unsigned = await self._gateway.get_swap_transaction(quote, self._signer.public_key)
            signed = self._signer.sign_transaction(unsigned)
            signature = await self._ledger.send_transaction(signed)
        except (JupiterClientError, LedgerError, ValueError) as e:
            leg.status = LegStatus.FAILED
            leg.error = str(e)
            raise ExecutionError(f"{leg.side.value} swap submission failed: {e}") from e

        leg.signature = signature
        leg.status = LegStatus.UNCONFIRMED
        logger.debug(f"Sent {leg.side.value} swap {signature}")
        return signature

    async def _settled_amount(self, signature: str, mint: str, quote: Quote) -> int:
        """
        Amount a confirmed swap delivered to the wallet.

        Falls back to the quote's minimum output when the ledger cannot
        report it, so the next leg never spends more than was guaranteed.
        """
        try:
            amount = await self._ledger.get_settled_amount(signature, self._signer.public_key, mint)
        except LedgerError as e:
            logger.warning(f"Could not read settled amount of {signature}: {e}")
            amount = None

        if amount is None or amount <= 0:
            logger.warning(
                f"Settled amount of {signature} unavailable, using quote minimum {quote.other_amount_threshold}"
            )
            return quote.other_amount_threshold
        return amount

    # =========================================================================
    # Dry Run
    # =========================================================================

    async def _simulate(
        self,
        opportunity: ArbitrageOpportunity,
        leg1: LegResult,
        leg2: LegResult,
    ) -> None:
        """Quote both legs fresh and record them as simulated fills."""
        base = opportunity.base_token
        quote = opportunity.quote_token
        slippage = self._config.slippage_bps

        with LatencyTimer() as timer:
            try:
                forward = await self._gateway.get_quote(base.address, quote.address, opportunity.base_amount, slippage)
            except QuoteError as e:
                leg1.status = LegStatus.FAILED
                leg1.error = str(e)
                raise ExecutionError(f"Forward re-quote failed: {e}") from e
        leg1.expected_out_amount = forward.out_amount
        leg1.actual_out_amount = forward.out_amount
        leg1.status = LegStatus.SIMULATED
        leg1.latency_us = timer.latency_us

        leg2.in_amount = forward.out_amount
        with LatencyTimer() as timer:
            try:
                reverse = await self._gateway.get_quote(quote.address, base.address, forward.out_amount, slippage)
            except QuoteError as e:
                leg2.status = LegStatus.FAILED
                leg2.error = str(e)
                raise ExecutionError(f"Reverse re-quote failed: {e}") from e
        leg2.expected_out_amount = reverse.out_amount
        leg2.actual_out_amount = reverse.out_amount
        leg2.status = LegStatus.SIMULATED
        leg2.latency_us = timer.latency_us

    # =========================================================================
    # Records & Statistics
    # =========================================================================

    def _build_record(
        self,
        opportunity: ArbitrageOpportunity,
        leg1: LegResult,
        leg2: LegResult,
        status: ExecutionStatus,
        error: str | None,
        latency_us: int,
    ) -> TradeRecord:
        """Create the trade record for one attempt."""
        out_amount = leg2.actual_out_amount if leg2.is_settled else None
        profit = out_amount - leg1.in_amount if out_amount is not None else None

        return TradeRecord(
            timestamp=utc_now_iso(),
            input_symbol=opportunity.base_token.symbol,
            output_symbol=opportunity.quote_token.symbol,
            in_amount=leg1.in_amount,
            out_amount=out_amount,
            expected_out_amount=opportunity.expected_out_amount,
            expected_profit=opportunity.profit_amount,
            profit=profit,
            latency_ms=latency_us / 1000.0,
            slippage_bps=self._config.slippage_bps,
            status=status,
            legs=[leg1, leg2],
            error=error,
            dry_run=self._config.dry_run,
        )

    @property
    def stats(self) -> dict[str, int]:
        """Get execution statistics."""
        return {
            "total": self._total_executions,
            "successful": self._successful_executions,
            "failed": self._failed_executions,
            "partial": self._partial_executions,
        }
