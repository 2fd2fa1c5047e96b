"""
Main arbitrage engine orchestrator.

ScanLoop is the driver state machine (scan, maybe execute, sleep).
ArbitrageEngine wires the components from settings and manages the
process lifecycle around it.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum

from jupiter_arb.config.settings import Settings
from jupiter_arb.core.errors import ConfigurationError, ExecutionError, LedgerError
from jupiter_arb.core.state import EngineCommand, RunState, StateStore
from jupiter_arb.core.types import ArbitrageOpportunity, Ledger, TokenInfo, TradeRecord
from jupiter_arb.execution.executor import ExecutionSequencer, ExecutorConfig
from jupiter_arb.execution.signer import WalletSigner
from jupiter_arb.gateway.client import JupiterClient
from jupiter_arb.gateway.rate_limiter import RateLimiter
from jupiter_arb.gateway.tokens import TokenRegistry
from jupiter_arb.ledger.rpc import SolanaRpcClient
from jupiter_arb.strategy.finder import OpportunityFinder
from jupiter_arb.telemetry.logger import AsyncLogger, setup_logging
from jupiter_arb.telemetry.reporter import StatusReporter
from jupiter_arb.utils.amounts import to_base_units, to_ui_units
from jupiter_arb.utils.time import LatencyTimer


logger = logging.getLogger(__name__)


class LoopPhase(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    EXECUTING = "executing"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class ScanLoop:
    """
    Top-level scan driver.

    Each iteration scans all pairs, executes the best opportunity when
    trading is enabled, and sleeps for the configured interval. Commands
    and stop requests are applied between phases; an execution that has
    started always runs to completion.
    """

    def __init__(
        self,
        finder: OpportunityFinder,
        sequencer: ExecutionSequencer,
        state: RunState,
        base_tokens: list[TokenInfo],
        quote_tokens: list[TokenInfo],
        base_amount: int,
        interval_ms: int,
        ledger: Ledger | None = None,
        owner: str | None = None,
    ) -> None:
        """
        Initialize the scan loop.

        Args:
            finder: Opportunity finder.
            sequencer: Execution sequencer.
            state: Run state owned by this loop.
            base_tokens: Tokens each round trip starts and ends in.
            quote_tokens: Intermediate tokens.
            base_amount: Trade size in base units.
            interval_ms: Sleep between iterations.
            ledger: Optional ledger for balance refreshes.
            owner: Wallet whose balances are tracked.
        """
        self._finder = finder
        self._sequencer = sequencer
        self._state = state
        self._base_tokens = base_tokens
        self._quote_tokens = quote_tokens
        self._base_amount = base_amount
        self._interval_ms = interval_ms
        self._ledger = ledger
        self._owner = owner

        self._commands: asyncio.Queue[EngineCommand] = asyncio.Queue()
        self._stop_event = asyncio.Event()
        self._wake = asyncio.Event()
        self._phase = LoopPhase.IDLE

    @property
    def phase(self) -> LoopPhase:
        return self._phase

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # =========================================================================
    # Control
    # =========================================================================

    def submit_command(self, command: EngineCommand) -> None:
        """Queue a command; it is applied at the next phase boundary."""
        self._commands.put_nowait(command)
        self._wake.set()

    def stop(self) -> None:
        """Request a cooperative stop."""
        self._stop_event.set()
        self._wake.set()

    def _apply_commands(self) -> None:
        while not self._commands.empty():
            command = self._commands.get_nowait()
            logger.debug(f"Applying command {command.value}")

            if command == EngineCommand.ENABLE_TRADING:
                self._state.set_trading_enabled(True)
            elif command == EngineCommand.DISABLE_TRADING:
                self._state.set_trading_enabled(False)
            elif command == EngineCommand.TOGGLE_TRADING:
                self._state.toggle_trading()
            elif command == EngineCommand.STOP:
                logger.info("Stop command received")
                self._stop_event.set()

    # =========================================================================
    # Iteration
    # =========================================================================

    async def run_once(self) -> TradeRecord | None:
        """
        Run one scan iteration.

        Returns:
            The trade record if an execution was attempted, else None.
        """
        self._apply_commands()
        if self._stop_event.is_set():
            return None

        record: TradeRecord | None = None

        with LatencyTimer() as timer:
            self._phase = LoopPhase.SCANNING
            try:
                opportunities = await self._finder.find(self._base_tokens, self._quote_tokens, self._base_amount)
            except Exception as e:
                logger.error(f"Scan failed: {e}", exc_info=True)
                self._state.record_error()
                opportunities = []
            else:
                self._state.record_scan(opportunities, self._finder.last_scan.best_profit_percent)

            if opportunities:
                self._log_candidates(opportunities)
                self._apply_commands()

                best = opportunities[0]
                if self._stop_event.is_set():
                    logger.info(f"Stop requested, not executing {best.pair_id}")
                elif not self._state.trading_enabled:
                    logger.info(f"Trading disabled, not executing {best.pair_id}")
                elif best.profit_percent > self._finder.min_profit_percent:
                    record = await self._execute(best)

        self._state.advance_iteration(timer.latency_us)
        return record

    def _log_candidates(self, opportunities: list[ArbitrageOpportunity]) -> None:
        best = opportunities[0]
        logger.info(
            f"Best opportunity {best.pair_id}: {best.profit_percent:.4f}% "
            f"({best.profit_amount:+} base units)"
        )
        for rank, other in enumerate(opportunities[1:], start=2):
            logger.info(f"  #{rank} {other.pair_id}: {other.profit_percent:.4f}% (not executed)")

    async def _execute(self, opportunity: ArbitrageOpportunity) -> TradeRecord | None:
        self._phase = LoopPhase.EXECUTING
        self._state.set_executing(True)
        try:
            record = await self._sequencer.execute(opportunity)
        except ExecutionError as e:
            logger.warning(f"Execution of {opportunity.pair_id} rejected: {e}")
            self._state.record_error()
            return None
        except Exception as e:
            logger.error(f"Execution of {opportunity.pair_id} crashed: {e}", exc_info=True)
            self._state.record_error()
            return None
        finally:
            self._state.set_executing(False)

        try:
            self._state.record_trade(record, opportunity.base_token.symbol)
            await self.refresh_balances()
        except Exception as e:
            logger.error(f"Bookkeeping after {opportunity.pair_id} failed: {e}", exc_info=True)
            self._state.record_error()
        return record

    async def refresh_balances(self) -> None:
        """Refresh last-known balances of all configured tokens."""
        if self._ledger is None or self._owner is None:
            return

        seen: set[str] = set()
        for token in [*self._base_tokens, *self._quote_tokens]:
            if token.address in seen:
                continue
            seen.add(token.address)
            try:
                amount = await self._ledger.get_token_balance(self._owner, token.address)
            except LedgerError as e:
                logger.warning(f"Could not refresh {token.symbol} balance: {e}")
                continue
            self._state.update_balance(token.symbol, amount)

    # =========================================================================
    # Main Loop
    # =========================================================================

    async def run(self) -> None:
        """Iterate until a stop is requested."""
        logger.info(
            f"Scan loop started: {len(self._base_tokens)} base x {len(self._quote_tokens)} quote tokens, "
            f"interval {self._interval_ms}ms"
        )

        while not self._stop_event.is_set():
            await self.run_once()
            if self._stop_event.is_set():
                break
            self._phase = LoopPhase.SLEEPING
            await self._sleep()

        self._phase = LoopPhase.STOPPED
        logger.info(f"Scan loop stopped after {self._state.iteration} iterations")

    async def _sleep(self) -> None:
        """Sleep for the interval, waking early only to stop."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._interval_ms / 1000.0

        while not self._stop_event.is_set():
            remaining = deadline - loop.time()
            if remaining <= 0:
                await asyncio.sleep(0)
                break
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                break
            self._wake.clear()
            self._apply_commands()

        self._wake.clear()


class ArbitrageEngine:
    """
    Main engine orchestrator.

    Manages the complete lifecycle of:
    - Wallet and endpoint validation
    - Token resolution
    - The scan loop
    - Status reporting and state persistence
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the engine.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._shut_down = False

        # Components (initialized in setup)
        self._client: JupiterClient | None = None
        self._rpc: SolanaRpcClient | None = None
        self._signer: WalletSigner | None = None
        self._scan_loop: ScanLoop | None = None
        self._reporter: StatusReporter | None = None
        self._async_logger: AsyncLogger | None = None

        self._state = RunState(trading_enabled=settings.trading_enabled)
        self._store = StateStore(settings.state_dir)

    async def setup(self) -> None:
        """
        Initialize all components.

        Raises:
            ConfigurationError: Wallet, endpoint or token problems.
        """
        settings = self._settings

        self._async_logger = setup_logging(level=settings.log_level, log_file=settings.log_file)
        logger.info("Initializing arbitrage engine...")

        self._signer = WalletSigner.from_file(settings.wallet_path)
        logger.info(f"Wallet: {self._signer.short_public_key}")

        self._client = JupiterClient(
            api_url=settings.jupiter_api_url,
            token_api_url=settings.token_api_url,
            rate_limiter=RateLimiter(quotes_per_second=settings.quote_requests_per_second),
            timeout_s=settings.request_timeout_s,
        )
        self._rpc = SolanaRpcClient(settings.rpc_url, timeout_s=settings.request_timeout_s)

        try:
            health = await self._rpc.get_health()
        except LedgerError as e:
            raise ConfigurationError(f"RPC endpoint {settings.rpc_url} unreachable: {e}") from e
        if health != "ok":
            logger.warning(f"RPC endpoint reports health {health!r}")

        registry = TokenRegistry(self._client)
        base_tokens = await registry.resolve_all(settings.base_tokens)
        quote_tokens = await registry.resolve_all(settings.quote_tokens)

        base_amount = self._resolve_base_amount(base_tokens)

        self._log_previous_history()

        finder = OpportunityFinder(
            gateway=self._client,
            min_profit_percent=settings.min_profit_percent,
            slippage_bps=settings.slippage_bps,
            max_concurrency=settings.max_concurrent_quotes,
        )
        sequencer = ExecutionSequencer(
            gateway=self._client,
            ledger=self._rpc,
            signer=self._signer,
            config=ExecutorConfig(
                slippage_bps=settings.execution_slippage_bps,
                confirm_timeout_s=settings.confirm_timeout_s,
                confirm_poll_interval_s=settings.confirm_poll_interval_s,
                dry_run=settings.dry_run,
            ),
        )
        self._scan_loop = ScanLoop(
            finder=finder,
            sequencer=sequencer,
            state=self._state,
            base_tokens=base_tokens,
            quote_tokens=quote_tokens,
            base_amount=base_amount,
            interval_ms=settings.interval_ms,
            ledger=self._rpc,
            owner=self._signer.public_key,
        )

        await self._scan_loop.refresh_balances()

        self._reporter = StatusReporter(
            snapshot=self._state.snapshot,
            tokens=[*base_tokens, *quote_tokens],
            dry_run=settings.dry_run,
        )

        logger.info("Engine initialization complete")

    def _resolve_base_amount(self, base_tokens: list[TokenInfo]) -> int:
        """Convert the configured trade size using the first base token's decimals."""
        first = base_tokens[0]
        if any(token.decimals != first.decimals for token in base_tokens[1:]):
            logger.warning(
                f"Base tokens have different decimals; trade size is computed with "
                f"{first.symbol} ({first.decimals} decimals) for all of them"
            )

        base_amount = to_base_units(self._settings.base_amount_ui, first.decimals)
        if base_amount <= 0:
            raise ConfigurationError(
                f"Trade size {self._settings.base_amount_ui} {first.symbol} is below one base unit"
            )

        logger.info(f"Trade size: {to_ui_units(base_amount, first.decimals)} {first.symbol} ({base_amount} base units)")
        return base_amount

    def _log_previous_history(self) -> None:
        try:
            history = self._store.read_history()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read previous trade history: {e}")
            return

        if history:
            logger.info(f"Previous session recorded {len(history)} trades in {self._store.history_path}")

    async def run(self) -> None:
        """Run the scan loop until a signal or a stop command."""
        if self._scan_loop is None:
            raise RuntimeError("Engine not set up")

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_shutdown)

        try:
            if self._reporter:
                self._reporter.start()
            await self._scan_loop.run()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

    def _handle_shutdown(self) -> None:
        """Handle shutdown signal."""
        logger.info("Shutdown signal received")
        if self._scan_loop:
            self._scan_loop.stop()

    def submit_command(self, command: EngineCommand) -> None:
        if self._scan_loop is None:
            raise RuntimeError("Engine not set up")
        self._scan_loop.submit_command(command)

    async def shutdown(self) -> None:
        """Gracefully shut down: persist state, close clients, stop logging."""
        if self._shut_down:
            return
        self._shut_down = True

        logger.info("Shutting down engine...")

        if self._scan_loop:
            self._scan_loop.stop()

        if self._reporter:
            await self._reporter.stop()
            self._reporter.print_summary()

        try:
            self._store.save(self._state.snapshot())
        except OSError as e:
            logger.error(f"Failed to save state to {self._settings.state_dir}: {e}")

        if self._client:
            await self._client.close()
        if self._rpc:
            await self._rpc.close()

        logger.info("Engine shutdown complete")

        if self._async_logger:
            self._async_logger.stop()

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def scan_loop(self) -> ScanLoop | None:
        return self._scan_loop


@asynccontextmanager
async def create_engine(settings: Settings) -> AsyncIterator[ArbitrageEngine]:
    """
    Create and manage engine lifecycle.

    Usage:
        async with create_engine(settings) as engine:
            await engine.run()
    """
    engine = ArbitrageEngine(settings)

    try:
        await engine.setup()
        yield engine
    finally:
        await engine.shutdown()
