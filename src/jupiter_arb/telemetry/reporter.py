"""
Status reporting from run state snapshots.

Reporters never touch RunState directly; they pull an immutable
snapshot through the supplied callable.
"""

import asyncio
import logging
import sys
from collections.abc import Callable
from typing import TextIO

from jupiter_arb.config.constants import STATUS_REPORT_INTERVAL_S
from jupiter_arb.core.state import RunStateSnapshot
from jupiter_arb.core.types import TokenInfo
from jupiter_arb.utils.amounts import to_ui_units


logger = logging.getLogger(__name__)


def format_uptime(seconds: float) -> str:
    """Format uptime as HH:MM:SS."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class StatusReporter:
    """
    Periodic one-line status log plus an end-of-session summary.
    """

    def __init__(
        self,
        snapshot: Callable[[], RunStateSnapshot],
        tokens: list[TokenInfo] | None = None,
        dry_run: bool = True,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize status reporter.

        Args:
            snapshot: Returns a fresh run state snapshot.
            tokens: Configured tokens, used to render UI amounts.
            dry_run: Whether running in dry-run mode.
            output: Summary output stream (default: stdout).
        """
        self._snapshot = snapshot
        self._decimals = {token.symbol: token.decimals for token in tokens or []}
        self._dry_run = dry_run
        self._output = output or sys.stdout
        self._running = False
        self._task: asyncio.Task[None] | None = None

    def _ui(self, symbol: str, amount: int) -> str:
        decimals = self._decimals.get(symbol)
        if decimals is None:
            return f"{amount} {symbol}"
        return f"{to_ui_units(amount, decimals):,.6f} {symbol}"

    def get_status_line(self, snapshot: RunStateSnapshot | None = None) -> str:
        """Get a single-line status update."""
        snap = snapshot or self._snapshot()
        counter = snap.trade_counter
        profit = ", ".join(self._ui(symbol, amount) for symbol, amount in snap.profit.items()) or "0"

        return (
            f"{'[DRY RUN] ' if self._dry_run else ''}"
            f"Iter: {snap.iteration} ({snap.iteration_stats.per_minute:.0f}/min, "
            f"avg {snap.iteration_stats.avg_ms:.0f}ms) | "
            f"Trading: {'ON' if snap.trading_enabled else 'OFF'} | "
            f"Opp: {snap.opportunities_found} (max {snap.max_profit_spotted:.3f}%) | "
            f"Buy: {counter.buy.success}/{counter.buy.fail} | "
            f"Sell: {counter.sell.success}/{counter.sell.fail} | "
            f"Errors: {counter.error_count} | "
            f"Profit: {profit}"
        )

    async def run(self, interval: float = STATUS_REPORT_INTERVAL_S) -> None:
        """Log a status line every ``interval`` seconds."""
        self._running = True

        while self._running:
            await asyncio.sleep(interval)
            logger.info(self.get_status_line())

    def start(self, interval: float = STATUS_REPORT_INTERVAL_S) -> asyncio.Task[None]:
        """Start the reporter as a background task."""
        self._task = asyncio.create_task(self.run(interval))
        return self._task

    async def stop(self) -> None:
        """Stop the reporter and wait for its task to finish."""
        self._running = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def render_summary(self, snapshot: RunStateSnapshot | None = None) -> str:
        """Render the end-of-session summary."""
        snap = snapshot or self._snapshot()
        counter = snap.trade_counter
        stats = snap.iteration_stats

        lines = [
            "=" * 50,
            "  SESSION SUMMARY" + ("  [DRY RUN]" if self._dry_run else ""),
            "=" * 50,
            f"  Uptime: {format_uptime(snap.uptime_seconds)}",
            f"  Iterations: {snap.iteration:,} (avg {stats.avg_ms:.0f}ms, min {stats.min_ms:.0f}ms, max {stats.max_ms:.0f}ms)",
            "",
            "  OPPORTUNITIES:",
            f"    Found:       {snap.opportunities_found:,}",
            f"    Max spotted: {snap.max_profit_spotted:.4f}%",
            "",
            "  EXECUTION:",
            f"    Trades:      {len(snap.trade_history):,}",
            f"    Buy legs:    {counter.buy.success} ok / {counter.buy.fail} failed",
            f"    Sell legs:   {counter.sell.success} ok / {counter.sell.fail} failed",
            f"    Errors:      {counter.error_count}",
            "",
            "  PROFIT:",
        ]
        if snap.profit:
            lines.extend(f"    {self._ui(symbol, amount)}" for symbol, amount in snap.profit.items())
        else:
            lines.append("    none realized")
        if snap.balances:
            lines.append("")
            lines.append("  BALANCES:")
            lines.extend(f"    {self._ui(symbol, amount)}" for symbol, amount in snap.balances.items())
        lines.append("=" * 50)

        return "\n".join(lines)

    def print_summary(self) -> None:
        """Print the final summary."""
        self._output.write("\n" + self.render_summary() + "\n")
        self._output.flush()
