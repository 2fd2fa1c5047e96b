"""
Run state for the scan loop.

RunState is the single mutable state record of the process. It is owned
by the scan loop and changed only through its update methods; everything
else (reporters, persistence) reads immutable snapshots.
"""

import copy
import logging
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Final

import orjson

from jupiter_arb.core.types import ArbitrageOpportunity, LegStatus, TradeRecord, TradeSide
from jupiter_arb.utils.time import get_monotonic_us


logger = logging.getLogger(__name__)

CACHE_FILE_NAME: Final[str] = "cache.json"
HISTORY_FILE_NAME: Final[str] = "tradeHistory.json"

_ORJSON_OPTIONS: Final[int] = orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS


class EngineCommand(str, Enum):
    """Commands a control surface may send to the scan loop."""

    ENABLE_TRADING = "enable_trading"
    DISABLE_TRADING = "disable_trading"
    TOGGLE_TRADING = "toggle_trading"
    STOP = "stop"


@dataclass(slots=True)
class IterationStats:
    """Timing statistics for scan iterations."""

    count: int = 0
    last_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    total_ms: float = 0.0
    per_minute: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


@dataclass(slots=True)
class SideStats:
    success: int = 0
    fail: int = 0


@dataclass(slots=True)
class TradeCounter:
    """Leg outcomes per side plus loop-level error count."""

    buy: SideStats = field(default_factory=SideStats)
    sell: SideStats = field(default_factory=SideStats)
    error_count: int = 0

    def for_side(self, side: TradeSide) -> SideStats:
        return self.buy if side == TradeSide.BUY else self.sell


@dataclass(slots=True, frozen=True)
class RunStateSnapshot:
    """Read-only copy of the run state at one point in time."""

    start_time: datetime
    iteration: int
    trading_enabled: bool
    executing: bool
    iteration_stats: IterationStats
    opportunities_found: int
    max_profit_spotted: float
    profit: dict[str, int]
    balances: dict[str, int]
    trade_counter: TradeCounter
    trade_history: tuple[TradeRecord, ...]

    @property
    def uptime_seconds(self) -> float:
        return (datetime.now(tz=UTC) - self.start_time).total_seconds()

    def to_document(self, include_history: bool = False) -> dict[str, Any]:
        """Serializable form; history is stored separately by default."""
        document = asdict(self)
        if not include_history:
            document.pop("trade_history")
        document["iteration_stats"]["avg_ms"] = self.iteration_stats.avg_ms
        return document


class RunState:
    """
    Mutable process state owned by the scan loop.

    Tracks iterations, the trading toggle, timing statistics, cumulative
    profit, last-known balances, per-side trade counters and the ordered
    trade history.
    """

    def __init__(self, trading_enabled: bool = True) -> None:
        self._start_time = datetime.now(tz=UTC)
        self._iteration = 0
        self._trading_enabled = trading_enabled
        self._executing = False
        self._iteration_stats = IterationStats()
        self._recent_iterations: deque[int] = deque()
        self._opportunities_found = 0
        self._max_profit_spotted = 0.0
        self._profit: dict[str, int] = {}
        self._balances: dict[str, int] = {}
        self._trade_counter = TradeCounter()
        self._trade_history: list[TradeRecord] = []

    # =========================================================================
    # Update Operations
    # =========================================================================

    def advance_iteration(self, duration_us: int) -> int:
        """
        Close one scan iteration and update timing statistics.

        Returns:
            The new iteration count.
        """
        duration_ms = duration_us / 1000.0
        stats = self._iteration_stats

        self._iteration += 1
        stats.count += 1
        stats.last_ms = duration_ms
        stats.total_ms += duration_ms
        stats.max_ms = max(stats.max_ms, duration_ms)
        stats.min_ms = duration_ms if stats.count == 1 else min(stats.min_ms, duration_ms)

        now = get_monotonic_us()
        self._recent_iterations.append(now)
        while self._recent_iterations and now - self._recent_iterations[0] > 60_000_000:
            self._recent_iterations.popleft()
        stats.per_minute = float(len(self._recent_iterations))

        return self._iteration

    def record_scan(self, opportunities: list[ArbitrageOpportunity], best_profit_percent: float | None) -> None:
        """Record the outcome of one opportunity scan."""
        self._opportunities_found += len(opportunities)
        if best_profit_percent is not None and best_profit_percent > self._max_profit_spotted:
            self._max_profit_spotted = best_profit_percent

    def record_trade(self, record: TradeRecord, base_token_symbol: str) -> None:
        """Append a trade record and fold it into counters and profit."""
        self._trade_history.append(record)

        for leg in record.legs:
            if leg.status == LegStatus.SKIPPED:
                continue
            side_stats = self._trade_counter.for_side(leg.side)
            if leg.is_settled:
                side_stats.success += 1
            else:
                side_stats.fail += 1

        if record.profit is not None and not record.dry_run:
            self._profit[base_token_symbol] = self._profit.get(base_token_symbol, 0) + record.profit

    def record_error(self) -> None:
        self._trade_counter.error_count += 1

    def set_trading_enabled(self, enabled: bool) -> None:
        if enabled != self._trading_enabled:
            logger.info(f"Trading {'enabled' if enabled else 'disabled'}")
        self._trading_enabled = enabled

    def toggle_trading(self) -> bool:
        self.set_trading_enabled(not self._trading_enabled)
        return self._trading_enabled

    def set_executing(self, executing: bool) -> None:
        self._executing = executing

    def update_balance(self, symbol: str, amount: int) -> None:
        self._balances[symbol] = amount

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def trading_enabled(self) -> bool:
        return self._trading_enabled

    @property
    def trade_count(self) -> int:
        return len(self._trade_history)

    def snapshot(self) -> RunStateSnapshot:
        """Take an immutable copy for presentation or persistence."""
        return RunStateSnapshot(
            start_time=self._start_time,
            iteration=self._iteration,
            trading_enabled=self._trading_enabled,
            executing=self._executing,
            iteration_stats=copy.copy(self._iteration_stats),
            opportunities_found=self._opportunities_found,
            max_profit_spotted=self._max_profit_spotted,
            profit=dict(self._profit),
            balances=dict(self._balances),
            trade_counter=copy.deepcopy(self._trade_counter),
            trade_history=tuple(copy.deepcopy(self._trade_history)),
        )


class StateStore:
    """
    Writes run state snapshots to a local directory.

    Two human-readable JSON documents are kept: the current state and
    the full trade history. They are informational only; the engine
    never resumes from them.
    """

    def __init__(self, state_dir: Path) -> None:
        self._state_dir = state_dir

    @property
    def cache_path(self) -> Path:
        return self._state_dir / CACHE_FILE_NAME

    @property
    def history_path(self) -> Path:
        return self._state_dir / HISTORY_FILE_NAME

    def save(self, snapshot: RunStateSnapshot) -> None:
        """Persist the snapshot and the trade history."""
        self._state_dir.mkdir(parents=True, exist_ok=True)

        self.cache_path.write_bytes(orjson.dumps(snapshot.to_document(), option=_ORJSON_OPTIONS))
        self.history_path.write_bytes(orjson.dumps(list(snapshot.trade_history), option=_ORJSON_OPTIONS))

        logger.info(f"State saved to {self.cache_path} and {self.history_path}")

    def read_history(self) -> list[dict[str, Any]]:
        """
        Read the trade history of a previous run.

        Returns:
            List of trade documents, empty if none was saved.
        """
        if not self.history_path.exists():
            return []

        data = orjson.loads(self.history_path.read_bytes())
        if not isinstance(data, list):
            raise ValueError(f"Unexpected trade history format in {self.history_path}")
        return data
