"""Core module containing type definitions, errors and run state."""

from jupiter_arb.core.errors import (
    ArbitrageError,
    ConfigurationError,
    ExecutionError,
    LedgerError,
    PartialExecutionError,
    QuoteError,
)
from jupiter_arb.core.state import EngineCommand, RunState, RunStateSnapshot, StateStore
from jupiter_arb.core.types import (
    ArbitrageOpportunity,
    ExecutionStatus,
    LegResult,
    LegStatus,
    Quote,
    TokenInfo,
    TradeRecord,
    TradeSide,
)


__all__ = [
    "ArbitrageError",
    "ArbitrageOpportunity",
    "ConfigurationError",
    "EngineCommand",
    "ExecutionError",
    "ExecutionStatus",
    "LedgerError",
    "LegResult",
    "LegStatus",
    "PartialExecutionError",
    "Quote",
    "QuoteError",
    "RunState",
    "RunStateSnapshot",
    "StateStore",
    "TokenInfo",
    "TradeRecord",
    "TradeSide",
]
