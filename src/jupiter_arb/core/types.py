"""
Type definitions for the arbitrage engine.

Dataclasses, enums and Protocol interfaces shared across the engine.
Value types are frozen with slots; records that cross into persistence
stay plain dataclasses so orjson can serialize them directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from jupiter_arb.utils.amounts import MAX_DECIMALS
from jupiter_arb.utils.time import get_timestamp_us


# =============================================================================
# Enums
# =============================================================================


class TradeSide(str, Enum):
    """Leg direction: BUY is base -> quote, SELL is quote -> base."""

    BUY = "buy"
    SELL = "sell"


class LegStatus(str, Enum):
    """Outcome of a single swap leg."""

    CONFIRMED = "confirmed"
    SIMULATED = "simulated"
    FAILED = "failed"
    UNCONFIRMED = "unconfirmed"
    SKIPPED = "skipped"


class ExecutionStatus(str, Enum):
    """Outcome of a round-trip execution attempt."""

    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


# =============================================================================
# Market Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class TokenInfo:
    """
    Resolved token metadata.

    Immutable once resolved; ``address`` is the base58 mint address.
    """

    symbol: str
    name: str
    address: str
    decimals: int
    volume_24h: float | None = None
    price_change_24h: float | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ValueError(f"{self.symbol}: decimals out of range: {self.decimals}")


@dataclass(slots=True, frozen=True)
class Quote:
    """
    Point-in-time price observation from the quote gateway.

    ``route`` is the raw gateway payload; it is passed back unchanged
    when requesting the swap transaction. Treat a quote as stale after
    any other network round trip.
    """

    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    other_amount_threshold: int
    slippage_bps: int
    price_impact_pct: float
    route: dict[str, Any] = field(repr=False, compare=False)
    timestamp_us: int = field(default_factory=get_timestamp_us)


@dataclass(slots=True, frozen=True)
class ArbitrageOpportunity:
    """
    A profitable round trip found during one scan cycle.

    ``profit_amount`` is signed and in base units of ``base_token``.
    """

    base_token: TokenInfo
    quote_token: TokenInfo
    base_amount: int
    quote_amount: int
    profit_amount: int
    profit_percent: float
    forward_quote: Quote
    reverse_quote: Quote
    timestamp_us: int = field(default_factory=get_timestamp_us)

    def __post_init__(self) -> None:
        if self.base_token.address == self.quote_token.address:
            raise ValueError(f"Base and quote token are the same mint: {self.base_token.address}")

    @property
    def pair_id(self) -> str:
        return f"{self.base_token.symbol}/{self.quote_token.symbol}"

    @property
    def expected_out_amount(self) -> int:
        """Base amount expected back at discovery time."""
        return self.base_amount + self.profit_amount


# =============================================================================
# Execution Types
# =============================================================================


@dataclass(slots=True)
class LegResult:
    """Result of executing a single swap leg."""

    side: TradeSide
    input_mint: str
    output_mint: str
    in_amount: int
    expected_out_amount: int = 0
    actual_out_amount: int | None = None
    signature: str | None = None
    status: LegStatus = LegStatus.SKIPPED
    error: str | None = None
    latency_us: int = 0

    @property
    def is_settled(self) -> bool:
        return self.status in (LegStatus.CONFIRMED, LegStatus.SIMULATED)


@dataclass(slots=True)
class TradeRecord:
    """
    One round-trip execution attempt, successful or not.

    Append-only: created by the execution sequencer, stored in the
    run state history and never modified afterwards.
    """

    timestamp: str
    input_symbol: str
    output_symbol: str
    in_amount: int
    out_amount: int | None
    expected_out_amount: int
    expected_profit: int
    profit: int | None
    latency_ms: float
    slippage_bps: int
    status: ExecutionStatus
    legs: list[LegResult] = field(default_factory=list)
    error: str | None = None
    dry_run: bool = False

    @property
    def side(self) -> TradeSide:
        """Side of the last leg that was attempted."""
        attempted = [leg for leg in self.legs if leg.status != LegStatus.SKIPPED]
        return attempted[-1].side if attempted else TradeSide.BUY

    @property
    def is_success(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    @property
    def is_partial(self) -> bool:
        return self.status == ExecutionStatus.PARTIAL


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class QuoteGateway(Protocol):
    """Aggregator that prices swaps and builds swap transactions."""

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> Quote:
        """Price a swap; raises QuoteError on failure."""
        ...

    async def get_swap_transaction(self, quote: Quote, user_public_key: str) -> bytes:
        """Build an unsigned, serialized swap transaction for ``quote``."""
        ...


class Ledger(Protocol):
    """Ledger RPC used to submit and settle transactions."""

    async def send_transaction(self, signed_tx: bytes) -> str:
        """Broadcast a signed transaction and return its signature."""
        ...

    async def wait_for_confirmation(
        self,
        signature: str,
        timeout_s: float,
        poll_interval_s: float,
    ) -> None:
        """Poll until ``signature`` is confirmed, failed, or the timeout elapses."""
        ...

    async def get_settled_amount(self, signature: str, owner: str, mint: str) -> int | None:
        """Amount of ``mint`` that ``owner`` received in the transaction."""
        ...

    async def get_token_balance(self, owner: str, mint: str) -> int:
        """Current balance of ``mint`` held by ``owner`` in base units."""
        ...


class TransactionSigner(Protocol):
    """Wallet that signs serialized transactions."""

    @property
    def public_key(self) -> str:
        ...

    def sign_transaction(self, unsigned_tx: bytes) -> bytes:
        ...
