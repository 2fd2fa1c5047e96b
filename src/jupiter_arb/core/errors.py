"""
Error taxonomy for the arbitrage engine.

Recovery rules by type:

- QuoteError: one pair's quote failed. The pair is skipped, the scan goes on.
- ExecutionError: execution failed before any funds moved. Reported, the
  loop goes on.
- PartialExecutionError: leg 1 settled (or may have settled) but leg 2 did
  not. Not locally recoverable; logged at error level with the position.
- ConfigurationError: fatal at startup.
"""


class ArbitrageError(Exception):
    """Base exception for all engine errors."""


class ConfigurationError(ArbitrageError):
    """Invalid or unusable configuration detected at startup."""


class QuoteError(ArbitrageError):
    """The quote gateway could not price a swap."""

    def __init__(self, message: str, input_mint: str = "", output_mint: str = "") -> None:
        super().__init__(message)
        self.input_mint = input_mint
        self.output_mint = output_mint


class ExecutionError(ArbitrageError):
    """Execution failed before any funds moved."""


class PartialExecutionError(ExecutionError):
    """
    Leg 1 moved funds but the reverse leg did not complete.

    The wallet may be holding ``held_amount`` base units of ``held_token``
    that need manual reconciliation.
    """

    def __init__(
        self,
        message: str,
        held_token: str,
        held_amount: int | None,
        leg1_signature: str,
    ) -> None:
        super().__init__(message)
        self.held_token = held_token
        self.held_amount = held_amount
        self.leg1_signature = leg1_signature

    def describe_position(self) -> str:
        amount = "unknown amount" if self.held_amount is None else f"{self.held_amount} base units"
        return f"holding {amount} of {self.held_token} (leg 1 tx {self.leg1_signature})"


class LedgerError(ArbitrageError):
    """RPC request to the ledger failed."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class ConfirmationTimeoutError(LedgerError):
    """Transaction did not reach the target commitment in time."""

    def __init__(self, signature: str, timeout_s: float) -> None:
        super().__init__(f"Transaction {signature} not confirmed after {timeout_s:.1f}s")
        self.signature = signature
        self.timeout_s = timeout_s


class TransactionFailedError(LedgerError):
    """Transaction landed on-chain with an error."""

    def __init__(self, signature: str, error: object) -> None:
        super().__init__(f"Transaction {signature} failed: {error}")
        self.signature = signature
        self.error = error
