"""
Mock ledger for testing.

Signatures are numbered in send order ("sig-1" for the first leg,
"sig-2" for the second), so failures can be scripted per leg.
"""

from jupiter_arb.core.errors import ConfirmationTimeoutError, LedgerError, TransactionFailedError


class MockLedger:
    """Mock ``Ledger`` with scripted send and confirmation outcomes."""

    def __init__(self) -> None:
        self.sent: list[bytes] = []
        self.confirm_calls: list[str] = []
        self.settled_amounts: dict[str, int] = {}
        self.balances: dict[str, int] = {}

        self._send_failures: set[int] = set()
        self._confirm_errors: dict[int, LedgerError] = {}

    def fail_send(self, leg: int) -> None:
        self._send_failures.add(leg)

    def fail_on_chain(self, leg: int, error: object = "custom program error: 0x1771") -> None:
        self._confirm_errors[leg] = TransactionFailedError(f"sig-{leg}", {"InstructionError": [0, error]})

    def time_out(self, leg: int, timeout_s: float = 60.0) -> None:
        self._confirm_errors[leg] = ConfirmationTimeoutError(f"sig-{leg}", timeout_s)

    async def send_transaction(self, signed_tx: bytes) -> str:
        leg = len(self.sent) + 1
        if leg in self._send_failures:
            self._send_failures.discard(leg)
            raise LedgerError("RPC sendTransaction error: Blockhash not found", code=-32002)
        self.sent.append(signed_tx)
        return f"sig-{leg}"

    async def wait_for_confirmation(self, signature: str, timeout_s: float, poll_interval_s: float) -> None:
        self.confirm_calls.append(signature)
        leg = int(signature.rsplit("-", 1)[1])
        if leg in self._confirm_errors:
            raise self._confirm_errors[leg]

    async def get_settled_amount(self, signature: str, owner: str, mint: str) -> int | None:
        return self.settled_amounts.get(mint)

    async def get_token_balance(self, owner: str, mint: str) -> int:
        if mint not in self.balances:
            raise LedgerError(f"No balance for {mint}")
        return self.balances[mint]
