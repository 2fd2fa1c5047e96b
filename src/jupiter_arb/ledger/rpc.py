"""
Solana JSON-RPC client.

Submits signed transactions, polls them to a settled commitment and
reads back the amounts a transaction actually delivered. Implements the
``Ledger`` protocol.
"""

import asyncio
import base64
import logging
from typing import Any

import aiohttp
import orjson

from jupiter_arb.config.constants import DEFAULT_REQUEST_TIMEOUT_S, SETTLED_COMMITMENTS, WSOL_MINT
from jupiter_arb.core.errors import ConfirmationTimeoutError, LedgerError, TransactionFailedError
from jupiter_arb.utils.time import get_monotonic_us


logger = logging.getLogger(__name__)


def _settled_delta(tx: dict[str, Any], owner: str, mint: str) -> int | None:
    meta = tx.get("meta")
    if not meta:
        return None

    if mint == WSOL_MINT:
        account_keys = tx["transaction"]["message"]["accountKeys"]
        keys = [key["pubkey"] if isinstance(key, dict) else key for key in account_keys]
        if owner not in keys:
            return None
        index = keys.index(owner)
        delta = int(meta["postBalances"][index]) - int(meta["preBalances"][index])
        if index == 0:
            delta += int(meta.get("fee", 0))
        return delta

    def _sum(balances: list[dict[str, Any]]) -> int:
        return sum(
            int(entry["uiTokenAmount"]["amount"])
            for entry in balances
            if entry.get("owner") == owner and entry.get("mint") == mint
        )

    return _sum(meta.get("postTokenBalances") or []) - _sum(meta.get("preTokenBalances") or [])


class SolanaRpcClient:
    """Minimal async JSON-RPC client for the calls the engine needs."""

    def __init__(self, rpc_url: str, timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S) -> None:
        """
        Initialize the RPC client.

        Args:
            rpc_url: HTTP endpoint of the Solana RPC node.
            timeout_s: Total timeout per request in seconds.
        """
        self._rpc_url = rpc_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session: aiohttp.ClientSession | None = None
        self._request_id = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _call(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Perform one JSON-RPC call and return its ``result``.

        Raises:
            LedgerError: On transport errors or an RPC error object.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        session = await self._get_session()
        try:
            async with session.post(self._rpc_url, json=payload) as response:
                text = await response.text()
                if response.status >= 400:
                    raise LedgerError(f"RPC {method} failed with HTTP {response.status}: {text[:200]}")
                body = orjson.loads(text)
        except aiohttp.ClientError as e:
            raise LedgerError(f"RPC {method} network error: {e}") from e
        except asyncio.TimeoutError as e:
            raise LedgerError(f"RPC {method} timed out") from e
        except orjson.JSONDecodeError as e:
            raise LedgerError(f"RPC {method} returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise LedgerError(f"RPC {method} returned unexpected body: {body!r}")

        error = body.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", error) if isinstance(error, dict) else error
            raise LedgerError(f"RPC {method} error: {message}", code=code)

        return body.get("result")

    # =========================================================================
    # Health
    # =========================================================================

    async def get_health(self) -> str:
        """Return the node health string ("ok" when healthy)."""
        return str(await self._call("getHealth"))

    # =========================================================================
    # Transactions
    # =========================================================================

    async def send_transaction(self, signed_tx: bytes) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            Transaction signature (base58).
        """
        encoded = base64.b64encode(signed_tx).decode("ascii")
        result = await self._call(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": "confirmed", "maxRetries": 3}],
        )
        if not isinstance(result, str):
            raise LedgerError(f"sendTransaction returned unexpected result: {result!r}")
        return result

    async def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        """Current status of a signature, None if the node has not seen it."""
        result = await self._call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
        )
        try:
            status = ((result or {}).get("value") or [None])[0]
        except (AttributeError, IndexError, TypeError) as e:
            raise LedgerError(f"Malformed getSignatureStatuses result for {signature}: {e!r}") from e
        if status is not None and not isinstance(status, dict):
            raise LedgerError(f"Malformed signature status for {signature}: {status!r}")
        return status

    async def wait_for_confirmation(
        self,
        signature: str,
        timeout_s: float,
        poll_interval_s: float,
    ) -> None:
        """
        Poll a signature until it is confirmed.

        Transient RPC errors during polling are retried until the deadline.

        Raises:
            TransactionFailedError: The transaction landed with an error.
            ConfirmationTimeoutError: No settled status within ``timeout_s``.
        """
        deadline_us = get_monotonic_us() + int(timeout_s * 1_000_000)

        while True:
            try:
                status = await self.get_signature_status(signature)
            except LedgerError as e:
                logger.warning(f"Status poll for {signature} failed: {e}")
                status = None

            if status is not None:
                if status.get("err"):
                    raise TransactionFailedError(signature, status["err"])
                if status.get("confirmationStatus") in SETTLED_COMMITMENTS:
                    logger.debug(f"Transaction {signature} {status['confirmationStatus']}")
                    return

            if get_monotonic_us() >= deadline_us:
                raise ConfirmationTimeoutError(signature, timeout_s)

            await asyncio.sleep(poll_interval_s)

    async def get_settled_amount(self, signature: str, owner: str, mint: str) -> int | None:
        """
        Net amount of ``mint`` that ``owner`` received in a transaction.

        Native SOL is measured as the lamport change of the owner account,
        with the transaction fee added back when the owner paid it.

        Returns:
            Received amount in base units, or None if the transaction
            or its metadata is not available.
        """
        tx = await self._call(
            "getTransaction",
            [signature, {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0, "commitment": "confirmed"}],
        )
        if not tx:
            return None

        try:
            return _settled_delta(tx, owner, mint)
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise LedgerError(f"Malformed getTransaction result for {signature}: {e!r}") from e

    # =========================================================================
    # Balances
    # =========================================================================

    async def get_token_balance(self, owner: str, mint: str) -> int:
        """Balance of ``mint`` held by ``owner`` in base units (lamports for SOL)."""
        if mint == WSOL_MINT:
            result = await self._call("getBalance", [owner, {"commitment": "confirmed"}])
            try:
                return int(result["value"])
            except (KeyError, TypeError, ValueError) as e:
                raise LedgerError(f"Malformed getBalance result for {owner}: {e!r}") from e

        result = await self._call(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed", "commitment": "confirmed"}],
        )
        try:
            return sum(
                int(account["account"]["data"]["parsed"]["info"]["tokenAmount"]["amount"])
                for account in result["value"]
            )
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerError(f"Malformed getTokenAccountsByOwner result for {owner}: {e!r}") from e

    async def __aenter__(self) -> "SolanaRpcClient":
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
