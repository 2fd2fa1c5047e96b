"""
Wallet loading and transaction signing.

The aggregator returns unsigned versioned transactions; the engine signs
them locally with the wallet keypair before broadcasting.
"""

from pathlib import Path

import orjson
from solders.keypair import Keypair
from solders.transaction import VersionedTransaction

from jupiter_arb.core.errors import ConfigurationError
from jupiter_arb.utils.addresses import short_address


def load_keypair(path: Path) -> Keypair:
    """
    Load a keypair file in the Solana CLI format (JSON array of 64 ints).

    A file holding a single base58 secret key string is accepted too.

    Raises:
        ConfigurationError: If the file is missing or not a valid keypair.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Cannot read wallet file {path}: {e}") from e

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        data = raw.decode("utf-8", errors="replace").strip()

    try:
        if isinstance(data, list):
            return Keypair.from_bytes(bytes(data))
        if isinstance(data, str):
            return Keypair.from_base58_string(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid keypair in {path}: {e}") from e

    raise ConfigurationError(f"Unsupported wallet file format: {path}")


class WalletSigner:
    """
    Signs serialized transactions with a wallet keypair.

    Implements the ``TransactionSigner`` protocol.
    """

    __slots__ = ("_keypair",)

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @classmethod
    def from_file(cls, path: Path) -> "WalletSigner":
        return cls(load_keypair(path))

    @property
    def public_key(self) -> str:
        return str(self._keypair.pubkey())

    @property
    def short_public_key(self) -> str:
        return short_address(self.public_key)

    def sign_transaction(self, unsigned_tx: bytes) -> bytes:
        """
        Sign an unsigned versioned transaction.

        Args:
            unsigned_tx: Serialized transaction as built by the aggregator.

        Returns:
            Serialized, signed transaction ready to broadcast.
        """
        tx = VersionedTransaction.from_bytes(unsigned_tx)
        signed = VersionedTransaction(tx.message, [self._keypair])
        return bytes(signed)
