"""
Unit tests for wallet loading and transaction signing.
"""

from pathlib import Path

import orjson
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from jupiter_arb.core.errors import ConfigurationError
from jupiter_arb.execution.signer import WalletSigner, load_keypair


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


class TestLoadKeypair:
    """Tests for load_keypair."""

    def test_json_byte_array(self, tmp_path: Path, keypair: Keypair) -> None:
        path = tmp_path / "id.json"
        path.write_bytes(orjson.dumps(list(bytes(keypair))))

        assert load_keypair(path).pubkey() == keypair.pubkey()

    def test_base58_string(self, tmp_path: Path, keypair: Keypair) -> None:
        path = tmp_path / "id.txt"
        path.write_text(f"{keypair}\n")

        assert load_keypair(path).pubkey() == keypair.pubkey()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read wallet"):
            load_keypair(tmp_path / "missing.json")

    def test_wrong_length(self, tmp_path: Path) -> None:
        path = tmp_path / "id.json"
        path.write_bytes(orjson.dumps([1] * 32))

        with pytest.raises(ConfigurationError):
            load_keypair(path)

    def test_out_of_range_values(self, tmp_path: Path) -> None:
        path = tmp_path / "id.json"
        path.write_bytes(orjson.dumps([300] * 64))

        with pytest.raises(ConfigurationError):
            load_keypair(path)

    def test_unsupported_document(self, tmp_path: Path) -> None:
        path = tmp_path / "id.json"
        path.write_bytes(orjson.dumps({"secret": "x"}))

        with pytest.raises(ConfigurationError, match="Unsupported"):
            load_keypair(path)


class TestWalletSigner:
    """Tests for WalletSigner."""

    def test_public_key(self, keypair: Keypair) -> None:
        signer = WalletSigner(keypair)

        assert signer.public_key == str(keypair.pubkey())
        assert signer.short_public_key == f"{signer.public_key[:4]}...{signer.public_key[-4:]}"

    def test_from_file(self, tmp_path: Path, keypair: Keypair) -> None:
        path = tmp_path / "id.json"
        path.write_bytes(orjson.dumps(list(bytes(keypair))))

        assert WalletSigner.from_file(path).public_key == str(keypair.pubkey())

    def test_sign_transaction(self, keypair: Keypair) -> None:
        message = MessageV0.try_compile(keypair.pubkey(), [], [], Hash.default())
        unsigned = VersionedTransaction.populate(message, [Signature.default()])

        signed = VersionedTransaction.from_bytes(WalletSigner(keypair).sign_transaction(bytes(unsigned)))

        assert signed.signatures == VersionedTransaction(message, [keypair]).signatures
        assert signed.signatures[0] != Signature.default()
        assert signed.message == message
