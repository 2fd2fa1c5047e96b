"""Mock implementations for testing."""

from tests.mocks.gateway import MockGateway
from tests.mocks.ledger import MockLedger
from tests.mocks.signer import FakeSigner


__all__ = [
    "FakeSigner",
    "MockGateway",
    "MockLedger",
]
