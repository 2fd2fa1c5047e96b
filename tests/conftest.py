"""
Pytest configuration and shared fixtures.

Provides reusable tokens, mock collaborators and opportunities for all
test modules.
"""

import pytest

from jupiter_arb.core.types import ArbitrageOpportunity, TokenInfo
from tests.mocks.factories import JUP, SOL, USDC, make_opportunity
from tests.mocks.gateway import MockGateway
from tests.mocks.ledger import MockLedger
from tests.mocks.signer import FakeSigner


# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def sol() -> TokenInfo:
    return SOL


@pytest.fixture
def usdc() -> TokenInfo:
    return USDC


@pytest.fixture
def jup() -> TokenInfo:
    return JUP


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def gateway() -> MockGateway:
    """Gateway quoting the SOL/USDC round trip at +1.0%."""
    gw = MockGateway()
    gw.set_out_amount(SOL.address, USDC.address, 100_000_000)
    gw.set_out_amount(USDC.address, SOL.address, 1_010_000_000)
    return gw


@pytest.fixture
def ledger() -> MockLedger:
    """Ledger that confirms everything and settles the quoted amounts."""
    return MockLedger()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


# =============================================================================
# Opportunity Fixtures
# =============================================================================


@pytest.fixture
def sol_usdc_opportunity() -> ArbitrageOpportunity:
    """1 SOL round trip through USDC at +1.0%."""
    return make_opportunity(SOL, USDC, 1.0)
