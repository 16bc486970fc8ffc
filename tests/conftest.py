"""
Test fixtures for Opinion Trade.

Signing tests use REAL cryptographic signatures so that the EIP-712 digest
is checked end to end, not mocked.
"""

import pytest
from eth_account import Account

from opinion_trade.signer import ExchangeDomain, OrderSigner

# Deterministic test private key (DO NOT USE IN PRODUCTION)
TEST_PRIVATE_KEY = "0x" + "1" * 64

# Any well-formed address works as the maker Safe in tests
TEST_MAKER_ADDRESS = Account.from_key("0x" + "2" * 64).address

TEST_TOKEN_ID = (
    "28621407232745283455123456789012345678901234567890123456789012345678901234567"
)

FIXED_NOW = 1_700_000_000.4


@pytest.fixture(scope="session")
def test_private_key() -> str:
    """Return the test private key."""
    return TEST_PRIVATE_KEY


@pytest.fixture(scope="session")
def test_account():
    """Ethereum account for the test key."""
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def order_signer() -> OrderSigner:
    return OrderSigner(TEST_PRIVATE_KEY)


@pytest.fixture
def domain() -> ExchangeDomain:
    """Production exchange domain (BSC, chain 56)."""
    return ExchangeDomain()


@pytest.fixture
def fixed_clock():
    """Clock frozen at FIXED_NOW seconds."""
    return lambda: FIXED_NOW


@pytest.fixture
def fixed_salt():
    """Salt generator that always returns the same salt."""
    return lambda: "1700000000400"
