"""Pytest configuration and fixtures."""

import pytest

from dex_client.client import DexClient
from tests.helpers import MockLedger, make_client, make_ledger


@pytest.fixture
def ledger() -> MockLedger:
    """Ledger with funded TOKEN_A/TOKEN_B balances and an A/B pair."""
    return make_ledger()


@pytest.fixture
def client(ledger: MockLedger) -> DexClient:
    """Initialized client on the ledger fixture."""
    return make_client(ledger)
