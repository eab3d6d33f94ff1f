"""Test helpers module for shared test utilities.

- constants: Addresses, decimals and common amounts
- ledger: In-memory ledger client
- factories: Ledger, config and client factory functions
"""

from tests.helpers.constants import (
    ACCOUNT,
    FACTORY,
    GENESIS_TIME,
    ONE_A,
    ONE_B,
    OTHER_ACCOUNT,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_DECIMALS,
)
from tests.helpers.factories import make_client, make_config, make_ledger
from tests.helpers.ledger import MockLedger

__all__ = [
    # Constants
    "ACCOUNT",
    "OTHER_ACCOUNT",
    "FACTORY",
    "ROUTER",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_DECIMALS",
    "GENESIS_TIME",
    "ONE_A",
    "ONE_B",
    # Ledger
    "MockLedger",
    # Factories
    "make_client",
    "make_config",
    "make_ledger",
]
