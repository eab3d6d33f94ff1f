"""Ledger client interfaces and implementations.

The web3-backed client lives in ``dex_client.ledger.web3_ledger`` and is
imported on demand.
"""

from dex_client.ledger.base import ContractHandle, LedgerClient, Receipt, TransactionHandle

__all__ = ["ContractHandle", "LedgerClient", "Receipt", "TransactionHandle"]
