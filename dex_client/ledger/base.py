"""Interfaces the orchestration core requires of the ledger client.

These protocols allow swapping between the web3-backed client and an
in-memory ledger for testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Receipt:
    """Finalized (successful) transaction."""

    tx_hash: str
    block_number: int
    timestamp: int
    gas_used: int = 0


@runtime_checkable
class TransactionHandle(Protocol):
    """A submitted state-mutating request."""

    @property
    def tx_hash(self) -> str: ...

    async def await_finality(self) -> Receipt:
        """Wait until the ledger finalizes the transaction.

        Returns:
            Receipt of the successful transaction

        Raises:
            LedgerError: If the transaction reverted or could not be confirmed
        """
        ...


@runtime_checkable
class ContractHandle(Protocol):
    """A deployed program bound to an interface."""

    @property
    def address(self) -> str: ...

    async def call(self, method: str, *args: Any) -> Any:
        """Read-only call.

        Raises:
            LedgerError: If the call reverts or the transport fails
        """
        ...

    async def send(
        self,
        method: str,
        *args: Any,
        options: dict[str, Any] | None = None,
    ) -> TransactionHandle:
        """Submit a state-mutating request from the session account.

        Raises:
            LedgerError: If the request is refused before submission
        """
        ...


@runtime_checkable
class LedgerClient(Protocol):
    """Account discovery and contract resolution."""

    async def request_account(self) -> str:
        """Return the account that signs requests.

        Raises:
            LedgerError: If no account is available
        """
        ...

    def get_contract(self, address: str, abi: list[dict[str, Any]]) -> ContractHandle: ...


__all__ = ["Receipt", "TransactionHandle", "ContractHandle", "LedgerClient"]
