"""Asset metadata and ERC20 access for the session account.

Decimals and symbols are immutable once deployed, so they are cached per
asset for the lifetime of the session. Balances and allowances are always
read fresh.
"""

from __future__ import annotations

from typing import Any

import structlog

from dex_client.abis import ERC20_ABI
from dex_client.ledger.base import ContractHandle, LedgerClient, TransactionHandle
from dex_client.models.types import normalize_address

logger = structlog.get_logger()


class TokenMetadata:
    """Per-session view of ERC20 assets.

    All methods may raise LedgerError; callers classify it.
    """

    def __init__(self, ledger: LedgerClient) -> None:
        self._ledger = ledger
        self._contracts: dict[str, ContractHandle] = {}
        self._decimals: dict[str, int] = {}
        self._symbols: dict[str, str] = {}

    def token(self, address: str) -> ContractHandle:
        """Contract handle for an asset (cached)."""
        key = normalize_address(address)
        handle = self._contracts.get(key)
        if handle is None:
            handle = self._ledger.get_contract(address, ERC20_ABI)
            self._contracts[key] = handle
        return handle

    async def decimals(self, address: str) -> int:
        key = normalize_address(address)
        if key not in self._decimals:
            value = int(await self.token(address).call("decimals"))
            self._decimals[key] = value
            logger.debug("token_decimals_cached", token=key, decimals=value)
        return self._decimals[key]

    async def symbol(self, address: str) -> str:
        key = normalize_address(address)
        if key not in self._symbols:
            self._symbols[key] = str(await self.token(address).call("symbol"))
        return self._symbols[key]

    async def balance_of(self, address: str, account: str) -> int:
        return int(await self.token(address).call("balanceOf", account))

    async def allowance(self, address: str, holder: str, spender: str) -> int:
        return int(await self.token(address).call("allowance", holder, spender))

    async def approve(
        self,
        address: str,
        spender: str,
        amount: int,
        options: dict[str, Any] | None = None,
    ) -> TransactionHandle:
        return await self.token(address).send("approve", spender, amount, options=options)

    @property
    def cached_decimals(self) -> dict[str, int]:
        """Snapshot of the decimals cache (for diagnostics)."""
        return dict(self._decimals)


__all__ = ["TokenMetadata"]
