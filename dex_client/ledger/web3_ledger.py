"""Ledger client backed by web3's AsyncWeb3 and a node JSON-RPC endpoint.

Requests are signed by node-managed accounts (``eth_accounts``); this module
never handles private keys.
"""

from __future__ import annotations

from typing import Any

import structlog
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError

from dex_client.errors import FailureCause, LedgerError
from dex_client.ledger.base import Receipt

logger = structlog.get_logger()

# Upper bound on a single receipt wait; the settlement deadline is the real timeout
DEFAULT_RECEIPT_TIMEOUT = 24 * 60 * 60.0


def _revert_reason(err: Exception) -> str:
    """Extract a human-readable reason from a web3 exception."""
    if isinstance(err, ContractLogicError) and err.message:
        return str(err.message)
    return str(err) or type(err).__name__


def _failure_cause(err: Exception, tx_hash: str | None = None) -> FailureCause:
    """Classify a web3 exception; anything but a contract revert is transient."""
    return FailureCause(
        reason=_revert_reason(err),
        tx_hash=tx_hash,
        transient=not isinstance(err, ContractLogicError),
    )


class Web3Transaction:
    """Transaction submitted through a web3 node."""

    def __init__(self, w3: AsyncWeb3, tx_hash: str, receipt_timeout: float) -> None:
        self._w3 = w3
        self._tx_hash = tx_hash
        self._receipt_timeout = receipt_timeout

    @property
    def tx_hash(self) -> str:
        return self._tx_hash

    async def await_finality(self) -> Receipt:
        """Wait for the receipt; reverted transactions raise LedgerError."""
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                self._tx_hash, timeout=self._receipt_timeout
            )
            block = await self._w3.eth.get_block(receipt["blockNumber"])
        except Exception as e:
            logger.warning("web3_receipt_failed", tx_hash=self._tx_hash, error=str(e))
            raise LedgerError(_failure_cause(e, self._tx_hash)) from e

        timestamp = int(block["timestamp"])
        if receipt["status"] != 1:
            reason = await self._replay_for_reason(receipt["blockNumber"])
            logger.warning(
                "web3_transaction_reverted",
                tx_hash=self._tx_hash,
                block=receipt["blockNumber"],
                reason=reason,
            )
            raise LedgerError(
                FailureCause(reason=reason, tx_hash=self._tx_hash, timestamp=timestamp)
            )

        return Receipt(
            tx_hash=self._tx_hash,
            block_number=int(receipt["blockNumber"]),
            timestamp=timestamp,
            gas_used=int(receipt["gasUsed"]),
        )

    async def _replay_for_reason(self, block_number: int) -> str:
        """Re-run the reverted transaction as a call to recover its revert reason."""
        try:
            tx = await self._w3.eth.get_transaction(self._tx_hash)
            await self._w3.eth.call(
                {
                    "from": tx["from"],
                    "to": tx["to"],
                    "data": tx["input"],
                    "value": tx["value"],
                    "gas": tx["gas"],
                },
                block_number,
            )
        except Exception as e:
            return _revert_reason(e)
        return "transaction reverted"


class Web3Contract:
    """Contract handle that reads with eth_call and writes with eth_sendTransaction."""

    def __init__(self, ledger: Web3Ledger, address: str, abi: list[dict[str, Any]]) -> None:
        self._ledger = ledger
        self._address = AsyncWeb3.to_checksum_address(address)
        self._contract = ledger.w3.eth.contract(address=self._address, abi=abi)

    @property
    def address(self) -> str:
        return self._address

    def _function(self, method: str, args: tuple[Any, ...]) -> Any:
        converted = [_to_web3_arg(arg) for arg in args]
        return self._contract.functions[method](*converted)

    async def call(self, method: str, *args: Any) -> Any:
        try:
            return await self._function(method, args).call()
        except Exception as e:
            logger.debug(
                "web3_call_failed", contract=self._address, method=method, error=_revert_reason(e)
            )
            raise LedgerError(_failure_cause(e)) from e

    async def send(
        self,
        method: str,
        *args: Any,
        options: dict[str, Any] | None = None,
    ) -> Web3Transaction:
        account = await self._ledger.request_account()
        tx_params: dict[str, Any] = {"from": account}
        if options:
            tx_params.update(options)
        try:
            tx_hash = await self._function(method, args).transact(tx_params)
        except Exception as e:
            logger.warning(
                "web3_send_failed", contract=self._address, method=method, error=_revert_reason(e)
            )
            raise LedgerError(_failure_cause(e)) from e

        hex_hash = AsyncWeb3.to_hex(tx_hash)
        logger.debug("web3_transaction_sent", contract=self._address, method=method, tx=hex_hash)
        return Web3Transaction(self._ledger.w3, hex_hash, self._ledger.receipt_timeout)


def _to_web3_arg(value: Any) -> Any:
    """Checksum address arguments (including inside path lists)."""
    if isinstance(value, str) and AsyncWeb3.is_address(value):
        return AsyncWeb3.to_checksum_address(value)
    if isinstance(value, list | tuple):
        return [_to_web3_arg(v) for v in value]
    return value


class Web3Ledger:
    """Ledger client talking to a JSON-RPC node over HTTP."""

    def __init__(
        self,
        rpc_url: str,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            rpc_url: HTTP RPC URL (e.g., "http://127.0.0.1:8545")
            receipt_timeout: Maximum seconds to wait for a single receipt
        """
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.receipt_timeout = receipt_timeout
        self._account: str | None = None

    async def request_account(self) -> str:
        if self._account is not None:
            return self._account
        try:
            accounts = await self.w3.eth.accounts
        except Exception as e:
            raise LedgerError(_failure_cause(e)) from e
        if not accounts:
            raise LedgerError("Node exposes no accounts")
        self._account = str(accounts[0])
        logger.info("web3_account_selected", account=self._account)
        return self._account

    def get_contract(self, address: str, abi: list[dict[str, Any]]) -> Web3Contract:
        return Web3Contract(self, address, abi)


__all__ = ["Web3Ledger", "Web3Contract", "Web3Transaction", "DEFAULT_RECEIPT_TIMEOUT"]
