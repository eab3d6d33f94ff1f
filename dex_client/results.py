"""Typed outcomes returned by every user-initiated operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dex_client.authorization import AuthorizationResult
from dex_client.errors import DexError, ErrorKind


class Operation(str, Enum):
    """User-initiated intents."""

    INITIALIZE = "initialize"
    SWAP = "swap"
    ADD_LIQUIDITY = "add_liquidity"
    CREATE_PAIR = "create_pair"
    APPROVE = "approve"
    QUOTE = "quote"


@dataclass(frozen=True)
class OperationResult:
    """Exactly one terminal outcome of an operation.

    Partial effects are always reported: ``approvals`` lists the approvals
    confirmed during the intent even when a later step failed, so a retry
    does not pay for them again.

    Examples:
        result = OperationResult.success(Operation.SWAP, tx_hash="0xabc")
        assert result.is_success

        result = OperationResult.failure(Operation.SWAP, NoRoute("empty pool"))
        assert result.error is ErrorKind.NO_ROUTE
    """

    operation: Operation
    tx_hash: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    error: ErrorKind | None = None
    error_detail: str | None = None
    approvals: tuple[AuthorizationResult, ...] = ()
    failed_at: str | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def approval_txs(self) -> list[str]:
        """Hashes of approvals confirmed during this intent."""
        return [a.approval_tx for a in self.approvals if a.approval_tx is not None]

    @classmethod
    def success(
        cls,
        operation: Operation,
        tx_hash: str | None = None,
        payload: dict[str, Any] | None = None,
        approvals: tuple[AuthorizationResult, ...] = (),
    ) -> OperationResult:
        return cls(
            operation=operation,
            tx_hash=tx_hash,
            payload=payload or {},
            approvals=tuple(a for a in approvals if a.approved),
        )

    @classmethod
    def failure(
        cls,
        operation: Operation,
        error: DexError,
        approvals: tuple[AuthorizationResult, ...] = (),
        failed_at: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> OperationResult:
        return cls(
            operation=operation,
            payload=payload or {},
            error=error.kind,
            error_detail=str(error),
            approvals=tuple(a for a in approvals if a.approved),
            failed_at=failed_at,
        )


__all__ = ["Operation", "OperationResult"]
