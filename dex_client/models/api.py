"""Pydantic request/response models for the HTTP surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from dex_client.constants import BPS_DENOMINATOR, DEFAULT_LIQUIDITY_AMOUNT
from dex_client.models.types import Address, Uint256
from dex_client.pools import PoolInfo
from dex_client.results import OperationResult


class SwapRequest(BaseModel):
    """Exact-input swap in display units of the input asset."""

    amount_in: str = Field(alias="amountIn", description="Decimal amount, e.g. '1.5'")
    token_in: Address | None = Field(default=None, alias="tokenIn")
    token_out: Address | None = Field(default=None, alias="tokenOut")
    slippage_bps: int | None = Field(
        default=None, alias="slippageBps", ge=0, lt=BPS_DENOMINATOR
    )

    model_config = {"populate_by_name": True}


class LiquidityRequest(BaseModel):
    """Balanced deposit in display units of each asset."""

    amount_a: str = Field(default=DEFAULT_LIQUIDITY_AMOUNT, alias="amountA")
    amount_b: str = Field(default=DEFAULT_LIQUIDITY_AMOUNT, alias="amountB")
    token_a: Address | None = Field(default=None, alias="tokenA")
    token_b: Address | None = Field(default=None, alias="tokenB")

    model_config = {"populate_by_name": True}


class PairRequest(BaseModel):
    token_a: Address | None = Field(default=None, alias="tokenA")
    token_b: Address | None = Field(default=None, alias="tokenB")

    model_config = {"populate_by_name": True}


def _jsonable(value: Any) -> Any:
    # Base-unit amounts can exceed what JSON clients parse exactly
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, list | tuple):
        return [_jsonable(v) for v in value]
    return value


class OperationResponse(BaseModel):
    """Terminal outcome of an operation."""

    operation: str
    success: bool
    tx_hash: str | None = Field(default=None, alias="txHash")
    payload: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    detail: str | None = None
    failed_at: str | None = Field(default=None, alias="failedAt")
    approvals: list[str] = Field(
        default_factory=list, description="Approval transactions confirmed during the intent"
    )

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: OperationResult) -> OperationResponse:
        return cls(
            operation=result.operation.value,
            success=result.is_success,
            tx_hash=result.tx_hash,
            payload={k: _jsonable(v) for k, v in result.payload.items()},
            error=result.error.value if result.error else None,
            detail=result.error_detail,
            failed_at=result.failed_at,
            approvals=result.approval_txs,
        )


class PoolResponse(BaseModel):
    """Pair reserves in base units and display units."""

    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    reserve0_display: str = Field(alias="reserve0Display")
    reserve1_display: str = Field(alias="reserve1Display")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, info: PoolInfo) -> PoolResponse:
        return cls(
            address=info.address,
            token0=info.token0,
            token1=info.token1,
            reserve0=info.reserve0,
            reserve1=info.reserve1,
            reserve0_display=info.reserve0_display,
            reserve1_display=info.reserve1_display,
        )


__all__ = [
    "SwapRequest",
    "LiquidityRequest",
    "PairRequest",
    "OperationResponse",
    "PoolResponse",
]
