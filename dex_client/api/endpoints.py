"""API endpoints for swap, liquidity and allowance operations."""

from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response

from dex_client.client import DexClient, get_default_client
from dex_client.errors import DexError, ErrorKind, NotInitialized, PairNotFound
from dex_client.models.api import (
    LiquidityRequest,
    OperationResponse,
    PairRequest,
    PoolResponse,
    SwapRequest,
)
from dex_client.models.types import ADDRESS_PATTERN
from dex_client.results import OperationResult

logger = structlog.get_logger()

router = APIRouter()

TokenQuery = Annotated[str | None, Query(pattern=ADDRESS_PATTERN)]

# Outcomes that are reported with a non-200 status
ERROR_STATUS = {
    ErrorKind.NOT_INITIALIZED: 503,
    ErrorKind.OPERATION_IN_PROGRESS: 409,
}


@lru_cache(maxsize=1)
def _default_client() -> DexClient:
    return get_default_client()


def get_client() -> DexClient:
    """Dependency provider for the client instance.

    Override this in tests to inject a client on an in-memory ledger:
        app.dependency_overrides[get_client] = lambda: client
    """
    return _default_client()


def _respond(result: OperationResult, response: Response) -> OperationResponse:
    if result.error is not None:
        response.status_code = ERROR_STATUS.get(result.error, 200)
    return OperationResponse.from_result(result)


@router.post("/session", response_model_exclude_none=True)
async def initialize(
    response: Response,
    client: DexClient = Depends(get_client),
) -> OperationResponse:
    """Connect the account and resolve factory/router handles (re-initializes)."""
    return _respond(await client.initialize(), response)


@router.get("/quote", response_model_exclude_none=True)
async def quote(
    amount_in: str,
    response: Response,
    token_in: TokenQuery = None,
    token_out: TokenQuery = None,
    client: DexClient = Depends(get_client),
) -> OperationResponse:
    """Expected output for swapping ``amount_in`` (display units)."""
    return _respond(await client.preview_swap(amount_in, token_in, token_out), response)


@router.post("/swap", response_model_exclude_none=True)
async def swap(
    request: SwapRequest,
    response: Response,
    client: DexClient = Depends(get_client),
) -> OperationResponse:
    """Swap an exact input amount with slippage protection."""
    result = await client.swap(
        request.amount_in,
        token_in=request.token_in,
        token_out=request.token_out,
        slippage_bps=request.slippage_bps,
    )
    return _respond(result, response)


@router.post("/pairs", response_model_exclude_none=True)
async def create_pair(
    response: Response,
    request: PairRequest | None = None,
    client: DexClient = Depends(get_client),
) -> OperationResponse:
    """Create the pair (defaults to the configured pair)."""
    request = request or PairRequest()
    return _respond(await client.create_pair(request.token_a, request.token_b), response)


@router.post("/liquidity", response_model_exclude_none=True)
async def add_liquidity(
    response: Response,
    request: LiquidityRequest | None = None,
    client: DexClient = Depends(get_client),
) -> OperationResponse:
    """Deposit both assets (one unit of each by default)."""
    request = request or LiquidityRequest()
    result = await client.add_liquidity(
        request.amount_a,
        request.amount_b,
        token_a=request.token_a,
        token_b=request.token_b,
    )
    return _respond(result, response)


@router.post("/approvals/{token}", response_model_exclude_none=True)
async def approve(
    token: Annotated[str, Path(pattern=ADDRESS_PATTERN)],
    response: Response,
    client: DexClient = Depends(get_client),
) -> OperationResponse:
    """Grant the router the maximum allowance for ``token``."""
    return _respond(await client.approve(token), response)


@router.get("/pool")
async def pool(
    token_a: TokenQuery = None,
    token_b: TokenQuery = None,
    client: DexClient = Depends(get_client),
) -> PoolResponse:
    """Reserves of the pair, in its own token ordering."""
    try:
        info = await client.get_pool_info(token_a, token_b)
    except PairNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except NotInitialized as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except DexError as e:
        logger.warning("pool_query_failed", kind=e.kind.value, detail=str(e))
        raise HTTPException(status_code=502, detail=str(e)) from e
    return PoolResponse.from_pool(info)
