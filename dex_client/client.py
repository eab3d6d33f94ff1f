"""Entry point composing the session and the orchestration components.

DexClient owns the SessionContext and rebuilds every session-scoped
component (metadata cache, quote engine, controllers) when it is
re-initialized, swapping them in as one unit.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from dex_client.amounts import to_base_units, to_display_string
from dex_client.authorization import AuthorizationManager
from dex_client.config import DEFAULT_CONFIG, DexConfig
from dex_client.constants import DEFAULT_LIQUIDITY_AMOUNT
from dex_client.errors import (
    DexError,
    LedgerError,
    LedgerRejected,
    MalformedAmount,
    NoRoute,
    NotInitialized,
)
from dex_client.ledger.base import LedgerClient
from dex_client.liquidity import LiquidityController
from dex_client.locks import IntentLocks, asset_key
from dex_client.metadata import TokenMetadata
from dex_client.pools import PoolInfo, PoolInspector
from dex_client.quote import QuoteEngine, TradePath
from dex_client.results import Operation, OperationResult
from dex_client.session import SessionContext, initialize_session
from dex_client.settlement import Clock, system_clock
from dex_client.swap import SwapController

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Components:
    """Everything that depends on one session."""

    session: SessionContext | None
    metadata: TokenMetadata
    quotes: QuoteEngine | None
    authorization: AuthorizationManager
    swaps: SwapController
    liquidity: LiquidityController
    pools: PoolInspector


class DexClient:
    """Swap, liquidity and allowance operations for one ledger account.

    Every operation returns an OperationResult (or raises a typed DexError
    for read-only queries) and never leaves partial effects unreported.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        config: DexConfig = DEFAULT_CONFIG,
        clock: Clock = system_clock,
    ) -> None:
        self.ledger = ledger
        self.config = config
        self.clock = clock
        # Shared across re-initialization so in-flight intents keep their keys
        self.locks = IntentLocks()
        self._components = self._build(None)

    def _build(self, session: SessionContext | None) -> _Components:
        metadata = TokenMetadata(self.ledger)
        authorization = AuthorizationManager(metadata)
        quotes = QuoteEngine(session.router, metadata) if session is not None else None
        return _Components(
            session=session,
            metadata=metadata,
            quotes=quotes,
            authorization=authorization,
            swaps=SwapController(
                session, metadata, quotes, authorization, self.locks, clock=self.clock
            ),
            liquidity=LiquidityController(
                session, metadata, authorization, self.locks, clock=self.clock
            ),
            pools=PoolInspector(session, metadata),
        )

    @property
    def session(self) -> SessionContext | None:
        return self._components.session

    @property
    def is_initialized(self) -> bool:
        return self._components.session is not None

    @property
    def metadata(self) -> TokenMetadata:
        return self._components.metadata

    async def initialize(self, config: DexConfig | None = None) -> OperationResult:
        """Resolve the account and contract handles, replacing any prior session.

        On failure the previous session (if any) is left untouched.
        """
        if config is not None:
            self.config = config
        try:
            session = await initialize_session(self.ledger, self.config)
        except LedgerError as e:
            logger.warning("session_initialization_failed", reason=e.cause.reason)
            return OperationResult.failure(Operation.INITIALIZE, LedgerRejected(e.cause))

        self._components = self._build(session)
        return OperationResult.success(
            Operation.INITIALIZE,
            payload={
                "account": session.account,
                "factory": session.factory.address,
                "router": session.router.address,
            },
        )

    async def preview_swap(
        self,
        amount_in: str,
        token_in: str | None = None,
        token_out: str | None = None,
    ) -> OperationResult:
        """Expected output for a swap, formatted in the output asset's units.

        Read-only: takes no lock and submits nothing.
        """
        components = self._components
        try:
            if components.session is None or components.quotes is None:
                raise NotInitialized()
            config = components.session.config
            try:
                path = TradePath.of(
                    token_in or config.token_a_address, token_out or config.token_b_address
                )
            except ValueError as e:
                raise NoRoute(str(e)) from e
            try:
                decimals_in = await components.metadata.decimals(path.token_in)
            except LedgerError as e:
                raise LedgerRejected(e.cause) from e
            amount = to_base_units(amount_in, decimals_in)
            if amount == 0:
                raise MalformedAmount("Amount must be greater than zero")
            quote = await components.quotes.get_amounts_out(amount, path)
            try:
                expected = await components.quotes.format_quote(quote)
            except LedgerError as e:
                raise LedgerRejected(e.cause) from e
        except DexError as e:
            logger.info("swap_preview_unavailable", kind=e.kind.value, detail=str(e))
            return OperationResult.failure(Operation.QUOTE, e)

        return OperationResult.success(
            Operation.QUOTE,
            payload={
                "path": path.as_list(),
                "amount_in": quote.amount_in,
                "amount_out": quote.amount_out,
                "expected_output": expected,
            },
        )

    async def swap(
        self,
        amount_in: str,
        token_in: str | None = None,
        token_out: str | None = None,
        slippage_bps: int | None = None,
    ) -> OperationResult:
        return await self._components.swaps.swap(
            amount_in, token_in=token_in, token_out=token_out, slippage_bps=slippage_bps
        )

    async def create_pair(
        self, token_a: str | None = None, token_b: str | None = None
    ) -> OperationResult:
        return await self._components.liquidity.create_pair(token_a, token_b)

    async def add_liquidity(
        self,
        amount_a: str = DEFAULT_LIQUIDITY_AMOUNT,
        amount_b: str = DEFAULT_LIQUIDITY_AMOUNT,
        token_a: str | None = None,
        token_b: str | None = None,
    ) -> OperationResult:
        return await self._components.liquidity.add_liquidity(
            amount_a, amount_b, token_a=token_a, token_b=token_b
        )

    async def approve(self, token: str) -> OperationResult:
        """Grant the router the maximum allowance for ``token`` unconditionally."""
        components = self._components
        session = components.session
        if session is None:
            return OperationResult.failure(Operation.APPROVE, NotInitialized())
        try:
            with self.locks.hold("approve", asset_key(session.account, token)):
                tx_hash = await components.authorization.approve_max(
                    session.router_address, token
                )
        except DexError as e:
            return OperationResult.failure(Operation.APPROVE, e, payload={"token": token})
        return OperationResult.success(
            Operation.APPROVE, tx_hash=tx_hash, payload={"token": token}
        )

    async def get_pool_info(
        self, token_a: str | None = None, token_b: str | None = None
    ) -> PoolInfo:
        """Pool state for the pair.

        Raises:
            NotInitialized, PairNotFound, LedgerRejected
        """
        return await self._components.pools.get_pool_info(token_a, token_b)

    async def format_amount(self, amount: int, token: str) -> str:
        """Display string for a base-unit amount of ``token``.

        Raises:
            NotInitialized, LedgerRejected
        """
        components = self._components
        if components.session is None:
            raise NotInitialized()
        try:
            decimals = await components.metadata.decimals(token)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e
        return to_display_string(amount, decimals)


def get_default_client(config: DexConfig | None = None) -> DexClient:
    """Client on the web3 ledger configured from the environment."""
    from dex_client.ledger.web3_ledger import Web3Ledger

    config = config or DexConfig.from_env()
    return DexClient(Web3Ledger(config.rpc_url), config)


__all__ = ["DexClient", "get_default_client"]
