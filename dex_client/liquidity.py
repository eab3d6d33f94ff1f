"""Liquidity controller: pair creation and balanced deposits."""

from __future__ import annotations

from typing import Any

import structlog

from dex_client.amounts import to_base_units
from dex_client.authorization import AuthorizationManager, AuthorizationResult
from dex_client.constants import DEFAULT_LIQUIDITY_AMOUNT
from dex_client.errors import (
    DexError,
    LedgerError,
    LedgerRejected,
    MalformedAmount,
    NotInitialized,
    PairExists,
)
from dex_client.locks import IntentLocks, asset_key, pool_key
from dex_client.metadata import TokenMetadata
from dex_client.models.types import is_zero_address, normalize_address
from dex_client.results import Operation, OperationResult
from dex_client.session import SessionContext, require_session
from dex_client.settlement import Clock, compute_deadline, submit_settlement, system_clock

logger = structlog.get_logger()

# Factory revert reason when a concurrent request created the pair first
PAIR_EXISTS_REVERT_MARKER = "PAIR_EXISTS"


class LiquidityController:
    """Creates pairs and deposits liquidity through the router."""

    def __init__(
        self,
        session: SessionContext | None,
        metadata: TokenMetadata,
        authorization: AuthorizationManager,
        locks: IntentLocks,
        clock: Clock = system_clock,
    ) -> None:
        self.session = session
        self.metadata = metadata
        self.authorization = authorization
        self.locks = locks
        self.clock = clock

    def _tokens(self, token_a: str | None, token_b: str | None) -> tuple[str, str]:
        config = require_session(self.session).config
        return token_a or config.token_a_address, token_b or config.token_b_address

    async def get_pair_address(self, token_a: str, token_b: str) -> str:
        """Factory lookup; returns the null address if the pair does not exist.

        Raises:
            NotInitialized: If the session is not initialized
            LedgerRejected: If the factory could not be queried
        """
        session = require_session(self.session)
        try:
            address = await session.factory.call("getPair", token_a, token_b)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e
        return normalize_address(str(address))

    async def create_pair(
        self, token_a: str | None = None, token_b: str | None = None
    ) -> OperationResult:
        """Register a new pair with the factory.

        An existing pair is reported as PairExists without submitting anything.
        """
        if self.session is None:
            return OperationResult.failure(Operation.CREATE_PAIR, NotInitialized())
        token_a, token_b = self._tokens(token_a, token_b)
        payload: dict[str, Any] = {"token_a": token_a, "token_b": token_b}

        try:
            with self.locks.hold(
                "create_pair", pool_key(self.session.account, token_a, token_b)
            ):
                existing = await self.get_pair_address(token_a, token_b)
                if not is_zero_address(existing):
                    raise PairExists(existing)

                try:
                    tx = await self.session.factory.send("createPair", token_a, token_b)
                    receipt = await tx.await_finality()
                except LedgerError as e:
                    if PAIR_EXISTS_REVERT_MARKER in e.cause.reason:
                        raise PairExists(await self.get_pair_address(token_a, token_b)) from e
                    raise LedgerRejected(e.cause) from e

                payload["pair_address"] = await self.get_pair_address(token_a, token_b)
        except PairExists as e:
            logger.info("create_pair_exists", pair=e.pair_address)
            payload["pair_address"] = e.pair_address
            return OperationResult.failure(Operation.CREATE_PAIR, e, payload=payload)
        except DexError as e:
            logger.warning("create_pair_failed", kind=e.kind.value, detail=str(e))
            return OperationResult.failure(Operation.CREATE_PAIR, e, payload=payload)

        logger.info("pair_created", pair=payload["pair_address"], tx_hash=receipt.tx_hash)
        return OperationResult.success(
            Operation.CREATE_PAIR, tx_hash=receipt.tx_hash, payload=payload
        )

    async def add_liquidity(
        self,
        amount_a: str = DEFAULT_LIQUIDITY_AMOUNT,
        amount_b: str = DEFAULT_LIQUIDITY_AMOUNT,
        token_a: str | None = None,
        token_b: str | None = None,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
    ) -> OperationResult:
        """Deposit both assets into the pair in one settlement request.

        Minimum accepted amounts default to zero, which accepts full price
        impact between observation and settlement.
        """
        if self.session is None:
            return OperationResult.failure(Operation.ADD_LIQUIDITY, NotInitialized())
        session = self.session
        token_a, token_b = self._tokens(token_a, token_b)
        account = session.account
        approvals: list[AuthorizationResult] = []
        payload: dict[str, Any] = {"token_a": token_a, "token_b": token_b}

        try:
            with self.locks.hold(
                "add_liquidity",
                asset_key(account, token_a),
                asset_key(account, token_b),
                pool_key(account, token_a, token_b),
            ):
                base_a = await self._parse(amount_a, token_a)
                base_b = await self._parse(amount_b, token_b)
                if amount_a_min < 0 or amount_b_min < 0:
                    raise MalformedAmount("Minimum amounts cannot be negative")
                payload.update(amount_a=base_a, amount_b=base_b)

                # One asset's allowance says nothing about the other's
                for token, amount in ((token_a, base_a), (token_b, base_b)):
                    approvals.append(
                        await self.authorization.ensure_authorized(
                            holder=account,
                            spender=session.router_address,
                            token=token,
                            required_amount=amount,
                        )
                    )

                deadline = compute_deadline(self.clock, session.config.deadline_seconds)
                payload["deadline"] = deadline
                receipt = await submit_settlement(
                    session.router,
                    "addLiquidity",
                    token_a,
                    token_b,
                    base_a,
                    base_b,
                    amount_a_min,
                    amount_b_min,
                    account,
                    deadline,
                    deadline=deadline,
                    options=session.config.settlement_options,
                )
        except DexError as e:
            logger.warning("add_liquidity_failed", kind=e.kind.value, detail=str(e))
            return OperationResult.failure(
                Operation.ADD_LIQUIDITY, e, approvals=tuple(approvals), payload=payload
            )

        logger.info(
            "liquidity_added",
            tx_hash=receipt.tx_hash,
            amount_a=payload["amount_a"],
            amount_b=payload["amount_b"],
        )
        return OperationResult.success(
            Operation.ADD_LIQUIDITY,
            tx_hash=receipt.tx_hash,
            payload=payload,
            approvals=tuple(approvals),
        )

    async def _parse(self, amount: str, token: str) -> int:
        try:
            decimals = await self.metadata.decimals(token)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e
        value = to_base_units(amount, decimals)
        if value == 0:
            raise MalformedAmount(f"Liquidity amount must be greater than zero: '{amount}'")
        return value


__all__ = ["LiquidityController", "PAIR_EXISTS_REVERT_MARKER"]
