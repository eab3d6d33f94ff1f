"""Swap controller: the exact-input swap state machine.

Idle -> Validating -> Quoting -> Authorizing -> Submitting -> Confirmed, with
any step able to end the intent in Failed. Each step runs only after its
predecessor completed: its output decides whether the next one runs at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import structlog

from dex_client.amounts import apply_slippage, to_base_units
from dex_client.authorization import AuthorizationManager, AuthorizationResult
from dex_client.constants import BPS_DENOMINATOR
from dex_client.errors import (
    DexError,
    LedgerError,
    LedgerRejected,
    MalformedAmount,
    NoRoute,
    NotInitialized,
)
from dex_client.ledger.base import Receipt
from dex_client.locks import IntentLocks, asset_key, pool_key, swap_slot_key
from dex_client.metadata import TokenMetadata
from dex_client.quote import Quote, QuoteEngine, TradePath
from dex_client.results import Operation, OperationResult
from dex_client.session import SessionContext, require_session
from dex_client.settlement import Clock, compute_deadline, submit_settlement, system_clock

logger = structlog.get_logger()


class SwapState(str, Enum):
    """States of a swap intent."""

    IDLE = "idle"
    VALIDATING = "validating"
    QUOTING = "quoting"
    AUTHORIZING = "authorizing"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({SwapState.CONFIRMED, SwapState.FAILED})


@dataclass
class PendingSwap:
    """In-flight state of one swap intent, owned by the controller call."""

    amount_text: str
    token_in: str
    token_out: str
    slippage_bps: int
    state: SwapState = SwapState.IDLE
    history: list[SwapState] = field(default_factory=lambda: [SwapState.IDLE])
    amount_in: int | None = None
    quote: Quote | None = None
    min_amount_out: int | None = None
    deadline: int | None = None
    authorization: AuthorizationResult | None = None

    def advance(self, state: SwapState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Swap already finished in state {self.state.value}")
        logger.debug("swap_state", previous=self.state.value, state=state.value)
        self.state = state
        self.history.append(state)

    @property
    def path(self) -> TradePath:
        return TradePath.of(self.token_in, self.token_out)

    def payload(self) -> dict[str, object]:
        return {
            "token_in": self.token_in,
            "token_out": self.token_out,
            "amount_in": self.amount_in,
            "amount_out_quoted": self.quote.amount_out if self.quote else None,
            "min_amount_out": self.min_amount_out,
            "deadline": self.deadline,
        }


class SwapController:
    """Turns "swap X of A for B" into authorization and settlement requests."""

    def __init__(
        self,
        session: SessionContext | None,
        metadata: TokenMetadata,
        quotes: QuoteEngine | None,
        authorization: AuthorizationManager,
        locks: IntentLocks,
        clock: Clock = system_clock,
    ) -> None:
        self.session = session
        self.metadata = metadata
        self.quotes = quotes
        self.authorization = authorization
        self.locks = locks
        self.clock = clock

    async def swap(
        self,
        amount_in: str,
        token_in: str | None = None,
        token_out: str | None = None,
        slippage_bps: int | None = None,
    ) -> OperationResult:
        """Swap an exact display amount of ``token_in`` for ``token_out``.

        Token and slippage defaults come from the session config.

        Returns:
            OperationResult; on success ``payload`` holds the amounts, minimum
            output and deadline that were submitted
        """
        if self.session is None:
            pending = PendingSwap(amount_in, token_in or "", token_out or "", slippage_bps or 0)
            pending.advance(SwapState.VALIDATING)
            return self._fail(pending, NotInitialized())

        config = self.session.config
        pending = PendingSwap(
            amount_text=amount_in,
            token_in=token_in or config.token_a_address,
            token_out=token_out or config.token_b_address,
            slippage_bps=config.slippage_bps if slippage_bps is None else slippage_bps,
        )
        account = self.session.account

        try:
            with self.locks.hold(
                "swap",
                swap_slot_key(account),
                asset_key(account, pending.token_in),
                pool_key(account, pending.token_in, pending.token_out),
            ):
                return await self._run(pending)
        except DexError as e:
            # Lock contention: the intent never left Idle
            return self._fail(pending, e)

    async def _run(self, pending: PendingSwap) -> OperationResult:
        session = require_session(self.session)
        try:
            pending.advance(SwapState.VALIDATING)
            amount_in = await self._validate(pending)

            pending.advance(SwapState.QUOTING)
            await self._quote(pending, amount_in)

            pending.advance(SwapState.AUTHORIZING)
            pending.authorization = await self.authorization.ensure_authorized(
                holder=session.account,
                spender=session.router_address,
                token=pending.token_in,
                required_amount=amount_in,
            )
            if pending.authorization.approved:
                # Waiting for the approval gave the market time to move
                await self._quote(pending, amount_in)

            pending.advance(SwapState.SUBMITTING)
            receipt = await self._submit(session, pending)
        except DexError as e:
            return self._fail(pending, e)

        pending.advance(SwapState.CONFIRMED)
        logger.info(
            "swap_confirmed",
            tx_hash=receipt.tx_hash,
            amount_in=pending.amount_in,
            min_amount_out=pending.min_amount_out,
        )
        approvals = (pending.authorization,) if pending.authorization else ()
        return OperationResult.success(
            Operation.SWAP,
            tx_hash=receipt.tx_hash,
            payload=pending.payload(),
            approvals=approvals,
        )

    async def _validate(self, pending: PendingSwap) -> int:
        require_session(self.session)
        if not pending.amount_text or not pending.amount_text.strip():
            raise MalformedAmount("Amount is empty")
        if not 0 <= pending.slippage_bps < BPS_DENOMINATOR:
            raise MalformedAmount(f"Slippage tolerance out of range: {pending.slippage_bps} bps")
        try:
            path = pending.path
        except ValueError as e:
            raise NoRoute(str(e)) from e
        try:
            decimals = await self.metadata.decimals(path.token_in)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e
        amount = to_base_units(pending.amount_text, decimals)
        if amount == 0:
            raise MalformedAmount("Amount must be greater than zero")
        pending.amount_in = amount
        return amount

    async def _quote(self, pending: PendingSwap, amount_in: int) -> None:
        if self.quotes is None:
            raise NotInitialized()
        pending.quote = await self.quotes.get_amounts_out(amount_in, pending.path)
        pending.min_amount_out = apply_slippage(pending.quote.amount_out, pending.slippage_bps)
        logger.debug(
            "swap_quoted",
            amount_out=pending.quote.amount_out,
            min_amount_out=pending.min_amount_out,
            slippage_bps=pending.slippage_bps,
        )

    async def _submit(self, session: SessionContext, pending: PendingSwap) -> Receipt:
        pending.deadline = compute_deadline(self.clock, session.config.deadline_seconds)
        return await submit_settlement(
            session.router,
            "swapExactTokensForTokens",
            pending.amount_in,
            pending.min_amount_out,
            pending.path.as_list(),
            session.account,
            pending.deadline,
            deadline=pending.deadline,
            options=session.config.settlement_options,
        )

    def _fail(self, pending: PendingSwap, error: DexError) -> OperationResult:
        failed_at = pending.state
        if pending.state not in TERMINAL_STATES:
            pending.state = SwapState.FAILED
            pending.history.append(SwapState.FAILED)
        logger.warning(
            "swap_failed",
            kind=error.kind.value,
            failed_at=failed_at.value,
            detail=str(error),
        )
        approvals = (pending.authorization,) if pending.authorization else ()
        return OperationResult.failure(
            Operation.SWAP,
            error,
            approvals=approvals,
            failed_at=failed_at.value,
            payload=pending.payload(),
        )


__all__ = ["SwapState", "PendingSwap", "SwapController", "TERMINAL_STATES"]
