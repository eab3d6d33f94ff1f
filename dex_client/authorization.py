"""Authorization manager: guarantees the spender may move the holder's asset.

Balance and allowance are fetched fresh on every call. Authorization is
raised to the maximum representable amount so that one fee-bearing approval
covers future operations.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from dex_client.constants import MAX_ALLOWANCE
from dex_client.errors import (
    AuthorizationFailed,
    InsufficientAllowance,
    InsufficientBalance,
    LedgerError,
    LedgerRejected,
)
from dex_client.metadata import TokenMetadata
from dex_client.models.types import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a successful ensure_authorized().

    Attributes:
        token: Asset that was checked
        balance: Holder's balance at check time
        allowance: Spender's allowance at check time (before any approval)
        approval_tx: Hash of the confirmed approval, or None if none was needed
    """

    token: str
    balance: int
    allowance: int
    approval_tx: str | None = None

    @property
    def approved(self) -> bool:
        """True if an authorization-raising request was issued and confirmed."""
        return self.approval_tx is not None


class AuthorizationManager:
    """Checks balance and allowance, approving the spender when required."""

    def __init__(self, metadata: TokenMetadata) -> None:
        self.metadata = metadata

    async def ensure_authorized(
        self,
        holder: str,
        spender: str,
        token: str,
        required_amount: int,
        *,
        allow_approval: bool = True,
    ) -> AuthorizationResult:
        """Make sure ``spender`` can move ``required_amount`` of ``token``.

        Args:
            holder: Account owning the asset
            spender: Contract that will pull the asset
            token: Asset address
            required_amount: Amount in base units the operation will transfer
            allow_approval: If False, a short allowance raises
                InsufficientAllowance instead of issuing an approval

        Raises:
            InsufficientBalance: Balance is below the requirement (no approval issued)
            InsufficientAllowance: Allowance too low and approvals not allowed
            AuthorizationFailed: The approval failed at the ledger
            LedgerRejected: Balance or allowance could not be read
        """
        token = normalize_address(token)
        try:
            balance = await self.metadata.balance_of(token, holder)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e

        if balance < required_amount:
            logger.info(
                "authorization_insufficient_balance",
                token=token,
                have=balance,
                need=required_amount,
            )
            raise InsufficientBalance(have=balance, need=required_amount, token=token)

        try:
            allowance = await self.metadata.allowance(token, holder, spender)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e

        if allowance >= required_amount:
            logger.debug("authorization_sufficient", token=token, allowance=allowance)
            return AuthorizationResult(token=token, balance=balance, allowance=allowance)

        if not allow_approval:
            raise InsufficientAllowance(have=allowance, need=required_amount, token=token)

        tx_hash = await self.approve_max(spender, token)
        return AuthorizationResult(
            token=token, balance=balance, allowance=allowance, approval_tx=tx_hash
        )

    async def approve_max(self, spender: str, token: str) -> str:
        """Raise the spender's allowance to the maximum and wait for finality.

        Returns:
            Hash of the confirmed approval

        Raises:
            AuthorizationFailed: If submission or confirmation fails
        """
        token = normalize_address(token)
        logger.info("authorization_requested", token=token, spender=spender)
        try:
            tx = await self.metadata.approve(token, spender, MAX_ALLOWANCE)
            receipt = await tx.await_finality()
        except LedgerError as e:
            logger.warning("authorization_failed", token=token, reason=e.cause.reason)
            raise AuthorizationFailed(e.cause, token=token) from e

        logger.info("authorization_confirmed", token=token, tx_hash=receipt.tx_hash)
        return receipt.tx_hash


__all__ = ["AuthorizationResult", "AuthorizationManager"]
