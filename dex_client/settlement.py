"""Submission of fee-bearing settlement requests with a ledger-enforced deadline."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import structlog

from dex_client.constants import EXPIRED_REVERT_MARKER
from dex_client.errors import DexError, Expired, FailureCause, LedgerError, LedgerRejected
from dex_client.ledger.base import ContractHandle, Receipt

logger = structlog.get_logger()

Clock = Callable[[], float]

system_clock: Clock = time.time


def compute_deadline(clock: Clock, deadline_seconds: int) -> int:
    """Unix timestamp after which the router rejects the request."""
    return int(clock()) + deadline_seconds


def classify_settlement_failure(cause: FailureCause, deadline: int) -> DexError:
    """Map a settlement failure to Expired or LedgerRejected.

    A request is expired when the router reverts with its EXPIRED marker or
    when the ledger finalized the failure after the deadline.
    """
    if EXPIRED_REVERT_MARKER in cause.reason:
        return Expired(deadline, cause)
    if cause.timestamp is not None and cause.timestamp > deadline:
        return Expired(deadline, cause)
    return LedgerRejected(cause)


async def submit_settlement(
    contract: ContractHandle,
    method: str,
    *args: Any,
    deadline: int,
    options: dict[str, Any] | None = None,
) -> Receipt:
    """Send a settlement request and wait for finality.

    Never retries: a rejected request must be re-initiated by the user with
    a new deadline.

    Raises:
        Expired: Deadline exceeded
        LedgerRejected: Any other refusal or revert
    """
    try:
        tx = await contract.send(method, *args, options=options)
    except LedgerError as e:
        logger.warning("settlement_send_failed", method=method, reason=e.cause.reason)
        raise classify_settlement_failure(e.cause, deadline) from e

    logger.info("settlement_submitted", method=method, tx_hash=tx.tx_hash, deadline=deadline)
    try:
        receipt = await tx.await_finality()
    except LedgerError as e:
        error = classify_settlement_failure(e.cause, deadline)
        logger.warning(
            "settlement_failed",
            method=method,
            tx_hash=tx.tx_hash,
            kind=error.kind.value,
            reason=e.cause.reason,
        )
        raise error from e

    logger.info("settlement_confirmed", method=method, tx_hash=receipt.tx_hash)
    return receipt


__all__ = [
    "Clock",
    "compute_deadline",
    "classify_settlement_failure",
    "submit_settlement",
    "system_clock",
]
