"""Error taxonomy for the orchestration core.

Every failure at the external boundary is classified into one of these
errors at the point of detection. Controllers convert them into typed
OperationResult values; nothing leaves a controller as a bare exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Kinds of typed failure surfaced to the presentation layer."""

    NOT_INITIALIZED = "not_initialized"
    MALFORMED_AMOUNT = "malformed_amount"
    NO_ROUTE = "no_route"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
    AUTHORIZATION_FAILED = "authorization_failed"
    PAIR_EXISTS = "pair_exists"
    PAIR_NOT_FOUND = "pair_not_found"
    EXPIRED = "expired"
    OPERATION_IN_PROGRESS = "operation_in_progress"
    LEDGER_REJECTED = "ledger_rejected"


@dataclass(frozen=True)
class FailureCause:
    """What the ledger reported when a call or transaction failed.

    Attributes:
        reason: Revert reason or transport error message
        tx_hash: Hash of the failed transaction, if one was submitted
        timestamp: Timestamp of the block that finalized the failure, if known
        transient: True for transport/node failures, False for program reverts
    """

    reason: str
    tx_hash: str | None = None
    timestamp: int | None = None
    transient: bool = False

    def __str__(self) -> str:
        return self.reason


class LedgerError(Exception):
    """Raised by ledger adapters for any failure at the external boundary."""

    def __init__(self, cause: FailureCause | str) -> None:
        if isinstance(cause, str):
            cause = FailureCause(reason=cause)
        self.cause = cause
        super().__init__(cause.reason)


class DexError(Exception):
    """Base error for orchestration failures."""

    kind: ClassVar[ErrorKind]


class NotInitialized(DexError):
    """Session (account and contract handles) has not been resolved yet."""

    kind = ErrorKind.NOT_INITIALIZED

    def __init__(self, detail: str = "Session is not initialized") -> None:
        super().__init__(detail)


class MalformedAmount(DexError):
    """Amount is empty, zero, negative, non-numeric or too precise."""

    kind = ErrorKind.MALFORMED_AMOUNT


class NoRoute(DexError):
    """The pricing oracle has no reserves for some hop of the path."""

    kind = ErrorKind.NO_ROUTE


class InsufficientBalance(DexError):
    """Holder's balance is below the amount the operation needs."""

    kind = ErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, have: int, need: int, token: str | None = None) -> None:
        self.have = have
        self.need = need
        self.token = token
        super().__init__(f"Insufficient balance: have {have}, need {need}")


class InsufficientAllowance(DexError):
    """Allowance is below the amount needed.

    Resolved internally by raising the allowance; only surfaced when the
    caller asked not to issue authorization requests.
    """

    kind = ErrorKind.INSUFFICIENT_ALLOWANCE

    def __init__(self, have: int, need: int, token: str | None = None) -> None:
        self.have = have
        self.need = need
        self.token = token
        super().__init__(f"Insufficient allowance: have {have}, need {need}")


class AuthorizationFailed(DexError):
    """The authorization-raising request failed at the ledger."""

    kind = ErrorKind.AUTHORIZATION_FAILED

    def __init__(self, cause: FailureCause, token: str | None = None) -> None:
        self.cause = cause
        self.token = token
        super().__init__(f"Authorization failed: {cause.reason}")


class PairExists(DexError):
    """A pair for the two assets is already registered with the factory."""

    kind = ErrorKind.PAIR_EXISTS

    def __init__(self, pair_address: str) -> None:
        self.pair_address = pair_address
        super().__init__(f"Pair already exists at {pair_address}")


class PairNotFound(DexError):
    """The factory resolves the pair to the null address."""

    kind = ErrorKind.PAIR_NOT_FOUND

    def __init__(self, token_a: str, token_b: str) -> None:
        self.token_a = token_a
        self.token_b = token_b
        super().__init__(f"Pair does not exist for {token_a} / {token_b}")


class Expired(DexError):
    """Settlement was not finalized before its deadline."""

    kind = ErrorKind.EXPIRED

    def __init__(self, deadline: int, cause: FailureCause | None = None) -> None:
        self.deadline = deadline
        self.cause = cause
        super().__init__(f"Settlement deadline {deadline} exceeded")


class OperationInProgress(DexError):
    """Another intent holds a lock on the same (account, asset/pool) key."""

    kind = ErrorKind.OPERATION_IN_PROGRESS

    def __init__(self, key: tuple[str, ...], holder: str) -> None:
        self.key = key
        self.holder = holder
        super().__init__(f"Operation '{holder}' already in progress for {'/'.join(key)}")


class LedgerRejected(DexError):
    """External program reverted or the ledger refused the request."""

    kind = ErrorKind.LEDGER_REJECTED

    def __init__(self, cause: FailureCause) -> None:
        self.cause = cause
        super().__init__(f"Ledger rejected request: {cause.reason}")


__all__ = [
    "ErrorKind",
    "FailureCause",
    "LedgerError",
    "DexError",
    "NotInitialized",
    "MalformedAmount",
    "NoRoute",
    "InsufficientBalance",
    "InsufficientAllowance",
    "AuthorizationFailed",
    "PairExists",
    "PairNotFound",
    "Expired",
    "OperationInProgress",
    "LedgerRejected",
]
