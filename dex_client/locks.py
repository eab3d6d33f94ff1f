"""Per-key intent locks.

Operations that mutate authorization or pool state for the same
(account, asset) or (account, pool) key are serialized: a new intent that
touches a key still held by an unfinished intent is rejected with
OperationInProgress instead of being queued.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from dex_client.errors import OperationInProgress
from dex_client.models.types import normalize_address, pair_key

logger = structlog.get_logger()

LockKey = tuple[str, ...]


def asset_key(account: str, token: str) -> LockKey:
    return ("asset", normalize_address(account), normalize_address(token))


def pool_key(account: str, token_a: str, token_b: str) -> LockKey:
    return ("pool", normalize_address(account), *pair_key(token_a, token_b))


def swap_slot_key(account: str) -> LockKey:
    """At most one swap per account may be in flight."""
    return ("swap", normalize_address(account))


class IntentLocks:
    """Mapping from lock key to the label of the intent holding it.

    The core runs on a single event loop and acquisition never awaits, so a
    plain dict is enough: check-and-set is atomic between suspension points.
    """

    def __init__(self) -> None:
        self._held: dict[LockKey, str] = {}

    def is_held(self, key: LockKey) -> bool:
        return key in self._held

    @property
    def held(self) -> dict[LockKey, str]:
        return dict(self._held)

    @contextmanager
    def hold(self, intent: str, *keys: LockKey) -> Iterator[None]:
        """Acquire all keys or none, release them on exit.

        Raises:
            OperationInProgress: If any key is already held
        """
        for key in keys:
            holder = self._held.get(key)
            if holder is not None:
                logger.info("intent_rejected_in_progress", intent=intent, key=key, holder=holder)
                raise OperationInProgress(key, holder)

        unique = list(dict.fromkeys(keys))
        for key in unique:
            self._held[key] = intent
        try:
            yield
        finally:
            for key in unique:
                self._held.pop(key, None)


__all__ = ["IntentLocks", "LockKey", "asset_key", "pool_key", "swap_slot_key"]
