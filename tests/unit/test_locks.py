"""Tests for per-key intent locks."""

import pytest

from dex_client.errors import OperationInProgress
from dex_client.locks import IntentLocks, asset_key, pool_key, swap_slot_key
from tests.helpers import ACCOUNT, OTHER_ACCOUNT, TOKEN_A, TOKEN_B


class TestKeys:
    def test_asset_key_normalizes(self):
        assert asset_key(ACCOUNT.upper().replace("0X", "0x"), TOKEN_A) == asset_key(
            ACCOUNT, TOKEN_A
        )

    def test_pool_key_order_independent(self):
        assert pool_key(ACCOUNT, TOKEN_A, TOKEN_B) == pool_key(ACCOUNT, TOKEN_B, TOKEN_A)

    def test_keys_are_per_account(self):
        assert asset_key(ACCOUNT, TOKEN_A) != asset_key(OTHER_ACCOUNT, TOKEN_A)
        assert swap_slot_key(ACCOUNT) != swap_slot_key(OTHER_ACCOUNT)


class TestIntentLocks:
    def test_hold_and_release(self):
        locks = IntentLocks()
        key = asset_key(ACCOUNT, TOKEN_A)

        with locks.hold("swap", key):
            assert locks.is_held(key)
            assert locks.held == {key: "swap"}

        assert not locks.is_held(key)

    def test_conflicting_intent_rejected(self):
        """A second intent on a held key is rejected, not queued."""
        locks = IntentLocks()
        key = asset_key(ACCOUNT, TOKEN_A)

        with locks.hold("swap", key):
            with pytest.raises(OperationInProgress) as exc_info:
                with locks.hold("approve", key):
                    pass

        assert exc_info.value.holder == "swap"
        assert exc_info.value.key == key

    def test_all_or_none(self):
        """A rejected intent does not keep any of its other keys."""
        locks = IntentLocks()
        held = asset_key(ACCOUNT, TOKEN_B)
        free = asset_key(ACCOUNT, TOKEN_A)

        with locks.hold("approve", held):
            with pytest.raises(OperationInProgress):
                with locks.hold("add_liquidity", free, held):
                    pass
            assert not locks.is_held(free)

    def test_independent_keys_do_not_conflict(self):
        locks = IntentLocks()

        with locks.hold("approve", asset_key(ACCOUNT, TOKEN_A)):
            with locks.hold("approve", asset_key(ACCOUNT, TOKEN_B)):
                assert len(locks.held) == 2

    def test_released_on_error(self):
        locks = IntentLocks()
        key = pool_key(ACCOUNT, TOKEN_A, TOKEN_B)

        with pytest.raises(RuntimeError):
            with locks.hold("create_pair", key):
                raise RuntimeError("boom")

        assert locks.held == {}

    def test_duplicate_keys_in_one_intent(self):
        locks = IntentLocks()
        key = asset_key(ACCOUNT, TOKEN_A)

        with locks.hold("add_liquidity", key, key):
            assert locks.held == {key: "add_liquidity"}
        assert locks.held == {}
