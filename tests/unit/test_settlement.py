"""Tests for settlement submission and failure classification."""

import asyncio

import pytest

from dex_client.errors import Expired, FailureCause, LedgerRejected
from dex_client.settlement import (
    classify_settlement_failure,
    compute_deadline,
    submit_settlement,
)
from tests.helpers import GENESIS_TIME, ROUTER, MockLedger

DEADLINE = GENESIS_TIME + 600


class TestComputeDeadline:
    def test_adds_window_to_clock(self):
        assert compute_deadline(lambda: 1000.7, 600) == 1600


class TestClassifySettlementFailure:
    """Expired vs LedgerRejected."""

    def test_expired_marker(self):
        cause = FailureCause(reason="execution reverted: UniswapV2Router: EXPIRED")
        assert isinstance(classify_settlement_failure(cause, DEADLINE), Expired)

    def test_finalized_after_deadline(self):
        """Any failure finalized past the deadline counts as expiry."""
        cause = FailureCause(reason="execution reverted", timestamp=DEADLINE + 1)
        error = classify_settlement_failure(cause, DEADLINE)
        assert isinstance(error, Expired)
        assert error.deadline == DEADLINE

    def test_finalized_at_deadline_is_not_expired(self):
        cause = FailureCause(reason="execution reverted", timestamp=DEADLINE)
        assert isinstance(classify_settlement_failure(cause, DEADLINE), LedgerRejected)

    def test_other_revert(self):
        cause = FailureCause(reason="UniswapV2Router: INSUFFICIENT_OUTPUT_AMOUNT")
        error = classify_settlement_failure(cause, DEADLINE)
        assert isinstance(error, LedgerRejected)
        assert error.cause is cause


class TestSubmitSettlement:
    """submit_settlement against the in-memory router."""

    def test_refused_before_submission(self):
        ledger = MockLedger()
        ledger.refuse_sends["addLiquidity"] = "insufficient funds for gas"
        router = ledger.get_contract(ROUTER, [])

        with pytest.raises(LedgerRejected):
            asyncio.run(submit_settlement(router, "addLiquidity", deadline=DEADLINE))

    def test_revert_carries_tx_hash(self):
        ledger = MockLedger()
        router = ledger.get_contract(ROUTER, [])

        with pytest.raises(LedgerRejected) as exc_info:
            asyncio.run(submit_settlement(router, "unknownMethod", deadline=DEADLINE))

        assert exc_info.value.cause.tx_hash == ledger.sent[0].tx_hash
        assert len(ledger.sent) == 1

    def test_late_finality_is_expired(self):
        ledger = MockLedger()
        ledger.finality_delay = 601
        router = ledger.get_contract(ROUTER, [])

        with pytest.raises(Expired):
            asyncio.run(submit_settlement(router, "unknownMethod", deadline=DEADLINE))

    def test_options_forwarded(self):
        ledger = MockLedger()
        router = ledger.get_contract(ROUTER, [])

        with pytest.raises(LedgerRejected):
            asyncio.run(
                submit_settlement(
                    router, "unknownMethod", 1, 2, deadline=DEADLINE, options={"gas": 300_000}
                )
            )

        assert ledger.sent[0].args == (1, 2)
        assert ledger.sent[0].options == {"gas": 300_000}
