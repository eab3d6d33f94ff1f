"""Tests for DexClient session handling and read-only helpers."""

import asyncio

import pytest

from dex_client.constants import MAX_ALLOWANCE
from dex_client.errors import ErrorKind, FailureCause, LedgerRejected, NotInitialized
from dex_client.results import Operation
from tests.helpers import (
    ACCOUNT,
    FACTORY,
    ONE_A,
    OTHER_ACCOUNT,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    make_client,
    make_config,
    make_ledger,
)


class TestInitialize:
    def test_resolves_account_and_contracts(self, ledger):
        client = make_client(ledger, initialize=False)
        assert not client.is_initialized

        result = asyncio.run(client.initialize())

        assert result.is_success
        assert result.operation is Operation.INITIALIZE
        assert result.payload == {"account": ACCOUNT, "factory": FACTORY, "router": ROUTER}
        assert client.session.account == ACCOUNT

    def test_account_unavailable(self, ledger):
        ledger.account_available = False
        client = make_client(ledger, initialize=False)

        result = asyncio.run(client.initialize())

        assert result.error is ErrorKind.LEDGER_REJECTED
        assert not client.is_initialized

    def test_failed_reinitialization_keeps_session(self, ledger, client):
        session = client.session
        ledger.account_available = False

        result = asyncio.run(client.initialize())

        assert result.is_error
        assert client.session is session

    def test_reinitialization_replaces_components(self, ledger, client):
        """A new session gets fresh caches and the new account."""
        asyncio.run(client.preview_swap("1"))
        old_metadata = client.metadata
        assert old_metadata.cached_decimals

        ledger.account = OTHER_ACCOUNT
        result = asyncio.run(client.initialize(make_config(slippage_bps=100)))

        assert result.is_success
        assert client.session.account == OTHER_ACCOUNT
        assert client.session.config.slippage_bps == 100
        assert client.metadata is not old_metadata
        assert client.metadata.cached_decimals == {}


class TestPreviewSwap:
    def test_expected_output(self, ledger, client):
        result = asyncio.run(client.preview_swap("1"))

        assert result.is_success
        assert result.operation is Operation.QUOTE
        assert result.payload["path"] == [TOKEN_A, TOKEN_B]
        assert result.payload["amount_in"] == ONE_A
        assert result.payload["amount_out"] == 2_000_000
        assert result.payload["expected_output"] == "2.000000"
        assert ledger.sent == []

    def test_takes_no_lock(self, client):
        """Previews run alongside a swap in flight."""

        async def scenario():
            return await asyncio.gather(client.swap("1"), client.preview_swap("1"))

        swap, preview = asyncio.run(scenario())

        assert swap.is_success
        assert preview.is_success

    def test_no_route(self):
        client = make_client(make_ledger(with_pair=False))
        result = asyncio.run(client.preview_swap("1"))
        assert result.error is ErrorKind.NO_ROUTE

    def test_malformed(self, client):
        assert asyncio.run(client.preview_swap("")).error is ErrorKind.MALFORMED_AMOUNT
        assert asyncio.run(client.preview_swap("0")).error is ErrorKind.MALFORMED_AMOUNT

    def test_not_initialized(self, ledger):
        result = asyncio.run(make_client(ledger, initialize=False).preview_swap("1"))
        assert result.error is ErrorKind.NOT_INITIALIZED


class TestApprove:
    def test_unconditional_max_approval(self, ledger, client):
        ledger.approve_router(TOKEN_B, 10)

        result = asyncio.run(client.approve(TOKEN_B))

        assert result.is_success
        assert result.payload == {"token": TOKEN_B}
        assert result.tx_hash == ledger.sent[0].tx_hash
        assert ledger.tokens[TOKEN_B].allowance(ACCOUNT, ROUTER) == MAX_ALLOWANCE

    def test_refused(self, ledger, client):
        ledger.refuse_sends["approve"] = "User denied transaction signature"
        result = asyncio.run(client.approve(TOKEN_A))
        assert result.error is ErrorKind.AUTHORIZATION_FAILED

    def test_blocked_by_swap_on_same_asset(self, ledger, client):
        async def scenario():
            return await asyncio.gather(client.swap("1"), client.approve(TOKEN_A))

        swap, approve = asyncio.run(scenario())

        assert swap.is_success
        assert approve.error is ErrorKind.OPERATION_IN_PROGRESS

    def test_other_asset_not_blocked(self, client):
        async def scenario():
            return await asyncio.gather(client.swap("1"), client.approve(TOKEN_B))

        swap, approve = asyncio.run(scenario())

        assert swap.is_success
        assert approve.is_success

    def test_not_initialized(self, ledger):
        result = asyncio.run(make_client(ledger, initialize=False).approve(TOKEN_A))
        assert result.error is ErrorKind.NOT_INITIALIZED


class TestFormatAmount:
    def test_uses_asset_decimals(self, client):
        assert asyncio.run(client.format_amount(1_500_000, TOKEN_B)) == "1.500000"
        assert asyncio.run(client.format_amount(ONE_A, TOKEN_A)) == "1." + "0" * 18


class TestMetadata:
    def test_symbol_cached_per_session(self, ledger, client):
        assert asyncio.run(client.metadata.symbol(TOKEN_A)) == "TKA"
        asyncio.run(client.metadata.symbol(TOKEN_A))

        assert [method for _, method, _ in ledger.calls].count("symbol") == 1


class TestFormatAmountFailures:
    def test_decimals_lookup_failure_is_ledger_rejected(self, ledger, client):
        ledger.add_token(TOKEN_C, decimals=8)
        ledger.fail_calls["decimals"] = FailureCause("node down", transient=True)

        with pytest.raises(LedgerRejected) as exc_info:
            asyncio.run(client.format_amount(1, TOKEN_C))

        assert exc_info.value.cause.reason == "node down"

    def test_not_initialized(self, ledger):
        with pytest.raises(NotInitialized):
            asyncio.run(make_client(ledger, initialize=False).format_amount(1, TOKEN_A))
