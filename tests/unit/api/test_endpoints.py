"""Tests for the HTTP endpoints.

The client dependency is overridden with a DexClient on the in-memory ledger.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from dex_client.api.endpoints import get_client
from dex_client.api.main import app
from tests.helpers import ACCOUNT, TOKEN_A, TOKEN_B, make_client, make_ledger


@pytest.fixture
def api(client) -> Iterator[TestClient]:
    app.dependency_overrides[get_client] = lambda: client
    yield TestClient(app)
    app.dependency_overrides.clear()


def override(client) -> TestClient:
    app.dependency_overrides[get_client] = lambda: client
    return TestClient(app)


class TestHealth:
    def test_health(self) -> None:
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestSession:
    def test_initialize(self, api) -> None:
        response = api.post("/session")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["payload"]["account"] == ACCOUNT

    def test_initialize_failure_is_reported(self, ledger, api) -> None:
        ledger.account_available = False

        body = api.post("/session").json()

        assert body["success"] is False
        assert body["error"] == "ledger_rejected"


class TestQuote:
    def test_quote(self, api) -> None:
        response = api.get("/quote", params={"amount_in": "1"})

        assert response.status_code == 200
        payload = response.json()["payload"]
        assert payload["amount_out"] == "2000000"
        assert payload["expected_output"] == "2.000000"

    def test_invalid_token_rejected(self, api) -> None:
        response = api.get("/quote", params={"amount_in": "1", "token_in": "0x12"})
        assert response.status_code == 422


class TestSwap:
    def test_swap(self, ledger, api) -> None:
        response = api.post("/swap", json={"amountIn": "1.5"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["txHash"] == ledger.sent[-1].tx_hash
        assert body["approvals"] == [ledger.sent[0].tx_hash]
        assert body["payload"]["min_amount_out"] == "2850000"
        assert "error" not in body

    def test_swap_failure_body(self, api) -> None:
        body = api.post("/swap", json={"amountIn": "1000"}).json()

        assert body["success"] is False
        assert body["error"] == "insufficient_balance"
        assert body["failedAt"] == "authorizing"

    def test_slippage_validated(self, api) -> None:
        response = api.post("/swap", json={"amountIn": "1", "slippageBps": 10_000})
        assert response.status_code == 422

    def test_not_initialized_is_503(self) -> None:
        api = override(make_client(make_ledger(), initialize=False))
        try:
            response = api.post("/swap", json={"amountIn": "1"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
        assert response.json()["error"] == "not_initialized"


class TestLiquidity:
    def test_create_existing_pair(self, ledger, api) -> None:
        response = api.post("/pairs")

        assert response.status_code == 200
        body = response.json()
        assert body["error"] == "pair_exists"
        assert ledger.sent == []

    def test_create_pair_explicit_tokens(self) -> None:
        ledger = make_ledger(with_pair=False)
        api = override(make_client(ledger))
        try:
            body = api.post("/pairs", json={"tokenA": TOKEN_A, "tokenB": TOKEN_B}).json()
        finally:
            app.dependency_overrides.clear()

        assert body["success"] is True
        assert body["payload"]["pair_address"] == ledger.get_pair(TOKEN_A, TOKEN_B).address

    def test_add_liquidity_defaults(self, ledger, api) -> None:
        body = api.post("/liquidity").json()

        assert body["success"] is True
        assert len(body["approvals"]) == 2
        assert ledger.sent_methods()[-1] == "addLiquidity"

    def test_add_liquidity_amounts(self, api) -> None:
        body = api.post("/liquidity", json={"amountA": "2", "amountB": "3"}).json()

        assert body["payload"]["amount_b"] == "3000000"

    def test_approve(self, ledger, api) -> None:
        body = api.post(f"/approvals/{TOKEN_B}").json()

        assert body["success"] is True
        assert body["txHash"] == ledger.sent[0].tx_hash


class TestPool:
    def test_pool(self, api) -> None:
        response = api.get("/pool")

        assert response.status_code == 200
        body = response.json()
        assert body["token0"] == TOKEN_A
        assert body["reserve1"] == "2000000000"
        assert body["reserve1Display"] == "2000.000000"

    def test_pool_not_found(self) -> None:
        api = override(make_client(make_ledger(with_pair=False)))
        try:
            response = api.get("/pool")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 404

    def test_pool_not_initialized(self) -> None:
        api = override(make_client(make_ledger(), initialize=False))
        try:
            response = api.get("/pool")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
