"""Tests for DexConfig."""

import pytest

from dex_client.config import DEFAULT_CONFIG, DexConfig
from dex_client.constants import (
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_GAS_LIMIT,
    DEFAULT_SLIPPAGE_BPS,
)
from tests.helpers import FACTORY, ROUTER, TOKEN_A


class TestDefaults:
    def test_default_values(self):
        """5% slippage, 600s deadline, 300k gas ceiling."""
        assert DEFAULT_CONFIG.slippage_bps == DEFAULT_SLIPPAGE_BPS == 500
        assert DEFAULT_CONFIG.deadline_seconds == DEFAULT_DEADLINE_SECONDS == 600
        assert DEFAULT_CONFIG.gas_limit == DEFAULT_GAS_LIMIT == 300_000

    def test_settlement_options(self):
        assert DexConfig(gas_limit=123).settlement_options == {"gas": 123}

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.gas_limit = 1  # type: ignore[misc]


class TestValidation:
    def test_invalid_address(self):
        with pytest.raises(ValueError, match="router_address"):
            DexConfig(router_address="0x1234")

    @pytest.mark.parametrize("bps", [-1, 10_000])
    def test_slippage_range(self, bps):
        with pytest.raises(ValueError, match="slippage_bps"):
            DexConfig(slippage_bps=bps)

    def test_deadline_positive(self):
        with pytest.raises(ValueError, match="deadline_seconds"):
            DexConfig(deadline_seconds=0)

    def test_gas_limit_positive(self):
        with pytest.raises(ValueError, match="gas_limit"):
            DexConfig(gas_limit=0)

    def test_with_overrides_revalidates(self):
        assert DEFAULT_CONFIG.with_overrides(slippage_bps=100).slippage_bps == 100
        with pytest.raises(ValueError):
            DEFAULT_CONFIG.with_overrides(slippage_bps=-5)


class TestFromEnv:
    def test_empty_environment_uses_defaults(self):
        assert DexConfig.from_env({}) == DexConfig()

    def test_reads_prefixed_variables(self):
        config = DexConfig.from_env(
            {
                "DEX_FACTORY_ADDRESS": FACTORY,
                "DEX_ROUTER_ADDRESS": ROUTER,
                "DEX_TOKEN_A_ADDRESS": TOKEN_A,
                "DEX_SLIPPAGE_BPS": "100",
                "DEX_DEADLINE_SECONDS": "60",
                "DEX_GAS_LIMIT": "500000",
                "DEX_RPC_URL": "http://node:8545",
            }
        )
        assert config.factory_address == FACTORY
        assert config.router_address == ROUTER
        assert config.token_a_address == TOKEN_A
        assert config.slippage_bps == 100
        assert config.deadline_seconds == 60
        assert config.gas_limit == 500_000
        assert config.rpc_url == "http://node:8545"

    def test_non_integer_rejected(self):
        with pytest.raises(ValueError, match="DEX_GAS_LIMIT"):
            DexConfig.from_env({"DEX_GAS_LIMIT": "lots"})
