"""Configuration for the swap and liquidity orchestration core."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from dex_client.constants import (
    BPS_DENOMINATOR,
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_FACTORY_ADDRESS,
    DEFAULT_GAS_LIMIT,
    DEFAULT_ROUTER_ADDRESS,
    DEFAULT_RPC_URL,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_TOKEN_A_ADDRESS,
    DEFAULT_TOKEN_B_ADDRESS,
)
from dex_client.models.types import is_valid_address

ENV_PREFIX = "DEX_"


@dataclass(frozen=True)
class DexConfig:
    """Externally supplied constants consumed by the orchestration core.

    Attributes:
        factory_address: Pair factory contract
        router_address: Router contract (pricing oracle and settlement entry point)
        token_a_address: Asset sold by default swaps, first side of the pair
        token_b_address: Asset bought by default swaps, second side of the pair
        slippage_bps: Tolerated reduction of the quoted output (500 = 5%)
        deadline_seconds: Offset from submission to the settlement deadline
        gas_limit: Gas ceiling attached to every settlement request
        rpc_url: Node endpoint used by the web3 ledger client
    """

    factory_address: str = DEFAULT_FACTORY_ADDRESS
    router_address: str = DEFAULT_ROUTER_ADDRESS
    token_a_address: str = DEFAULT_TOKEN_A_ADDRESS
    token_b_address: str = DEFAULT_TOKEN_B_ADDRESS
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS
    gas_limit: int = DEFAULT_GAS_LIMIT
    rpc_url: str = DEFAULT_RPC_URL

    def __post_init__(self) -> None:
        for name in ("factory_address", "router_address", "token_a_address", "token_b_address"):
            value = getattr(self, name)
            if not is_valid_address(value):
                raise ValueError(f"Invalid {name}: {value} (must be 0x + 40 hex chars)")
        if not 0 <= self.slippage_bps < BPS_DENOMINATOR:
            raise ValueError(
                f"slippage_bps must be in [0, {BPS_DENOMINATOR}), got {self.slippage_bps}"
            )
        if self.deadline_seconds <= 0:
            raise ValueError(f"deadline_seconds must be positive, got {self.deadline_seconds}")
        if self.gas_limit <= 0:
            raise ValueError(f"gas_limit must be positive, got {self.gas_limit}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DexConfig:
        """Build a config from DEX_* environment variables.

        Unset variables fall back to the defaults.

        Raises:
            ValueError: If a variable is present but invalid
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def _str(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default)

        def _int(name: str, default: int) -> int:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError as err:
                raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got '{raw}'") from err

        return cls(
            factory_address=_str("FACTORY_ADDRESS", defaults.factory_address),
            router_address=_str("ROUTER_ADDRESS", defaults.router_address),
            token_a_address=_str("TOKEN_A_ADDRESS", defaults.token_a_address),
            token_b_address=_str("TOKEN_B_ADDRESS", defaults.token_b_address),
            slippage_bps=_int("SLIPPAGE_BPS", defaults.slippage_bps),
            deadline_seconds=_int("DEADLINE_SECONDS", defaults.deadline_seconds),
            gas_limit=_int("GAS_LIMIT", defaults.gas_limit),
            rpc_url=_str("RPC_URL", defaults.rpc_url),
        )

    def with_overrides(self, **changes: object) -> DexConfig:
        """Return a copy with some fields replaced (validated again)."""
        return replace(self, **changes)  # type: ignore[arg-type]

    @property
    def settlement_options(self) -> dict[str, int]:
        """Options attached to every fee-bearing request."""
        return {"gas": self.gas_limit}


# Default configuration instance
DEFAULT_CONFIG = DexConfig()
