"""Protocol constants and configuration defaults.

Centralizes well-known addresses and settlement parameters.
"""

from dex_client.models.types import UINT256_MAX, is_valid_address


def _validate_address(name: str, address: str) -> str:
    """Validate and return an address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Null address returned by the factory for pairs that do not exist
ZERO_ADDRESS = "0x" + "00" * 20

# Allowance granted by an authorization-raising request
MAX_ALLOWANCE = UINT256_MAX

# Slippage tolerance is expressed in basis points (500 = 5%)
BPS_DENOMINATOR = 10_000
DEFAULT_SLIPPAGE_BPS = 500

# Seconds between submission and the ledger-enforced settlement deadline
DEFAULT_DEADLINE_SECONDS = 600

# Gas ceiling attached to every settlement request
DEFAULT_GAS_LIMIT = 300_000

# Display amount used for each side when adding liquidity without explicit amounts
DEFAULT_LIQUIDITY_AMOUNT = "1"

# Reference deployment (validated at import time to catch typos early)
DEFAULT_FACTORY_ADDRESS = _validate_address(
    "factory", "0xC4A0fCBE18A2c0ed64B956f03463ED0Db0CB30a1"
)
DEFAULT_ROUTER_ADDRESS = _validate_address("router", "0xA2854DE979D00562F19b84bA4d13E38011b1c2f3")
DEFAULT_TOKEN_A_ADDRESS = _validate_address(
    "token A", "0xef46cC8F97B06F1c3fdD995340f9BEf01B16553A"
)
DEFAULT_TOKEN_B_ADDRESS = _validate_address(
    "token B", "0x6f7D45d80559799923AB703785b96EbDC0e6Ea8d"
)

DEFAULT_RPC_URL = "http://127.0.0.1:8545"

# Revert marker the router uses when a request misses its deadline
EXPIRED_REVERT_MARKER = "EXPIRED"
