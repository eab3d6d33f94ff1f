"""Client-side orchestration for swaps and liquidity on a constant-product AMM."""

from dex_client.client import DexClient, get_default_client
from dex_client.config import DexConfig
from dex_client.results import Operation, OperationResult

__version__ = "0.1.0"
__all__ = [
    "DexClient",
    "DexConfig",
    "Operation",
    "OperationResult",
    "get_default_client",
    "__version__",
]
