"""Pool inspector: resolves a pair and reports its reserves."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from dex_client.abis import PAIR_ABI
from dex_client.amounts import to_display_string
from dex_client.errors import LedgerError, LedgerRejected, PairNotFound
from dex_client.metadata import TokenMetadata
from dex_client.models.types import is_zero_address, normalize_address
from dex_client.session import SessionContext, require_session

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoolInfo:
    """Reserve state of a pair, in the pair's own token ordering.

    The pair stores its assets as token0/token1 regardless of the order they
    were asked for; reserve0 always belongs to token0.
    """

    address: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int
    decimals0: int
    decimals1: int

    @property
    def reserve0_display(self) -> str:
        return to_display_string(self.reserve0, self.decimals0)

    @property
    def reserve1_display(self) -> str:
        return to_display_string(self.reserve1, self.decimals1)

    def reserve_of(self, token: str) -> int:
        """Reserve held for ``token``.

        Raises:
            ValueError: If the token is not one of the pair's assets
        """
        key = normalize_address(token)
        if key == self.token0:
            return self.reserve0
        if key == self.token1:
            return self.reserve1
        raise ValueError(f"Token {token} is not in pool {self.address}")


class PoolInspector:
    """Looks up pairs through the factory and reads their reserves."""

    def __init__(self, session: SessionContext | None, metadata: TokenMetadata) -> None:
        self.session = session
        self.metadata = metadata

    async def get_pool_info(
        self, token_a: str | None = None, token_b: str | None = None
    ) -> PoolInfo:
        """Report the pair's address, token ordering and reserves.

        Raises:
            NotInitialized: If the session is not initialized
            PairNotFound: If the factory returns the null address
            LedgerRejected: If a query failed (distinct from PairNotFound)
        """
        session = require_session(self.session)
        token_a = token_a or session.config.token_a_address
        token_b = token_b or session.config.token_b_address

        try:
            pair_address = normalize_address(
                str(await session.factory.call("getPair", token_a, token_b))
            )
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e

        if is_zero_address(pair_address):
            logger.info("pool_not_found", token_a=token_a, token_b=token_b)
            raise PairNotFound(token_a, token_b)

        pair = session.ledger.get_contract(pair_address, PAIR_ABI)
        try:
            reserves = await pair.call("getReserves")
            token0 = normalize_address(str(await pair.call("token0")))
            token1 = normalize_address(str(await pair.call("token1")))
            decimals0 = await self.metadata.decimals(token0)
            decimals1 = await self.metadata.decimals(token1)
        except LedgerError as e:
            raise LedgerRejected(e.cause) from e

        info = PoolInfo(
            address=pair_address,
            token0=token0,
            token1=token1,
            reserve0=int(reserves[0]),
            reserve1=int(reserves[1]),
            decimals0=decimals0,
            decimals1=decimals1,
        )
        logger.debug(
            "pool_info",
            pair=pair_address,
            reserve0=info.reserve0,
            reserve1=info.reserve1,
        )
        return info


__all__ = ["PoolInfo", "PoolInspector"]
