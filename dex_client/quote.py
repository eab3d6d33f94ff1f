"""Quote engine: prices a trade path through the router's getAmountsOut.

Quotes are advisory only. Reserves can move between observation and
settlement, which is why swaps re-quote right before submission and always
apply a slippage bound.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from dex_client.amounts import to_display_string
from dex_client.errors import FailureCause, LedgerError, LedgerRejected, MalformedAmount, NoRoute
from dex_client.ledger.base import ContractHandle
from dex_client.metadata import TokenMetadata
from dex_client.models.types import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class TradePath:
    """Ordered hop sequence of at least two distinct assets.

    The path does not check that liquidity exists for its hops.
    """

    tokens: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.tokens) < 2:
            raise ValueError(f"Trade path needs at least 2 assets, got {len(self.tokens)}")
        normalized = [normalize_address(t) for t in self.tokens]
        if len(set(normalized)) != len(normalized):
            raise ValueError(f"Trade path assets must be distinct: {list(self.tokens)}")

    @classmethod
    def of(cls, *tokens: str) -> TradePath:
        return cls(tuple(tokens))

    @property
    def token_in(self) -> str:
        return self.tokens[0]

    @property
    def token_out(self) -> str:
        return self.tokens[-1]

    def as_list(self) -> list[str]:
        return list(self.tokens)


@dataclass(frozen=True)
class Quote:
    """Router output for a path: one amount per asset, input first."""

    path: TradePath
    amounts: tuple[int, ...]

    @property
    def amount_in(self) -> int:
        return self.amounts[0]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1]


class QuoteEngine:
    """Prices trades against the router. No ledger state is changed."""

    def __init__(self, router: ContractHandle, metadata: TokenMetadata) -> None:
        self.router = router
        self.metadata = metadata

    async def get_amounts_out(self, amount_in: int, path: TradePath) -> Quote:
        """Quote an exact-input trade along ``path``.

        Raises:
            MalformedAmount: If amount_in is not positive
            NoRoute: If any hop has no pool or no reserves
            LedgerRejected: If the router could not be reached or answered
                inconsistently
        """
        if amount_in <= 0:
            raise MalformedAmount(f"Quote amount must be positive, got {amount_in}")

        try:
            raw = await self.router.call("getAmountsOut", amount_in, path.as_list())
        except LedgerError as e:
            if e.cause.transient:
                raise LedgerRejected(e.cause) from e
            logger.info("quote_no_route", path=path.as_list(), amount_in=amount_in, reason=str(e))
            raise NoRoute(f"No route for {' -> '.join(path.tokens)}: {e.cause.reason}") from e

        amounts = tuple(int(a) for a in raw)
        if len(amounts) != len(path.tokens) or amounts[0] != amount_in:
            raise LedgerRejected(
                FailureCause(reason=f"Unexpected getAmountsOut result {list(amounts)}")
            )
        # An empty pool prices every hop at zero: that is "cannot trade", not "zero output"
        if any(a == 0 for a in amounts[1:]):
            raise NoRoute(f"No reserves along {' -> '.join(path.tokens)}")

        logger.debug("quote_obtained", path=path.as_list(), amounts=list(amounts))
        return Quote(path=path, amounts=amounts)

    async def format_quote(self, quote: Quote) -> str:
        """Expected output in the output asset's display units."""
        decimals = await self.metadata.decimals(quote.path.token_out)
        return to_display_string(quote.amount_out, decimals)

    async def quote_tokens(self, amount_in: int, tokens: Sequence[str]) -> Quote:
        """Convenience wrapper building the path from a token sequence."""
        return await self.get_amounts_out(amount_in, TradePath(tuple(tokens)))


__all__ = ["TradePath", "Quote", "QuoteEngine"]
