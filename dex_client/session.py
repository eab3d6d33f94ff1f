"""Session context: connected account and resolved contract handles."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from dex_client.abis import FACTORY_ABI, ROUTER_ABI
from dex_client.config import DexConfig
from dex_client.errors import NotInitialized
from dex_client.ledger.base import ContractHandle, LedgerClient
from dex_client.models.types import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class SessionContext:
    """Process-wide state shared read-only by every intent.

    Created once by initialize_session(); re-initialization builds a new
    instance instead of mutating this one.
    """

    ledger: LedgerClient
    config: DexConfig
    account: str
    factory: ContractHandle
    router: ContractHandle

    @property
    def router_address(self) -> str:
        return normalize_address(self.config.router_address)


async def initialize_session(ledger: LedgerClient, config: DexConfig) -> SessionContext:
    """Resolve the account and the factory/router handles.

    Raises:
        LedgerError: If the ledger cannot provide an account
    """
    account = await ledger.request_account()
    factory = ledger.get_contract(config.factory_address, FACTORY_ABI)
    router = ledger.get_contract(config.router_address, ROUTER_ABI)
    logger.info(
        "session_initialized",
        account=account,
        factory=config.factory_address,
        router=config.router_address,
    )
    return SessionContext(
        ledger=ledger,
        config=config,
        account=normalize_address(account),
        factory=factory,
        router=router,
    )


def require_session(session: SessionContext | None) -> SessionContext:
    """Return the session or raise NotInitialized."""
    if session is None:
        raise NotInitialized()
    return session


__all__ = ["SessionContext", "initialize_session", "require_session"]
