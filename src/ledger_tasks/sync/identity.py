# src/ledger_tasks/sync/identity.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from ..core import events
from ..core.errors import AuthorizationDenied, ProviderUnavailable, describe_failure
from ..core.events import EventCode
from ..core.ports import EventSink, IdentityProvider

logger = logging.getLogger(__name__)

OnConnected = Callable[[], Awaitable[Any]]


def shorten_account(account: str) -> str:
    """0x1234567890abcdef -> 0x1234...cdef (display only)."""
    if len(account) <= 10:
        return account
    return f"{account[:6]}...{account[-4:]}"


class IdentitySession:
    """
    Connection state of the single tracked account.

    `account` is set iff `connected` is True. Only restore()/connect() change it;
    there is no disconnect watcher.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        sink: EventSink,
        *,
        on_connected: OnConnected | None = None,
    ) -> None:
        self._provider = provider
        self._sink = sink
        self._on_connected = on_connected
        self._account: str | None = None

    @property
    def connected(self) -> bool:
        return self._account is not None

    @property
    def account(self) -> str | None:
        return self._account

    def set_on_connected(self, callback: OnConnected | None) -> None:
        self._on_connected = callback

    def _adopt(self, accounts: Sequence[str]) -> bool:
        for acc in accounts:
            if isinstance(acc, str) and acc.strip():
                # First one is authoritative.
                self._account = acc.strip()
                return True
        return False

    async def _after_connect(self) -> None:
        if self._on_connected is not None:
            await self._on_connected()

    async def restore(self) -> bool:
        """
        Silent background check for an already-authorized account.

        Never raises and never emits failure events.
        """
        if not self._provider.available:
            logger.debug("restore: no identity provider available")
            return False

        try:
            accounts = await self._provider.list_authorized_accounts()
        except Exception:
            logger.warning("restore: listing authorized accounts failed", exc_info=True)
            return False

        if not self._adopt(accounts):
            logger.debug("restore: no authorized accounts")
            return False

        logger.info("Restored session for %s", shorten_account(self._account or ""))
        await self._after_connect()
        return True

    async def connect(self) -> str:
        """
        Explicitly request authorization.

        Raises ProviderUnavailable / AuthorizationDenied after emitting the matching
        event. On success emits wallet-connected, reconciles, and returns the account.
        """
        if not self._provider.available:
            exc = ProviderUnavailable("No wallet provider found. Install or enable one (e.g. MetaMask).")
            self._sink.emit(events.error(EventCode.WALLET_MISSING, exc.message))
            raise exc

        try:
            accounts = await self._provider.request_authorization()
        except ProviderUnavailable as e:
            self._sink.emit(events.error(EventCode.WALLET_MISSING, describe_failure(e, "Wallet provider unavailable.")))
            raise
        except AuthorizationDenied as e:
            logger.info("Authorization denied: %s", e)
            self._sink.emit(events.error(EventCode.AUTH_DENIED, describe_failure(e, "Wallet connection was rejected.")))
            raise
        except Exception as e:
            logger.exception("request_authorization failed")
            msg = describe_failure(e, "Failed to connect wallet.")
            self._sink.emit(events.error(EventCode.AUTH_DENIED, msg))
            raise AuthorizationDenied(msg) from e

        if not self._adopt(accounts):
            msg = "Wallet returned no accounts."
            self._sink.emit(events.error(EventCode.AUTH_DENIED, msg))
            raise AuthorizationDenied(msg)

        account = self._account or ""
        logger.info("Connected as %s", shorten_account(account))
        self._sink.emit(events.success(EventCode.WALLET_CONNECTED, "Wallet connected successfully!"))
        await self._after_connect()
        return account
