# src/ledger_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the ledger adapter (web3 / in-memory) and the notifier swappable
and makes testing easier.
"""

from collections.abc import Sequence
from typing import Any, Mapping, Protocol

from ..sync.task_models import LedgerOp
from .events import LedgerEvent

RawTaskRecord = Mapping[str, Any]
# Ledger-side task record: {"id": int-like, "title": str?, "body": str?, "deleted": bool?}.


class PendingTransaction(Protocol):
    """A submitted transaction; resolves once the ledger includes it."""

    @property
    def tx_id(self) -> str: ...

    async def wait_for_confirmation(self) -> None:
        """
        Wait until the transaction is confirmed.

        Raises on failure (reverted, dropped, transport error). There is no
        application-level timeout.
        """
        ...


class LedgerGateway(Protocol):
    async def query(self) -> Sequence[RawTaskRecord]: ...
    async def submit(self, op: LedgerOp) -> PendingTransaction: ...


class IdentityProvider(Protocol):
    """
    Wallet-provider side of identity.

    `available` is False when no provider is installed/configured at all.
    request_authorization() raises AuthorizationDenied on user rejection.
    """

    @property
    def available(self) -> bool: ...

    async def list_authorized_accounts(self) -> Sequence[str]: ...
    async def request_authorization(self) -> Sequence[str]: ...


class EventSink(Protocol):
    """
    Notifier port: receives semantic events for display.

    dismiss(key) retracts a sticky event emitted with the same key; unknown keys
    are ignored.
    """

    def emit(self, event: LedgerEvent) -> None: ...
    def dismiss(self, key: str) -> None: ...
