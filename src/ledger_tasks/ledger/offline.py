# src/ledger_tasks/ledger/offline.py

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..core.errors import AuthorizationDenied, NotConnected, TransportError
from ..core.ports import RawTaskRecord
from ..sync.task_models import CreateTask, DeleteTask, LedgerOp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _StoredTask:
    id: int
    owner: str
    title: str
    body: str
    deleted: bool = False


class InMemoryPendingTransaction:
    def __init__(self, tx_id: str, apply, latency: float) -> None:
        self._tx_id = tx_id
        self._apply = apply
        self._latency = latency
        self._done = False

    @property
    def tx_id(self) -> str:
        return self._tx_id

    async def wait_for_confirmation(self) -> None:
        if self._done:
            return
        if self._latency > 0:
            await asyncio.sleep(self._latency)
        self._apply()
        self._done = True


class InMemoryLedger:
    """
    Offline deterministic ledger used for demos when no RPC endpoint is configured.

    Behaves like the task contract:
    - records are append-only; delete only flips `deleted`
    - query() returns the active account's records, deleted ones included
    - deleting someone else's task reverts with an ownership error
    - writes land when the transaction is confirmed, not when submitted
    """

    def __init__(
        self,
        accounts: Sequence[str] = ("0x00000000000000000000000000000000000a11ce",),
        *,
        latency_seconds: float = 0.0,
        authorized: bool = True,
        deny_authorization: bool = False,
    ) -> None:
        self._accounts = [a for a in accounts if a]
        self._latency = max(0.0, float(latency_seconds))
        self._authorized = authorized
        self._deny = deny_authorization
        self._records: list[_StoredTask] = []
        self._ids = itertools.count(0)
        self._tx_seq = itertools.count(1)
        self.account: str | None = None

    # ---- IdentityProvider ----

    @property
    def available(self) -> bool:
        return True

    async def list_authorized_accounts(self) -> Sequence[str]:
        if not self._authorized:
            return []
        if self._accounts and self.account is None:
            self.account = self._accounts[0]
        return list(self._accounts)

    async def request_authorization(self) -> Sequence[str]:
        if self._deny:
            raise AuthorizationDenied("User rejected the request.")
        self._authorized = True
        return await self.list_authorized_accounts()

    def switch_account(self, account: str) -> None:
        """Act as another account (tests/demos of ownership rejections)."""
        self.account = account

    # ---- LedgerGateway ----

    async def query(self) -> Sequence[RawTaskRecord]:
        owner = self._require_account()
        if self._latency > 0:
            await asyncio.sleep(self._latency / 2)
        return [
            {"id": r.id, "title": r.title, "body": r.body, "deleted": r.deleted}
            for r in self._records
            if r.owner == owner
        ]

    async def submit(self, op: LedgerOp) -> InMemoryPendingTransaction:
        sender = self._require_account()
        tx_id = f"0x{next(self._tx_seq):064x}"

        if isinstance(op, CreateTask):

            def apply() -> None:
                record = _StoredTask(
                    id=next(self._ids), owner=sender, title=op.title, body=op.body, deleted=op.deleted
                )
                self._records.append(record)
                logger.debug("offline ledger: added task id=%s owner=%s", record.id, sender)

        elif isinstance(op, DeleteTask):
            target = self._find(op.task_id)
            if target is None:
                raise TransportError(f"execution reverted: task {op.task_id} does not exist")
            if target.owner != sender:
                raise TransportError("execution reverted: caller is not the task owner")

            def apply() -> None:
                target.deleted = True
                logger.debug("offline ledger: deleted task id=%s", target.id)

        else:
            raise TransportError(f"Unsupported operation: {op!r}")

        return InMemoryPendingTransaction(tx_id, apply, self._latency)

    def _require_account(self) -> str:
        if self.account is None:
            raise NotConnected("No account selected.")
        return self.account

    def _find(self, task_id: int) -> _StoredTask | None:
        for r in self._records:
            if r.id == task_id:
                return r
        return None
