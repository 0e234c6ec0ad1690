# src/ledger_tasks/sync/task_cache.py

from __future__ import annotations

"""
Local view of the user's ledger tasks.

The visible collection is an immutable tuple that is only ever swapped as a
whole by reconcile(). Readers see either the previous result or the new one,
never a mix.

Reconciliations may overlap (manual refresh while a post-operation refresh is
pending). Each request takes a ticket from a monotonically increasing counter;
a response is applied only if no newer request was issued meanwhile.
"""

import logging
from enum import StrEnum

from ..core import events
from ..core.errors import describe_failure
from ..core.events import EventCode
from ..core.ports import EventSink, LedgerGateway
from .identity import IdentitySession
from .task_models import Task, build_task_list

logger = logging.getLogger(__name__)


class ReconcileResult(StrEnum):
    APPLIED = "applied"
    SUPERSEDED = "superseded"  # a newer request owns the collection
    FAILED = "failed"
    SKIPPED = "skipped"  # not connected

    @property
    def ok(self) -> bool:
        return self in (ReconcileResult.APPLIED, ReconcileResult.SUPERSEDED)


class TaskCache:
    def __init__(self, gateway: LedgerGateway, identity: IdentitySession, sink: EventSink) -> None:
        self._gateway = gateway
        self._identity = identity
        self._sink = sink

        self._tasks: tuple[Task, ...] = ()
        self._issued = 0
        self._in_flight = 0

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    async def reconcile(self) -> ReconcileResult:
        """
        Replace the visible collection with fresh ledger state.

        On failure the collection is left untouched and fetch-failed is emitted.
        A response that arrives after a newer request was issued is dropped
        without events (SUPERSEDED).
        """
        if not self._identity.connected:
            logger.debug("reconcile skipped: not connected")
            return ReconcileResult.SKIPPED

        self._issued += 1
        ticket = self._issued
        self._in_flight += 1
        try:
            try:
                raw = await self._gateway.query()
                tasks = build_task_list(raw)
            except Exception as e:
                logger.warning("reconcile #%d failed: %s", ticket, e, exc_info=True)
                self._sink.emit(events.error(EventCode.FETCH_FAILED, describe_failure(e, "Failed to fetch tasks")))
                return ReconcileResult.FAILED

            if ticket != self._issued:
                logger.debug("reconcile #%d superseded by #%d; dropping %d tasks", ticket, self._issued, len(tasks))
                return ReconcileResult.SUPERSEDED

            self._tasks = tasks
        finally:
            self._in_flight -= 1

        logger.info("reconcile #%d applied: %d tasks", ticket, len(tasks))
        if tasks:
            self._sink.emit(events.success(EventCode.FETCH_SUCCESS, f"Tasks loaded! ({len(tasks)})"))
        else:
            self._sink.emit(events.info(EventCode.FETCH_EMPTY, "No tasks found."))
        return ReconcileResult.APPLIED
