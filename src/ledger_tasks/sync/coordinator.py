# src/ledger_tasks/sync/coordinator.py

from __future__ import annotations

"""
Transaction coordinator.

Runs one user-initiated ledger operation through a fixed pipeline:

    submit -> wait_for_confirmation -> settle delay -> TaskCache.reconcile()

Local preconditions (connection, non-blank fields) are checked before anything
reaches the ledger and are raised to the caller. Every remote failure is caught
here and reported as exactly one error event; create()/delete() then return the
operation in phase FAILED instead of raising.
"""

import asyncio
import logging

from ..core import events
from ..core.errors import (
    NotConnected,
    ValidationError,
    classify_delete_failure,
    describe_failure,
)
from ..core.events import ADD_TASK_KEY, DELETE_TASK_KEY, EventCode, pending_key
from ..core.ports import EventSink, LedgerGateway
from .identity import IdentitySession
from .task_cache import TaskCache
from .task_models import (
    CreateTask,
    DeleteTask,
    OperationKind,
    OperationPhase,
    PendingOperation,
    TaskForm,
)

logger = logging.getLogger(__name__)


class TransactionCoordinator:
    def __init__(
        self,
        gateway: LedgerGateway,
        identity: IdentitySession,
        cache: TaskCache,
        sink: EventSink,
        *,
        form: TaskForm | None = None,
        settle_delay_seconds: float = 2.0,
    ) -> None:
        self._gateway = gateway
        self._identity = identity
        self._cache = cache
        self._sink = sink
        self.form = form if form is not None else TaskForm()
        self._settle_delay = max(0.0, float(settle_delay_seconds))

    @property
    def settle_delay_seconds(self) -> float:
        return self._settle_delay

    def _require_connected(self) -> None:
        if not self._identity.connected:
            exc = NotConnected("Please connect your wallet first.")
            self._sink.emit(events.warning(EventCode.NOT_CONNECTED, exc.message))
            raise exc

    def _require_text(self, field: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            exc = ValidationError(field, f"Please fill in the task {field}.")
            self._sink.emit(events.warning(EventCode.VALIDATION_ERROR, exc.message))
            raise exc
        return value.strip()

    async def create(self, title: str, body: str) -> PendingOperation:
        self._require_connected()
        title = self._require_text("title", title)
        body = self._require_text("body", body)

        op = PendingOperation(OperationKind.CREATE, CreateTask(title=title, body=body, deleted=False))
        logger.info("create: submitting title=%r", title)

        try:
            tx = await self._gateway.submit(op.payload)
            op.tx_id = tx.tx_id
            op.phase = OperationPhase.SUBMITTED
            key = pending_key(ADD_TASK_KEY, op.tx_id)
            self._sink.emit(events.info(EventCode.ADD_PENDING, "Adding task...", key=key))
            try:
                await tx.wait_for_confirmation()
            finally:
                self._sink.dismiss(key)
        except Exception as e:
            msg = describe_failure(e, "Failed to add task")
            logger.warning("create failed (phase=%s): %s", op.phase.value, msg, exc_info=True)
            op.phase = OperationPhase.FAILED
            op.error = msg
            self._sink.emit(events.error(EventCode.ADD_FAILED, msg))
            return op

        op.phase = OperationPhase.CONFIRMED
        logger.info("create confirmed tx=%s", op.tx_id)
        self._sink.emit(events.success(EventCode.ADD_SUCCESS, "Task added successfully!"))
        self.form.clear()

        return await self._settle_and_reconcile(op)

    async def create_from_form(self) -> PendingOperation:
        return await self.create(self.form.title, self.form.body)

    async def delete(self, task_id: int) -> PendingOperation:
        self._require_connected()

        op = PendingOperation(OperationKind.DELETE, DeleteTask(task_id=int(task_id)))
        logger.info("delete: submitting task_id=%s", task_id)

        try:
            tx = await self._gateway.submit(op.payload)
            op.tx_id = tx.tx_id
            op.phase = OperationPhase.SUBMITTED
            key = pending_key(DELETE_TASK_KEY, op.tx_id)
            self._sink.emit(events.info(EventCode.DELETE_PENDING, "Deleting task...", key=key))
            try:
                await tx.wait_for_confirmation()
            finally:
                self._sink.dismiss(key)
        except Exception as e:
            msg = describe_failure(e, "Failed to delete task")
            code = classify_delete_failure(msg)
            logger.warning("delete failed (phase=%s code=%s): %s", op.phase.value, code.value, msg, exc_info=True)
            op.phase = OperationPhase.FAILED
            op.error = msg
            if code == EventCode.NOT_OWNER:
                msg = f"Only the task owner can delete this task. ({msg})"
            self._sink.emit(events.error(code, msg))
            return op

        op.phase = OperationPhase.CONFIRMED
        logger.info("delete confirmed tx=%s", op.tx_id)
        self._sink.emit(events.success(EventCode.DELETE_SUCCESS, "Task deleted successfully!"))

        return await self._settle_and_reconcile(op)

    async def _settle_and_reconcile(self, op: PendingOperation) -> PendingOperation:
        # The read path lags behind confirmation; reconciling right away often
        # returns the pre-transaction list.
        if self._settle_delay > 0:
            await asyncio.sleep(self._settle_delay)

        result = await self._cache.reconcile()
        if result.ok:
            op.phase = OperationPhase.RECONCILED
        else:
            op.phase = OperationPhase.FAILED
            op.error = f"Reconciliation after confirmation {result.value}."
        logger.debug("%s op tx=%s finished: reconcile=%s", op.kind.value, op.tx_id, result.value)
        return op
