# src/ledger_tasks/sync/task_models.py

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.errors import MalformedRecord

# Largest id handed to consumers. Ids past this cannot round-trip through
# JSON/float-based frontends, so they are rejected instead of silently rounded.
MAX_TASK_ID = 2**53 - 1


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    title: str
    body: str


@dataclass(slots=True, frozen=True)
class CreateTask:
    title: str
    body: str
    deleted: bool = False


@dataclass(slots=True, frozen=True)
class DeleteTask:
    task_id: int


LedgerOp = CreateTask | DeleteTask


class OperationKind(StrEnum):
    CREATE = "create"
    DELETE = "delete"


class OperationPhase(StrEnum):
    """
    Per-operation state machine.

    idle -> submitted -> confirmed -> reconciled
    submitted/confirmed -> failed (no retry transition)
    """

    IDLE = "idle"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    RECONCILED = "reconciled"
    FAILED = "failed"


@dataclass(slots=True)
class PendingOperation:
    kind: OperationKind
    payload: LedgerOp
    phase: OperationPhase = OperationPhase.IDLE
    tx_id: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.phase == OperationPhase.RECONCILED


@dataclass(slots=True)
class TaskForm:
    """Title/body inputs of the "new task" form. Cleared only after a confirmed create."""

    title: str = ""
    body: str = ""

    def clear(self) -> None:
        self.title = ""
        self.body = ""


def narrow_task_id(raw: Any) -> int:
    """
    Convert a ledger identifier (uint256, numeric string, integral float) into an int.

    Raises MalformedRecord when the value is not an exact non-negative integer
    within MAX_TASK_ID.
    """
    if isinstance(raw, bool):
        raise MalformedRecord(f"Task id has unexpected type: {raw!r}")

    value: int
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise MalformedRecord(f"Task id is not an integer: {raw!r}")
        value = int(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        try:
            value = int(s, 16) if s.lower().startswith("0x") else int(s, 10)
        except ValueError:
            raise MalformedRecord(f"Task id is not numeric: {raw!r}") from None
    else:
        try:
            # Objects implementing __index__ (numpy ints, custom uint types).
            value = int(raw.__index__())
        except (AttributeError, TypeError):
            raise MalformedRecord(f"Task id has unexpected type: {raw!r}") from None

    if value < 0 or value > MAX_TASK_ID:
        raise MalformedRecord(f"Task id out of range: {value}")
    return value


def _text(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    return raw if raw.strip() else None


def _is_visible(record: Mapping[str, Any]) -> bool:
    if record.get("id") is None:
        return False
    if record.get("deleted"):
        return False
    return _text(record.get("title")) is not None and _text(record.get("body")) is not None


def iter_visible_tasks(records: Iterable[Mapping[str, Any]]) -> Iterator[Task]:
    """
    Lazily filter and map raw ledger records into Tasks, keeping ledger order.

    Records without an id, with a blank title/body, or marked deleted are skipped.
    A present-but-unusable id raises MalformedRecord.
    """
    for record in records:
        if not _is_visible(record):
            continue
        yield Task(
            id=narrow_task_id(record["id"]),
            title=record["title"],
            body=record["body"],
        )


def build_task_list(records: Iterable[Mapping[str, Any]]) -> tuple[Task, ...]:
    """Materialize iter_visible_tasks(); raises before producing a partial result."""
    return tuple(iter_visible_tasks(records))
