# src/ledger_tasks/core/events.py

from __future__ import annotations

"""
Semantic lifecycle events emitted by the sync core.

The core never renders anything. It hands LedgerEvent values to an EventSink
(console printer, GUI toast widget, test recorder) which decides how to show them.
"""

from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class EventCode(StrEnum):
    """Stable event codes. Notifiers may key translations/styles on these."""

    WALLET_MISSING = "wallet-missing"
    AUTH_DENIED = "auth-denied"
    WALLET_CONNECTED = "wallet-connected"
    NOT_CONNECTED = "not-connected"
    VALIDATION_ERROR = "validation-error"

    ADD_PENDING = "add-pending"
    ADD_SUCCESS = "add-success"
    ADD_FAILED = "add-failed"

    DELETE_PENDING = "delete-pending"
    DELETE_SUCCESS = "delete-success"
    DELETE_FAILED = "delete-failed"
    NOT_OWNER = "not-owner"

    FETCH_SUCCESS = "fetch-success"
    FETCH_EMPTY = "fetch-empty"
    FETCH_FAILED = "fetch-failed"


# Prefixes of sticky keys for "in progress" events; terminal outcomes dismiss them.
ADD_TASK_KEY = "add-task"
DELETE_TASK_KEY = "delete-task"


def pending_key(prefix: str, tx_id: str) -> str:
    """Sticky key of one in-flight transaction, e.g. 'add-task:0xabc...'."""
    return f"{prefix}:{tx_id}"


@dataclass(slots=True, frozen=True)
class LedgerEvent:
    severity: Severity
    code: EventCode
    message: str
    # Set for sticky events that must be retracted later via EventSink.dismiss(key).
    key: str | None = None

    @property
    def sticky(self) -> bool:
        return self.key is not None


def info(code: EventCode, message: str, *, key: str | None = None) -> LedgerEvent:
    return LedgerEvent(Severity.INFO, code, message, key)


def success(code: EventCode, message: str) -> LedgerEvent:
    return LedgerEvent(Severity.SUCCESS, code, message)


def warning(code: EventCode, message: str) -> LedgerEvent:
    return LedgerEvent(Severity.WARNING, code, message)


def error(code: EventCode, message: str) -> LedgerEvent:
    return LedgerEvent(Severity.ERROR, code, message)
