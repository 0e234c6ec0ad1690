# src/ledger_tasks/core/errors.py

from __future__ import annotations

"""
Error taxonomy for the sync core and the helpers that turn failures into events.

Local precondition failures (NotConnected, ValidationError, ProviderUnavailable,
AuthorizationDenied) are raised to the caller. Remote failures are caught where
the remote call is made and reported through the EventSink instead.
"""

from .events import EventCode


class LedgerTasksError(Exception):
    """Base class. `code` is the event code this failure is reported under."""

    code: EventCode = EventCode.FETCH_FAILED

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ProviderUnavailable(LedgerTasksError):
    code = EventCode.WALLET_MISSING


class AuthorizationDenied(LedgerTasksError):
    code = EventCode.AUTH_DENIED


class NotConnected(LedgerTasksError):
    code = EventCode.NOT_CONNECTED


class ValidationError(LedgerTasksError):
    code = EventCode.VALIDATION_ERROR

    def __init__(self, field: str, message: str = "") -> None:
        super().__init__(message or f"{field.capitalize()} must not be empty.")
        self.field = field


class TransportError(LedgerTasksError):
    """Query/submit/confirmation failure reported by the ledger adapter."""


class NotOwner(LedgerTasksError):
    code = EventCode.NOT_OWNER


class MalformedRecord(LedgerTasksError):
    """The ledger returned a record that cannot be mapped to a Task."""


# Substrings (lowercased) of revert reasons that reject a non-owner.
# Only ownership phrases belong here: HTTP/RPC failures such as
# "401 ... Unauthorized" or "405 ... Not Allowed" must stay DELETE_FAILED.
OWNERSHIP_REJECTION_MARKERS: tuple[str, ...] = (
    "not the owner",
    "not owner",
    "not the task owner",
    "only owner",
    "caller is not the owner",
)


def is_ownership_rejection(message: str) -> bool:
    text = (message or "").lower()
    return any(marker in text for marker in OWNERSHIP_REJECTION_MARKERS)


def classify_delete_failure(message: str) -> EventCode:
    """Map a delete failure message to NOT_OWNER or the generic DELETE_FAILED."""
    if is_ownership_rejection(message):
        return EventCode.NOT_OWNER
    return EventCode.DELETE_FAILED


def describe_failure(exc: BaseException, fallback: str) -> str:
    """
    Human-readable message for a failure, falling back when the exception is silent.

    web3 errors often carry the revert reason in args[0] or as a dict payload
    ({"message": ...}); take the most specific text available.
    """
    if isinstance(exc, LedgerTasksError) and exc.message:
        return exc.message

    args = getattr(exc, "args", ()) or ()
    if args:
        first = args[0]
        if isinstance(first, dict):
            msg = first.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        elif isinstance(first, str) and first.strip():
            return first.strip()

    text = str(exc).strip()
    return text or fallback
