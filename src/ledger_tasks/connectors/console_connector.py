# src/ledger_tasks/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.events import LedgerEvent, Severity
from ..core.state import AppState

logger = logging.getLogger(__name__)

_TAGS = {
    Severity.INFO: "INFO",
    Severity.SUCCESS: "OK",
    Severity.WARNING: "WARN",
    Severity.ERROR: "ERROR",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleEventSink:
    """
    Prints sync events as timestamped lines (the console's "toasts").

    Sticky events stay listed in `active` until dismissed.
    """

    def __init__(self) -> None:
        self.active: dict[str, LedgerEvent] = {}

    def emit(self, event: LedgerEvent) -> None:
        if event.key is not None:
            self.active[event.key] = event
        _print_ts(f"[{_TAGS.get(event.severity, event.severity.value.upper())}] {event.message}")

    def dismiss(self, key: str) -> None:
        self.active.pop(key, None)


async def _run_command(state: AppState, line: str) -> None:
    try:
        reply = await command_registry.handle(state, line)
    except Exception:
        logger.exception("Command handler crashed: %s", line)
        reply = "Internal error while handling a command."
    if reply:
        _print_ts(reply)


async def run_console_loop(state: AppState) -> None:
    """
    Read commands from stdin and run each one as its own asyncio task.

    Commands overlap like UI buttons: /refresh can run while an /add is still
    waiting for confirmation.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /connect to connect, /exit to quit.\n")

    running: set[asyncio.Task[None]] = set()

    restored = await state.identity.restore()
    if not restored:
        _print_ts("Wallet not connected. Use /connect.")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Use /help.")
            continue

        task = asyncio.create_task(_run_command(state, user_input))
        running.add(task)
        task.add_done_callback(running.discard)

    if running:
        # In-flight transactions cannot be cancelled; let them report their outcome.
        _print_ts(f"Waiting for {len(running)} pending operation(s)...")
        await asyncio.gather(*running, return_exceptions=True)

    logger.info("Console connector finished.")
