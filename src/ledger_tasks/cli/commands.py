# src/ledger_tasks/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..core.errors import LedgerTasksError
from ..core.state import AppState
from ..sync.identity import shorten_account

CommandHandler = Callable[[AppState, list[str]], Awaitable[str | None]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string, or None if not a command / nothing to print.

        Sync-core failures are already reported through the EventSink, so they
        are swallowed here instead of being printed twice.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        args = [rest] if rest else []
        try:
            return await handler(state, args)
        except LedgerTasksError as e:
            logger.debug("/%s stopped: %s (%s)", name, e.__class__.__name__, e.code.value)
            return None

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_tasks(state: AppState) -> str:
    tasks = state.cache.tasks
    if not tasks:
        return "No tasks found"
    lines = ["My Tasks:"]
    for t in tasks:
        lines.append(f"  #{t.id} {t.title}")
        lines.append(f"      {t.body}")
    return "\n".join(lines)


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    identity = state.identity
    account = shorten_account(identity.account) if identity.account else "-"
    return (
        "Status:\n"
        f"  Wallet: {'Connected' if identity.connected else 'Not connected'} ({account})\n"
        f"  Tasks: {len(state.cache)}{' (loading...)' if state.cache.loading else ''}\n"
        f"  Draft: title={state.form.title!r} body={state.form.body!r}"
    )


async def cmd_connect(state: AppState, args: list[str]) -> str | None:
    if state.identity.connected:
        return f"Already connected as {shorten_account(state.identity.account or '')}."
    await state.identity.connect()
    return None


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    return format_tasks(state)


async def cmd_refresh(state: AppState, args: list[str]) -> str | None:
    if not state.identity.connected:
        return "Connect your wallet first (/connect)."
    result = await state.cache.reconcile()
    return format_tasks(state) if result.ok else None


async def cmd_title(state: AppState, args: list[str]) -> str:
    """
    /title          -> show draft title
    /title <text>   -> set draft title
    """
    if args:
        state.form.title = args[0]
    return f"Title: {state.form.title!r}"


async def cmd_body(state: AppState, args: list[str]) -> str:
    if args:
        state.form.body = args[0]
    return f"Description: {state.form.body!r}"


async def cmd_add(state: AppState, args: list[str]) -> str | None:
    """
    /add                   -> submit the draft (/title, /body)
    /add <title> | <body>  -> fill the draft and submit
    """
    if args:
        title, sep, body = args[0].partition("|")
        state.form.title = title.strip()
        if sep:
            state.form.body = body.strip()
    op = await state.coordinator.create_from_form()
    return format_tasks(state) if op.succeeded else None


async def cmd_delete(state: AppState, args: list[str]) -> str | None:
    if not args:
        return "Usage: /delete <task id>"
    try:
        task_id = int(args[0].strip().lstrip("#"))
    except ValueError:
        return f"Not a task id: {args[0]!r}"
    if task_id < 0:
        return f"Not a task id: {args[0]!r}"
    op = await state.coordinator.delete(task_id)
    return format_tasks(state) if op.succeeded else None


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show wallet/session status.")
registry.register("connect", cmd_connect, help_text="Connect the wallet.")
registry.register("tasks", cmd_tasks, help_text="List cached tasks.", aliases=["ls"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the ledger.", aliases=["r"])
registry.register("title", cmd_title, help_text="Set the new task title: /title <text>.")
registry.register("body", cmd_body, help_text="Set the new task description: /body <text>.")
registry.register("add", cmd_add, help_text="Add a task: /add | /add <title> | <body>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
