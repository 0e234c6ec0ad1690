# tests/test_commands.py

from __future__ import annotations

import pytest

from ledger_tasks.cli.commands import CommandRegistry, registry
from ledger_tasks.core.events import EventCode
from ledger_tasks.sync.task_models import CreateTask, DeleteTask


@pytest.mark.asyncio
async def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    async def handler(state, args):
        called.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["x"])

    assert await reg.handle(state, "/a one two") == "ok"
    assert await reg.handle(state, "/X") == "ok"
    assert called == [["one two"], []]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_add_before_connect_is_reported_once_and_swallowed(state, ledger, sink) -> None:
    assert await registry.handle(state, "/add Buy milk | 2%") is None

    assert ledger.submitted == []
    assert sink.codes == [EventCode.NOT_CONNECTED]
    # Draft kept for the retry.
    assert state.form.title == "Buy milk"
    assert state.form.body == "2%"


@pytest.mark.asyncio
async def test_connect_then_add_from_draft(state, ledger, sink) -> None:
    ledger.query_results = [[], [{"id": 0, "title": "Buy milk", "body": "2%"}]]

    await registry.handle(state, "/connect")
    await registry.handle(state, "/title Buy milk")
    await registry.handle(state, "/body 2%")
    reply = await registry.handle(state, "/add")

    assert ledger.submitted == [CreateTask(title="Buy milk", body="2%")]
    assert reply is not None and "#0 Buy milk" in reply
    assert state.form.title == ""
    assert EventCode.ADD_SUCCESS in sink.codes


@pytest.mark.asyncio
async def test_add_with_missing_body_is_validation_error(state, ledger, sink) -> None:
    await state.identity.restore()

    assert await registry.handle(state, "/add only a title") is None

    assert ledger.submitted == []
    assert sink.codes[-1] == EventCode.VALIDATION_ERROR


@pytest.mark.asyncio
async def test_delete_parses_id(state, ledger) -> None:
    await state.identity.restore()

    assert "Usage" in (await registry.handle(state, "/delete") or "")
    assert "Not a task id" in (await registry.handle(state, "/delete abc") or "")
    await registry.handle(state, "/rm #3")

    assert ledger.submitted == [DeleteTask(task_id=3)]


@pytest.mark.asyncio
async def test_tasks_and_status(state, ledger) -> None:
    assert await registry.handle(state, "/tasks") == "No tasks found"
    assert "Not connected" in (await registry.handle(state, "/status") or "")
    assert "Connect your wallet" in (await registry.handle(state, "/refresh") or "")

    ledger.query_results = [[{"id": 1, "title": "A", "body": "B"}]]
    await state.identity.restore()
    reply = await registry.handle(state, "/refresh")

    assert reply is not None and "#1 A" in reply
    status = await registry.handle(state, "/status") or ""
    assert "Connected (0xA11C...0001)" in status
    assert "Tasks: 1" in status


@pytest.mark.asyncio
async def test_help_lists_commands(state) -> None:
    text = await registry.handle(state, "/help") or ""
    for name in ("connect", "add", "delete", "refresh", "tasks"):
        assert f"/{name}" in text
