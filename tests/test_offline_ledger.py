# tests/test_offline_ledger.py

from __future__ import annotations

import pytest

from ledger_tasks.cli.bootstrap import create_initial_state, create_ledger
from ledger_tasks.core.errors import AuthorizationDenied, NotConnected, TransportError
from ledger_tasks.core.events import EventCode
from ledger_tasks.ledger.offline import InMemoryLedger
from ledger_tasks.sync.task_models import CreateTask, DeleteTask

ALICE = "0x00000000000000000000000000000000000a11ce"
BOB = "0x0000000000000000000000000000000000000b0b"


@pytest.mark.asyncio
async def test_writes_land_on_confirmation_only() -> None:
    ledger = InMemoryLedger([ALICE])
    await ledger.list_authorized_accounts()

    tx = await ledger.submit(CreateTask(title="t", body="b"))
    assert await ledger.query() == []

    await tx.wait_for_confirmation()
    assert await ledger.query() == [{"id": 0, "title": "t", "body": "b", "deleted": False}]


@pytest.mark.asyncio
async def test_delete_is_soft_and_owner_only() -> None:
    ledger = InMemoryLedger([ALICE, BOB])
    await ledger.list_authorized_accounts()
    await (await ledger.submit(CreateTask(title="mine", body="x"))).wait_for_confirmation()

    ledger.switch_account(BOB)
    assert await ledger.query() == []
    with pytest.raises(TransportError, match="not the task owner"):
        await ledger.submit(DeleteTask(task_id=0))

    ledger.switch_account(ALICE)
    await (await ledger.submit(DeleteTask(task_id=0))).wait_for_confirmation()
    records = await ledger.query()
    assert records == [{"id": 0, "title": "mine", "body": "x", "deleted": True}]


@pytest.mark.asyncio
async def test_requires_account_and_authorization() -> None:
    ledger = InMemoryLedger([ALICE], authorized=False)
    with pytest.raises(NotConnected):
        await ledger.query()
    assert await ledger.list_authorized_accounts() == []

    assert await ledger.request_authorization() == [ALICE]
    assert ledger.account == ALICE

    denied = InMemoryLedger([ALICE], deny_authorization=True)
    with pytest.raises(AuthorizationDenied):
        await denied.request_authorization()


@pytest.mark.asyncio
async def test_delete_unknown_task_is_rejected() -> None:
    ledger = InMemoryLedger([ALICE])
    await ledger.list_authorized_accounts()
    with pytest.raises(TransportError, match="does not exist"):
        await ledger.submit(DeleteTask(task_id=42))


def test_bootstrap_falls_back_to_offline_ledger(settings) -> None:
    settings.offline_mode = False
    settings.rpc_url = ""
    assert isinstance(create_ledger(settings), InMemoryLedger)


@pytest.mark.asyncio
async def test_full_flow_against_offline_ledger(settings, sink) -> None:
    state = create_initial_state(sink=sink, settings=settings)

    assert not await state.identity.restore()
    await state.identity.connect()
    assert state.identity.account == ALICE

    await state.coordinator.create("Buy milk", "2%")
    await state.coordinator.create("Walk dog", "park")
    assert [t.title for t in state.cache.tasks] == ["Buy milk", "Walk dog"]

    await state.coordinator.delete(state.cache.tasks[0].id)
    assert [t.title for t in state.cache.tasks] == ["Walk dog"]

    assert sink.codes == [
        EventCode.WALLET_CONNECTED,
        EventCode.FETCH_EMPTY,
        EventCode.ADD_PENDING,
        EventCode.ADD_SUCCESS,
        EventCode.FETCH_SUCCESS,
        EventCode.ADD_PENDING,
        EventCode.ADD_SUCCESS,
        EventCode.FETCH_SUCCESS,
        EventCode.DELETE_PENDING,
        EventCode.DELETE_SUCCESS,
        EventCode.FETCH_SUCCESS,
    ]
    assert sink.active == {}
