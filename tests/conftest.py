# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from ledger_tasks.cli.bootstrap import wire_state
from ledger_tasks.core.state import AppState
from ledger_tasks.sync.identity import IdentitySession
from ledger_tasks.sync.task_cache import TaskCache

from .fakes import FakeIdentityProvider, FakeLedger, RecordingEventSink


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic (no settle delay).
    """
    return SimpleNamespace(
        data_dir=tmp_path,
        settle_delay_seconds=0.0,
        confirmation_poll_seconds=0.01,
        offline_mode=True,
        offline_accounts=["0x00000000000000000000000000000000000a11ce"],
        offline_latency_seconds=0.0,
        rpc_url="",
        contract_address="0xc8c09c30c737a5292d9d4d3d1d11c52ec76a2cdc",
        abi_path=None,
    )


@pytest.fixture()
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture()
def identity(provider: FakeIdentityProvider, sink: RecordingEventSink) -> IdentitySession:
    """Disconnected session; no reconcile hook (tests drive the cache directly)."""
    return IdentitySession(provider, sink)


@pytest.fixture()
def cache(ledger: FakeLedger, identity: IdentitySession, sink: RecordingEventSink) -> TaskCache:
    return TaskCache(ledger, identity, sink)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    provider: FakeIdentityProvider,
    ledger: FakeLedger,
    sink: RecordingEventSink,
) -> AppState:
    """AppState wired with deterministic fakes, exactly as bootstrap wires it."""
    return wire_state(settings, provider=provider, gateway=ledger, sink=sink)
