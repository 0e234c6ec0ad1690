# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from ledger_tasks.config import DEFAULT_CONTRACT_ADDRESS, Settings


def test_defaults(monkeypatch) -> None:
    for name in (
        "LEDGER_TASKS_RPC_URL",
        "LEDGER_TASKS_CONTRACT_ADDRESS",
        "LEDGER_TASKS_SETTLE_DELAY_SECONDS",
        "LEDGER_TASKS_OFFLINE",
        "LEDGER_TASKS_ABI_PATH",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.rpc_url == ""
    assert s.contract_address == DEFAULT_CONTRACT_ADDRESS
    assert s.settle_delay_seconds == 2.0
    assert s.abi_path is None
    assert s.offline_mode is False


def test_env_overrides_and_bad_values(monkeypatch) -> None:
    monkeypatch.setenv("LEDGER_TASKS_RPC_URL", " http://127.0.0.1:8545 ")
    monkeypatch.setenv("LEDGER_TASKS_SETTLE_DELAY_SECONDS", "not-a-number")
    monkeypatch.setenv("LEDGER_TASKS_CONFIRMATION_POLL_SECONDS", "-3")
    monkeypatch.setenv("LEDGER_TASKS_OFFLINE", "yes")
    monkeypatch.setenv("LEDGER_TASKS_OFFLINE_ACCOUNTS", "0xa, 0xb")
    monkeypatch.setenv("LEDGER_TASKS_ABI_PATH", "~/abi.json")

    s = Settings.from_env()

    assert s.rpc_url == "http://127.0.0.1:8545"
    assert s.settle_delay_seconds == 2.0
    assert s.confirmation_poll_seconds == 0.05
    assert s.offline_mode is True
    assert s.offline_accounts == ["0xa", "0xb"]
    assert s.abi_path == Path("~/abi.json").expanduser()
