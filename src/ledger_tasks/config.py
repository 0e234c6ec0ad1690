# src/ledger_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No RPC endpoint or keys required at import time.
- Offline demo mode when no provider is configured.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "LEDGER_TASKS"

DEFAULT_CONTRACT_ADDRESS = "0xc8c09c30c737a5292d9d4d3d1d11c52ec76a2cdc"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path
    console_enabled: bool

    # ---- Ledger provider ----
    rpc_url: str
    contract_address: str
    abi_path: Path | None

    # ---- Sync timing ----
    settle_delay_seconds: float
    confirmation_poll_seconds: float

    # ---- Offline demo ledger ----
    offline_mode: bool
    offline_accounts: list[str]
    offline_latency_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "ledger-tasks").strip() or "ledger-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/ledger-tasks"))
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        rpc_url = _env(_k("RPC_URL"), "").strip()
        contract_address = _env(_k("CONTRACT_ADDRESS"), DEFAULT_CONTRACT_ADDRESS).strip()

        raw_abi = _env(_k("ABI_PATH"), "").strip()
        abi_path = Path(raw_abi).expanduser() if raw_abi else None

        # Negative delays make no sense; clamp instead of failing at import time.
        settle_delay_seconds = max(0.0, _env_float(_k("SETTLE_DELAY_SECONDS"), 2.0))
        confirmation_poll_seconds = max(0.05, _env_float(_k("CONFIRMATION_POLL_SECONDS"), 1.0))

        # No RPC endpoint means no wallet provider; offline mode is then opt-in.
        offline_mode = _env_bool(_k("OFFLINE"), False)
        offline_accounts = _env_list(
            _k("OFFLINE_ACCOUNTS"),
            ["0x00000000000000000000000000000000000a11ce"],
        )
        offline_latency_seconds = max(0.0, _env_float(_k("OFFLINE_LATENCY_SECONDS"), 0.5))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            console_enabled=console_enabled,
            rpc_url=rpc_url,
            contract_address=contract_address,
            abi_path=abi_path,
            settle_delay_seconds=settle_delay_seconds,
            confirmation_poll_seconds=confirmation_poll_seconds,
            offline_mode=offline_mode,
            offline_accounts=offline_accounts,
            offline_latency_seconds=offline_latency_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
