# src/ledger_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- picks the ledger adapter (web3 RPC or offline in-memory ledger),
- wires IdentitySession / TaskCache / TransactionCoordinator into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import EventSink, IdentityProvider, LedgerGateway
from ..core.state import AppState
from ..ledger.evm import EvmLedger, load_abi
from ..ledger.offline import InMemoryLedger
from ..sync.coordinator import TransactionCoordinator
from ..sync.identity import IdentitySession
from ..sync.task_cache import TaskCache

logger = logging.getLogger(__name__)


def create_ledger(settings) -> EvmLedger | InMemoryLedger:
    """
    Build the ledger adapter.

    Offline mode, or no RPC URL at all, falls back to the in-memory demo ledger.
    """
    if settings.offline_mode or not settings.rpc_url:
        logger.info("Using offline in-memory ledger (no RPC endpoint configured).")
        return InMemoryLedger(
            settings.offline_accounts,
            latency_seconds=settings.offline_latency_seconds,
            authorized=False,
        )

    abi = load_abi(settings.abi_path)
    logger.info("Using RPC ledger %s contract=%s", settings.rpc_url, settings.contract_address)
    return EvmLedger(
        settings.rpc_url,
        settings.contract_address,
        abi=abi,
        poll_seconds=settings.confirmation_poll_seconds,
    )


def wire_state(
    settings,
    *,
    provider: IdentityProvider,
    gateway: LedgerGateway,
    sink: EventSink,
) -> AppState:
    identity = IdentitySession(provider, sink)
    cache = TaskCache(gateway, identity, sink)
    identity.set_on_connected(cache.reconcile)
    coordinator = TransactionCoordinator(
        gateway,
        identity,
        cache,
        sink,
        settle_delay_seconds=settings.settle_delay_seconds,
    )
    return AppState(
        settings=settings,
        identity=identity,
        cache=cache,
        coordinator=coordinator,
        sink=sink,
    )


def create_initial_state(*, sink: EventSink, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    ledger = create_ledger(settings)
    return wire_state(settings, provider=ledger, gateway=ledger, sink=sink)
