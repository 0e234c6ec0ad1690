# src/ledger_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..sync.coordinator import TransactionCoordinator
from ..sync.identity import IdentitySession
from ..sync.task_cache import TaskCache
from ..sync.task_models import TaskForm
from .ports import EventSink


@dataclass
class AppState:
    """
    Session state handed to every command handler.

    Owns the identity session, the task cache, the coordinator and the form
    inputs. Nothing else writes identity or cache contents.
    """

    settings: Any

    identity: IdentitySession
    cache: TaskCache
    coordinator: TransactionCoordinator
    sink: EventSink

    @property
    def form(self) -> TaskForm:
        return self.coordinator.form
