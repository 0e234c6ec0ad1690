# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ledger_tasks.logging_setup import LOG_FILE_NAME, console_threshold, setup_logging


@pytest.mark.parametrize(
    "name,level",
    [
        ("ledger_tasks.sync.coordinator", logging.NOTSET),
        ("ledger_tasks.ledger.evm", logging.WARNING),
        ("py.warnings", logging.ERROR),
        ("web3.providers.async_rpc", logging.ERROR),
        ("urllib3.connectionpool", logging.ERROR),
    ],
)
def test_console_threshold(name, level) -> None:
    assert console_threshold(name) == level


def test_setup_logging_writes_everything_to_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    saved_web3_level = logging.getLogger("web3").level

    try:
        log_file = setup_logging(log_dir=tmp_path / "data")

        assert log_file == tmp_path / "data" / LOG_FILE_NAME
        assert len(root.handlers) == 2
        assert logging.getLogger("web3").level == logging.WARNING

        logging.getLogger("ledger_tasks.ledger.evm").debug("receipt not yet available")
        for h in root.handlers:
            h.flush()

        assert "DEBUG ledger_tasks.ledger.evm: receipt not yet available" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.getLogger("web3").setLevel(saved_web3_level)
        logging.captureWarnings(False)
