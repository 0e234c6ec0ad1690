# src/ledger_tasks/logging_setup.py

from __future__ import annotations

"""
Two log sinks for the ledger client.

stderr shares the terminal with the command prompt and event toasts, so it only
gets our own records plus third-party errors. The file under the data dir gets
everything at DEBUG, including every receipt poll and RPC round trip.
"""

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "ledger-tasks.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Logger-name prefix -> lowest level shown on the console. First match wins.
_CONSOLE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    ("ledger_tasks.ledger.evm", logging.WARNING),  # one record per poll tick
    ("ledger_tasks.", logging.NOTSET),
    ("py.warnings", logging.ERROR),
)

# Applied to the loggers themselves, so the file stays readable too.
_LIBRARY_LEVELS: dict[str, int] = {
    "web3": logging.WARNING,
    "urllib3": logging.WARNING,
    "aiohttp": logging.WARNING,
}


def console_threshold(logger_name: str) -> int:
    for prefix, level in _CONSOLE_THRESHOLDS:
        if logger_name.startswith(prefix):
            return level
    return logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def _handler(handler: logging.Handler, level: int, fmt: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(fmt)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/ledger-tasks",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Replace the root logger's handlers with the console + file pair.

    Must run before the first record is emitted; records logged earlier go to
    whatever handlers were there (usually none). Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for old in list(root.handlers):
        root.removeHandler(old)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = _handler(logging.StreamHandler(sys.stderr), console_level, fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)
    root.addHandler(_handler(logging.FileHandler(str(log_file), encoding="utf-8"), file_level, fmt))

    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    # warnings.warn(...) -> "py.warnings" logger
    logging.captureWarnings(True)
    return log_file
