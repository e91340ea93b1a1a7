# src/task_dashboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

APP_LOGGER = "task_dashboard"
LOG_FILE_NAME = "task_dashboard.log"

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Floors applied on the console only, by logger-name prefix. First match wins.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    # Every get/put re-checks the backend, so storage logs a lot.
    (f"{APP_LOGGER}.storage.", logging.WARNING),
    (f"{APP_LOGGER}.", logging.NOTSET),
    ("py.warnings", logging.ERROR),
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    The console shares stderr with prompts and the task list, so it only shows
    what a user can act on. Records from loggers outside the app are dropped
    below ERROR. The log file is not filtered.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, floor in _CONSOLE_FLOORS:
            if record.name.startswith(prefix):
                return record.levelno >= floor
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/task_dashboard",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Point the root logger at two handlers and return the log file path.

    stderr gets ``console_level`` and above through the noise filter; the file
    under ``log_dir`` gets everything from ``file_level``. Calling it again
    replaces the handlers instead of stacking new ones.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # warnings.warn() lands on the "py.warnings" logger.
    logging.captureWarnings(True)
    return log_file
