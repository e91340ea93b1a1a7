# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from task_dashboard.logging_setup import LOG_FILE_NAME, _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("task_dashboard.tasks.task_store", logging.DEBUG, True),
        ("task_dashboard.storage.kv_store", logging.INFO, False),
        ("task_dashboard.storage.kv_store", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("py.warnings", logging.ERROR, True),
        ("dotenv.main", logging.WARNING, False),
        ("dotenv.main", logging.ERROR, True),
        ("task_dashboardish", logging.WARNING, False),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_file_and_replaces_handlers(
    tmp_path: Path, restore_root_logger: logging.Logger
) -> None:
    log_dir = tmp_path / "logs"

    setup_logging(log_dir=log_dir)
    log_file = setup_logging(log_dir=log_dir)

    assert log_file == log_dir / LOG_FILE_NAME
    assert len(restore_root_logger.handlers) == 2

    logging.getLogger("task_dashboard.storage.kv_store").debug("quiet on console")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert "quiet on console" in log_file.read_text(encoding="utf-8")
