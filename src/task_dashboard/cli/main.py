# src/task_dashboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs startup (theme, then tasks) and
hands the terminal to the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..logging_setup import setup_logging
from ..ui.render import render_notice, render_progress, render_task_list
from .console import run_console_loop

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s... (log file: %s)", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    startup = state.dashboard.request_initialize()

    out = state.presenter
    out.write(out.paint(settings.app_name, "accent"))
    for sig in startup.signals:
        out.write(render_notice(sig, out))
    out.write(render_task_list(startup.tasks, out))
    out.write(render_progress(startup.progress, out))

    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
