# src/task_dashboard/cli/console.py

from __future__ import annotations

import logging

from ..core.state import AppState
from .commands import registry as command_registry

logger = logging.getLogger(__name__)

PROMPT = "tasks> "


def ask_yes_no(prompt: str) -> bool:
    """Blocking y/N question; anything but yes (or EOF) means no."""
    try:
        answer = input(f"{prompt} [y/N] ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")


def run_console_loop(state: AppState) -> None:
    logger.info("Console started.")
    state.confirm = ask_yes_no
    out = state.presenter

    out.write("Type /help for commands. Use /exit to quit.")

    def emit(text: str) -> None:
        # Immediate feedback for operations that touch storage more than once
        out.write(out.paint(text, "muted"))

    while True:
        try:
            user_input = input(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            out.write("")
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = out.paint("Something went wrong. Please try again.", "error")

        if reply is None:
            reply = "Commands start with '/'. Try /add Work 09:30 Write report, or /help."

        out.write(reply)

    logger.info("Console finished.")
