# src/task_dashboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable
from typing import cast

from ..core.dashboard import TaskResult, ThemeResult
from ..core.state import AppState
from ..tasks.task_models import Task
from ..ui.render import render_notice, render_progress, render_task_list, render_theme_list

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_TIME_ARG_RE = re.compile(r"^\d{1,2}:\d{2}$")
_YES_FLAGS = {"-y", "--yes"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """A task reference is its 1-based position in /list or its id."""
    tasks = state.dashboard.task_store.tasks
    if ref.isdigit():
        idx = int(ref) - 1
        return tasks[idx] if 0 <= idx < len(tasks) else None
    for task in tasks:
        if task.id == ref:
            return task
    return None


def _notices(state: AppState, result: TaskResult | ThemeResult) -> list[str]:
    return [render_notice(s, state.presenter) for s in result.signals]


def _board(state: AppState, result: TaskResult) -> str:
    return "\n".join(
        [
            render_task_list(result.tasks, state.presenter),
            render_progress(result.progress, state.presenter),
        ]
    )


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    store = state.dashboard.task_store
    return "\n".join(
        [
            render_task_list(store.tasks, state.presenter),
            render_progress(store.progress(), state.presenter),
        ]
    )


def cmd_progress(state: AppState, args: list[str]) -> str:
    store = state.dashboard.task_store
    return (
        f"{render_progress(store.progress(), state.presenter)} "
        f"({store.completed_count()}/{len(store)} done)"
    )


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <category> [HH:MM] <name...>  -> fill the form and submit it
    /add                               -> resubmit the form kept from a failed attempt
    """
    presenter = state.presenter
    if args:
        form: dict[str, str] = {"category": args[0]}
        rest = args[1:]
        if rest and _TIME_ARG_RE.match(rest[0]):
            form["time"] = rest[0]
            rest = rest[1:]
        form["name"] = " ".join(rest)
        presenter.form = form
        presenter.focused_field = "name"
    elif not presenter.form:
        return "Usage: /add <Work|Study|Personal> [HH:MM] <task name>"

    result = state.dashboard.submit_task(
        presenter.form.get("name"),
        presenter.form.get("category"),
        presenter.form.get("time"),
    )

    lines = _notices(state, result)
    if not result.ok:
        lines.append("Task not added. Fix the input and run /add again, or /add with new values.")
        return "\n".join(lines)

    presenter.form = {}
    presenter.focused_field = None
    lines.append(presenter.paint("Task added successfully!", "success"))
    lines.append(_board(state, result))
    return "\n".join(lines)


def cmd_done(state: AppState, args: list[str]) -> str:
    """/done <n|id> -> toggle completion."""
    if not args:
        return "Usage: /done <task number or id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /list to see task numbers."

    result = state.dashboard.toggle_task(task.id)
    lines = _notices(state, result)
    lines.append(_board(state, result))
    return "\n".join(lines)


def cmd_delete(state: AppState, args: list[str]) -> str:
    """/delete <n|id> [-y] -> delete after confirmation."""
    refs = [a for a in args if a not in _YES_FLAGS]
    if not refs:
        return "Usage: /delete <task number or id> [-y]"
    task = _resolve_task(state, refs[0])
    if task is None:
        return f"No task {refs[0]!r}. Use /list to see task numbers."

    confirmed = any(a in _YES_FLAGS for a in args) or state.confirm(
        f'Are you sure you want to delete the task "{task.name}"?'
    )
    logger.debug("Delete requested task=%s confirmed=%s", task.id, confirmed)
    if not confirmed:
        return "Deletion cancelled."

    result = state.dashboard.request_delete_task(task.id, confirmed=True)
    lines = _notices(state, result)
    if result.ok:
        lines.append(f'Task "{task.name}" deleted successfully')
    lines.append(_board(state, result))
    return "\n".join(lines)


def cmd_theme(state: AppState, args: list[str]) -> str:
    """
    /theme          -> show current theme
    /theme <name>   -> switch theme
    /theme reset    -> forget the saved preference and start over
    """
    manager = state.dashboard.theme_manager
    if not args:
        cfg = manager.get_current_theme_config()
        return f"Current theme: {cfg.display_name} ({cfg.name.value}). Use /themes to list."

    arg = args[0].lower()
    if arg == "reset":
        result = state.dashboard.reset_theme()
        lines = _notices(state, result)
        lines.append(f"Theme reset. Current theme: {result.definition.display_name}")
        return "\n".join(lines)

    result = state.dashboard.select_theme(arg)
    lines = _notices(state, result)
    if result.ok and result.previous is not result.current:
        lines.append(f"Theme changed to {result.definition.display_name}")
    elif result.ok:
        lines.append(f"{result.definition.display_name} is already active.")
    else:
        lines.append(f"Theme unchanged: {result.definition.display_name}")
    return "\n".join(lines)


def cmd_themes(state: AppState, args: list[str]) -> str:
    manager = state.dashboard.theme_manager
    return render_theme_list(
        manager.get_available_themes(), manager.get_current_theme(), state.presenter
    )


def cmd_status(state: AppState, args: list[str]) -> str:
    manager = state.dashboard.theme_manager
    status = manager.status()
    report = manager.validate_integrity()
    info = state.dashboard.task_store.storage_info()

    lines = [
        "Status:",
        f"  Theme: {status.current_theme.value} (stored: "
        f"{status.stored_theme.value if status.stored_theme else 'none'})",
        f"  Theme colors: {'ON' if status.style_variables_supported else 'OFF'}"
        f"{' (fallback styling)' if status.fallback_styling else ''}",
        f"  Storage: {'available' if info.available else info.reason or 'unavailable'}",
        f"  Tasks: {info.task_count} ({info.data_size_formatted})",
    ]
    for warning in report.warnings:
        lines.append(f"  warning: {warning}")
    for error in report.errors:
        lines.append(f"  error: {error}")
    if state.presenter.pinned:
        lines.append("Notices (/dismiss to clear):")
        lines.extend("  " + render_notice(s, state.presenter) for s in state.presenter.pinned)
    return "\n".join(lines)


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    n = state.presenter.dismiss()
    return f"Dismissed {n} notice(s)." if n else "No notices to dismiss."


def cmd_storage(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /storage          -> storage diagnostics
    /storage recover  -> clear an unreadable task record
    /storage clear    -> drop the saved task record (asks first)
    """
    store = state.dashboard.task_store
    if args and args[0].lower() == "recover":
        if emit:
            emit("Attempting storage recovery...")
        with state.dashboard.signals.collect() as raised:
            ok = store.recover()
        lines = [render_notice(s, state.presenter) for s in raised]
        lines.append("Storage recovery done." if ok else "Storage not available, cannot recover.")
        return "\n".join(lines)

    if args and args[0].lower() == "clear":
        confirmed = any(a in _YES_FLAGS for a in args[1:]) or state.confirm(
            "Remove saved tasks from storage? Tasks in this session are kept until the next change."
        )
        if not confirmed:
            return "Clear cancelled."
        store.clear()
        return "Saved task data removed."

    info = store.storage_info()
    if not info.available:
        return f"Storage unavailable: {info.reason}"
    return f"Storage available. {info.task_count} tasks, {info.data_size_formatted}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks and progress.", aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <Work|Study|Personal> [HH:MM] <name>."
)
registry.register("done", cmd_done, help_text="Toggle completion: /done <n|id>.", aliases=["toggle"])
registry.register(
    "delete", cmd_delete, help_text="Delete a task: /delete <n|id> [-y].", aliases=["rm"]
)
registry.register("progress", cmd_progress, help_text="Show completion percentage.")
registry.register("theme", cmd_theme, help_text="Show or switch theme: /theme <name> | reset.")
registry.register("themes", cmd_themes, help_text="List available themes.")
registry.register("status", cmd_status, help_text="Theme and storage diagnostics.")
registry.register("dismiss", cmd_dismiss, help_text="Clear pinned notices.")
registry.register("storage", cmd_storage, help_text="Storage info: /storage | recover | clear [-y].")
