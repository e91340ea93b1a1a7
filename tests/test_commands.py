# tests/test_commands.py

from __future__ import annotations

from task_dashboard.cli.commands import CommandRegistry, registry
from task_dashboard.storage.backends import QuotaExceededError
from task_dashboard.tasks.task_store import DEFAULT_TASKS_KEY
from task_dashboard.themes.theme_models import ThemeName


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, "/a x y") == "h2:x,y"
    assert reg.handle(state, "/BEE", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_help_lists_commands(state) -> None:
    reply = registry.handle(state, "/help") or ""
    for name in ("/add", "/done", "/delete", "/theme", "/status", "/exit"):
        assert name in reply


def test_add_with_time_and_list(state) -> None:
    reply = registry.handle(state, "/add work 18:30 Read the paper") or ""

    assert "Task added successfully!" in reply
    assert "Read the paper (Work) 6:30 PM" in reply
    assert "Progress [" in reply and "0%" in reply
    assert state.presenter.form == {}


def test_failed_add_keeps_form_for_retry(state) -> None:
    reply = registry.handle(state, "/add Hobby Paint the fence") or ""

    assert "Please select a category" in reply
    assert state.presenter.form["name"] == "Paint the fence"

    state.presenter.form["category"] = "Personal"
    reply = registry.handle(state, "/add") or ""
    assert "Task added successfully!" in reply
    assert len(state.dashboard.task_store) == 1


def test_add_without_args_or_form_shows_usage(state) -> None:
    assert "Usage" in (registry.handle(state, "/add") or "")


def test_done_by_number_and_progress(state) -> None:
    registry.handle(state, "/add Work One")
    registry.handle(state, "/add Study Two")

    reply = registry.handle(state, "/done 1") or ""
    assert "[x] One" in reply
    assert "50%" in reply

    assert "(1/2 done)" in (registry.handle(state, "/progress") or "")
    assert "No task" in (registry.handle(state, "/done 9") or "")


def test_delete_asks_for_confirmation(state) -> None:
    registry.handle(state, "/add Work Keep")
    prompts: list[str] = []

    def say_no(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    state.confirm = say_no
    assert registry.handle(state, "/delete 1") == "Deletion cancelled."
    assert prompts == ['Are you sure you want to delete the task "Keep"?']
    assert len(state.dashboard.task_store) == 1

    state.confirm = lambda _prompt: True
    reply = registry.handle(state, "/delete 1") or ""
    assert 'Task "Keep" deleted successfully' in reply
    assert len(state.dashboard.task_store) == 0


def test_delete_with_yes_flag_and_failed_write(state, backend) -> None:
    registry.handle(state, "/add Work Stay")
    backend.fail_writes[DEFAULT_TASKS_KEY] = QuotaExceededError("full")

    reply = registry.handle(state, "/delete 1 -y") or ""

    assert "The task has been restored" in reply
    assert len(state.dashboard.task_store) == 1


def test_theme_commands(state) -> None:
    state.dashboard.request_initialize()

    assert "Light Theme" in (registry.handle(state, "/theme") or "")
    assert "Theme changed to Dark Theme" in (registry.handle(state, "/theme dark") or "")
    assert "already active" in (registry.handle(state, "/theme dark") or "")

    reply = registry.handle(state, "/theme sparkly") or ""
    assert "Invalid theme selected" in reply
    assert state.dashboard.theme_manager.get_current_theme() is ThemeName.WHITE

    listing = registry.handle(state, "/themes") or ""
    assert " * white" in listing
    assert "professional" in listing

    state.dashboard.select_theme("student")
    assert "Current theme: Light Theme" in (registry.handle(state, "/theme reset") or "")


def test_theme_switch_works_after_fallback_styling(state, presenter) -> None:
    state.dashboard.request_initialize()
    presenter.fail_themes = {ThemeName.DARK, ThemeName.WHITE}

    assert "Theme unchanged" in (registry.handle(state, "/theme dark") or "")
    assert "(fallback styling)" in (registry.handle(state, "/status") or "")

    presenter.fail_themes = set()
    assert "Theme changed to" in (registry.handle(state, "/theme student") or "")
    assert "(fallback styling)" not in (registry.handle(state, "/status") or "")


def test_status_and_storage(state, backend) -> None:
    state.dashboard.request_initialize()
    registry.handle(state, "/add Work a")

    status = registry.handle(state, "/status") or ""
    assert "Theme: white" in status
    assert "Storage: available" in status
    assert "Tasks: 1" in status

    assert "Storage available. 1 tasks" in (registry.handle(state, "/storage") or "")

    backend.set_item(DEFAULT_TASKS_KEY, "{oops")
    notes: list[str] = []
    reply = registry.handle(state, "/storage recover", emit=notes.append) or ""
    assert notes == ["Attempting storage recovery..."]
    assert "Corrupted task data was cleared" in reply
    assert backend.raw(DEFAULT_TASKS_KEY) is None


def test_storage_clear_and_dismiss(state, backend) -> None:
    registry.handle(state, "/add Work a")

    assert registry.handle(state, "/storage clear") == "Clear cancelled."
    assert backend.raw(DEFAULT_TASKS_KEY) is not None

    assert registry.handle(state, "/storage clear -y") == "Saved task data removed."
    assert backend.raw(DEFAULT_TASKS_KEY) is None

    assert registry.handle(state, "/dismiss") == "No notices to dismiss."
