# tests/test_commands.py

from __future__ import annotations

import json
from datetime import date, timedelta

from taskpad.cli.commands import CommandRegistry, registry
from taskpad.tasks.task_export import IMPORT_ERROR_MESSAGE


def run(state, line: str) -> str:
    return registry.handle(state, line) or ""


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/bee y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")
    assert "Cannot parse" in (reg.handle(state, '/add "unterminated') or "")


def test_help_lists_commands(state) -> None:
    out = run(state, "/help")
    assert "/add" in out
    assert "/bulk" in out


def test_add_list_and_show(state) -> None:
    out = run(state, '/add "Buy milk" --priority high --category Home --tags a,b --due 2030-01-02')
    assert out.startswith("Task added: Buy milk [high]")

    listing = run(state, "/list")
    assert "Showing 1 of 1 tasks" in listing
    assert "Buy milk (!!!)" in listing
    assert "@Home" in listing
    assert "#a #b" in listing

    details = run(state, "/show 1")
    assert "priority: high" in details
    assert "due: 2030-01-02" in details


def test_add_rejects_empty_title_and_bad_options(state) -> None:
    assert run(state, "/add").startswith("Task title cannot be empty")
    assert run(state, "/add x --priority urgent").startswith("Invalid option")
    assert run(state, "/add x --due tomorrow").startswith("Invalid option")
    assert len(state.task_store) == 0


def test_list_when_empty(state) -> None:
    assert run(state, "/list") == "No tasks yet. Use /add to create one."


def test_done_edit_delete_by_position(state) -> None:
    run(state, "/add First")
    run(state, "/add Second")

    assert run(state, "/done 1") == "Task completed: Second"
    assert run(state, "/done 1") == "Task reopened: Second"
    assert run(state, "/edit 2 title=Renamed priority=low") == "Task updated: Renamed"
    assert run(state, "/edit 2 color=red").startswith("Cannot edit")
    assert run(state, "/delete 2") == "Task deleted: Renamed"
    assert run(state, "/delete 9") == "Task not found: 9"
    assert [t.title for t in state.task_store.tasks] == ["Second"]


def test_time_and_tags(state) -> None:
    run(state, "/add Focus")
    assert run(state, "/time 1 5").startswith("Time logged")
    assert run(state, "/time 1 10") == "Time logged: Focus now 15m"
    assert run(state, "/time 1 0") == "Minutes must be at least 1."
    assert run(state, "/tag 1 add deep") == "Tags: deep"
    assert run(state, "/tag 1 remove deep") == "Tags: -"


def test_select_bulk_complete(state) -> None:
    for title in ("a", "b", "c"):
        run(state, f"/add {title}")

    assert run(state, "/bulk complete") == "Nothing selected. Use /select first."
    assert run(state, "/select 1 3 99") == "Selected: 2"
    assert run(state, "/bulk complete") == "Bulk complete: 2 task(s)."
    assert state.task_store.selected_ids == []
    assert [t.completed for t in state.task_store.tasks] == [True, False, True]


def test_selectall_toggles(state) -> None:
    run(state, "/add a")
    run(state, "/add b")
    assert run(state, "/selectall") == "Selected: 2"
    assert run(state, "/selectall") == "Selection cleared."


def test_move_uses_drag_and_drop(state) -> None:
    for title in ("a", "b", "c"):
        run(state, f"/add {title}")
    # Store order is c, b, a (newest first).
    ids = [t.id for t in state.task_store.tasks]

    assert run(state, f"/move {ids[0]} {ids[2]}") == "Task moved."
    assert [t.title for t in state.task_store.tasks] == ["b", "a", "c"]
    assert state.task_store.dragged_id is None
    assert run(state, f"/move {ids[0]} {ids[0]}") == "Nothing moved."


def test_search_filter_sort(state) -> None:
    run(state, "/add Milk --category Home --priority low")
    run(state, "/add Report --category Work --priority high")

    run(state, "/search milk")
    assert "Showing 1 of 2" in run(state, "/list")

    run(state, "/search")
    run(state, "/filter category Work")
    assert "Report" in run(state, "/list")
    assert "Milk" not in run(state, "/list")

    assert run(state, "/filter priority urgent").startswith("Usage")
    assert run(state, "/filter reset") == "Filters reset."
    assert run(state, "/sort due_date") == "Sort: dueDate"
    assert run(state, "/sort name").startswith("Usage")
    assert run(state, "/categories") == "Categories: Work, Home"


def test_stats_and_templates(state) -> None:
    run(state, "/template 2")
    run(state, '/template "exercise session"')
    assert run(state, "/template 9").startswith("Template not found")

    stats = run(state, "/stats")
    assert "Total: 2" in stats
    assert "Work 1" in stats
    assert "Health 1" in stats
    assert "Code Review" in run(state, "/templates")


def test_export_then_import(state, tmp_path) -> None:
    run(state, "/add Keep")
    out = run(state, f"/export json {tmp_path}")
    assert out.startswith("Exported 1 tasks to")

    exported = tmp_path / f"tasks-{date.today().isoformat()}.json"
    assert json.loads(exported.read_text("utf-8"))[0]["title"] == "Keep"

    assert run(state, f"/import {exported}") == "Imported 1 task(s)."
    assert len(state.task_store) == 2


def test_import_failure_shows_fixed_message(state, tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("[{]", "utf-8")
    assert run(state, f"/import {bad}") == IMPORT_ERROR_MESSAGE
    assert len(state.task_store) == 0


def test_dark_and_notify(state, sink) -> None:
    assert run(state, "/dark on") == "Dark mode ON."
    assert state.dark_mode is True
    assert run(state, "/dark off") == "Dark mode OFF."

    assert run(state, "/notify off") == "Notifications disabled."
    assert sink.permission == "denied"
    assert run(state, "/notify on") == "Notifications enabled."


def test_check_emits_hint_when_notifications_off(state, sink) -> None:
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    run(state, f"/add Late --due {yesterday}")
    sink.permission = "denied"

    notes: list[str] = []
    out = registry.handle(state, "/check", emit=notes.append)
    assert out == "Overdue check: 1 new overdue task(s)."
    assert notes and "Notifications are off" in notes[0]
    assert registry.handle(state, "/check") == "Overdue check: 0 new overdue task(s)."


def test_import_of_deeply_nested_json_shows_fixed_message(state, tmp_path) -> None:
    deep = tmp_path / "deep.json"
    deep.write_text("[" * 100_000 + "]" * 100_000, "utf-8")
    assert run(state, f"/import {deep}") == IMPORT_ERROR_MESSAGE
    assert len(state.task_store) == 0


def test_non_ascii_digits_are_not_task_positions_or_minutes(state) -> None:
    run(state, "/add Focus")
    assert run(state, "/show ²") == "Task not found: ²"
    assert run(state, "/time 1 ²") == "Usage: /time <task> <minutes>"
    assert run(state, "/photo 1 remove ²") == "Photo number must be a positive integer."
    assert run(state, "/template ²").startswith("Template not found")


def test_bulk_delete_discards_running_timers(state) -> None:
    run(state, "/add a")
    run(state, "/add b")
    ids = [t.id for t in state.task_store.tasks]
    run(state, f"/timer start {ids[0]}")
    run(state, f"/timer start {ids[1]}")

    run(state, f"/select {ids[0]}")
    assert run(state, "/bulk delete") == "Bulk delete: 1 task(s)."
    assert list(state.timers) == [ids[1]]
