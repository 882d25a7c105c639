# src/taskpad/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import date
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_analytics import (
    category_breakdown,
    compute_statistics,
    format_minutes,
    priority_breakdown,
)
from ..tasks.task_export import IMPORT_ERROR_MESSAGE, TaskImportError
from ..tasks.task_filters import ALL, SortKey, StatusFilter
from ..tasks.task_models import Priority, Task
from ..tasks.task_templates import DEFAULT_TEMPLATES, find_template

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
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
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----

PRIORITY_ICONS = {Priority.HIGH: "(!!!)", Priority.MEDIUM: "(!!)", Priority.LOW: "(!)"}


def _resolve_task_id(state: AppState, ref: str) -> str | None:
    """A full task id, or a 1-based position in the current view list."""
    if ref in state.task_store:
        return ref
    if ref.isdecimal():
        view = task_api.view_list(state)
        n = int(ref)
        if 1 <= n <= len(view):
            return view[n - 1].id
    return None


def _parse_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split "--key value" pairs from positional words."""
    words: list[str] = []
    opts: dict[str, str] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith("--") and len(arg) > 2:
            key = arg[2:].lower()
            value = args[i + 1] if i + 1 < len(args) else ""
            opts[key] = value
            i += 2
            continue
        words.append(arg)
        i += 1
    return words, opts


def _parse_date(raw: str) -> date | None:
    raw = raw.strip()
    return date.fromisoformat(raw) if raw else None


def _split_tags(raw: str) -> list[str]:
    return [t for t in (p.strip() for p in raw.replace(";", ",").split(",")) if t]


def format_task_line(task: Task, position: int, selected: bool = False) -> str:
    check = "x" if task.completed else " "
    mark = "*" if selected else " "
    parts = [f"{mark}{position:>3}. [{check}] {task.title} {PRIORITY_ICONS[task.priority]}"]
    if task.category:
        parts.append(f"@{task.category}")
    if task.due_date:
        parts.append(f"due {task.due_date.isoformat()}")
    if task.time_spent:
        parts.append(format_minutes(task.time_spent))
    if task.tags:
        parts.append(" ".join(f"#{t}" for t in task.tags))
    return "  ".join(parts)


def format_task_details(task: Task) -> str:
    lines = [
        f"{task.title}",
        f"  id: {task.id}",
        f"  status: {'completed' if task.completed else 'pending'}",
        f"  priority: {task.priority.value}",
        f"  category: {task.category or '-'}",
        f"  due: {task.due_date.isoformat() if task.due_date else '-'}",
        f"  created: {task.created_at.astimezone().strftime('%Y-%m-%d %H:%M')} by {task.created_by or '-'}",
        f"  time spent: {format_minutes(task.time_spent)}",
        f"  tags: {', '.join(task.tags) if task.tags else '-'}",
        f"  photos: {len(task.photos)}",
    ]
    if task.description:
        lines.insert(1, f"  {task.description}")
    return "\n".join(lines)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [--priority low|medium|high] [--category C] [--due YYYY-MM-DD]
                 [--tags a,b] [--desc "text"]
    """
    words, opts = _parse_options(args)
    try:
        priority = Priority(opts.get("priority", Priority.MEDIUM.value).lower())
        due_date = _parse_date(opts.get("due", ""))
    except ValueError as e:
        return f"Invalid option: {e}."

    task = task_api.create_task(
        state,
        title=" ".join(words),
        description=opts.get("desc", opts.get("description", "")),
        priority=priority,
        category=opts.get("category", ""),
        due_date=due_date,
        tags=_split_tags(opts.get("tags", "")),
    )
    if task is None:
        return "Task title cannot be empty. Usage: /add <title> [--priority ...]"
    return f"Task added: {task.title} [{task.priority.value}] (id {task.id})"


def cmd_list(state: AppState, args: list[str]) -> str:
    view = task_api.view_list(state)
    total = len(state.task_store)
    if not view:
        return "No tasks yet. Use /add to create one." if total == 0 else "No tasks match the current filters."

    selected = set(state.task_store.selected_ids)
    lines = [f"Showing {len(view)} of {total} tasks ({_describe_view(state)}):"]
    for i, task in enumerate(view, start=1):
        lines.append(format_task_line(task, i, task.id in selected))
    return "\n".join(lines)


def _describe_view(state: AppState) -> str:
    v = state.view
    parts = [f"status={v.status.value}", f"priority={v.priority}", f"category={v.category}"]
    if v.search_term:
        parts.append(f"search={v.search_term!r}")
    parts.append(f"sort={v.sort_key.value}")
    return ", ".join(parts)


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <task>"
    task_id = _resolve_task_id(state, args[0])
    task = state.task_store.get(task_id) if task_id else None
    if task is None:
        return f"Task not found: {args[0]}"
    return format_task_details(task)


_EDIT_ALIASES = {
    "title": "title",
    "desc": "description",
    "description": "description",
    "priority": "priority",
    "category": "category",
    "due": "due_date",
    "by": "created_by",
}


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <task> field=value ... (fields: title, desc, priority, category, due, by)"""
    if len(args) < 2:
        return "Usage: /edit <task> field=value ... (title, desc, priority, category, due, by)"
    task_id = _resolve_task_id(state, args[0])
    if task_id is None:
        return f"Task not found: {args[0]}"

    changes: dict[str, object] = {}
    for pair in args[1:]:
        name, sep, value = pair.partition("=")
        field_name = _EDIT_ALIASES.get(name.lower())
        if not sep or field_name is None:
            return f"Cannot edit {pair!r}. Use field=value with: {', '.join(_EDIT_ALIASES)}."
        try:
            if field_name == "due_date":
                changes[field_name] = _parse_date(value)
            elif field_name == "priority":
                changes[field_name] = Priority(value.lower())
            else:
                changes[field_name] = value
        except ValueError as e:
            return f"Invalid value for {name}: {e}."

    task = task_api.edit_task(state, task_id, **changes)
    if task is None:
        return "Task title cannot be empty."
    return f"Task updated: {task.title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <task>"
    task_id = _resolve_task_id(state, args[0])
    task = task_api.toggle_task(state, task_id) if task_id else None
    if task is None:
        return f"Task not found: {args[0]}"
    return f"Task {'completed' if task.completed else 'reopened'}: {task.title}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <task>"
    task_id = _resolve_task_id(state, args[0])
    task = state.task_store.get(task_id) if task_id else None
    if task is None or not task_api.remove_task(state, task.id):
        return f"Task not found: {args[0]}"
    return f"Task deleted: {task.title}"


def cmd_time(state: AppState, args: list[str]) -> str:
    if len(args) != 2 or not args[1].isdecimal():
        return "Usage: /time <task> <minutes>"
    task_id = _resolve_task_id(state, args[0])
    if task_id is None:
        return f"Task not found: {args[0]}"
    task = task_api.add_time(state, task_id, int(args[1]))
    if task is None:
        return "Minutes must be at least 1."
    return f"Time logged: {task.title} now {format_minutes(task.time_spent)}"


def cmd_timer(state: AppState, args: list[str]) -> str:
    if len(args) != 2 or args[0].lower() not in ("start", "stop"):
        return "Usage: /timer start <task> | /timer stop <task>"
    task_id = _resolve_task_id(state, args[1])
    if task_id is None:
        return f"Task not found: {args[1]}"

    if args[0].lower() == "start":
        task_api.start_timer(state, task_id)
        return "Timer started."

    minutes = task_api.stop_timer(state, task_id)
    if minutes == 0:
        return "Timer stopped (less than a minute, nothing logged)."
    return f"Timer stopped: {format_minutes(minutes)} logged."


def cmd_tag(state: AppState, args: list[str]) -> str:
    if len(args) != 3 or args[1].lower() not in ("add", "remove"):
        return "Usage: /tag <task> add|remove <tag>"
    task_id = _resolve_task_id(state, args[0])
    if task_id is None:
        return f"Task not found: {args[0]}"
    if args[1].lower() == "add":
        task = task_api.add_tag(state, task_id, args[2])
    else:
        task = task_api.remove_tag(state, task_id, args[2])
    if task is None:
        return f"Tag not changed: {args[2]}"
    return f"Tags: {', '.join(task.tags) if task.tags else '-'}"


def cmd_photo(state: AppState, args: list[str]) -> str:
    if len(args) != 3 or args[1].lower() not in ("add", "remove"):
        return "Usage: /photo <task> add <image-ref> | /photo <task> remove <number>"
    task_id = _resolve_task_id(state, args[0])
    if task_id is None:
        return f"Task not found: {args[0]}"
    if args[1].lower() == "add":
        task = task_api.attach_photo(state, task_id, args[2])
    else:
        if not args[2].isdecimal():
            return "Photo number must be a positive integer."
        task = task_api.remove_photo(state, task_id, int(args[2]) - 1)
    if task is None:
        return "Photo not changed."
    return f"Photos: {len(task.photos)}"


def cmd_select(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /select <task> [<task> ...]"
    for ref in args:
        task_id = _resolve_task_id(state, ref)
        if task_id is not None:
            state.task_store.select(task_id, True)
    return f"Selected: {len(state.task_store.selected_ids)}"


def cmd_unselect(state: AppState, args: list[str]) -> str:
    if not args:
        state.task_store.clear_selection()
        return "Selection cleared."
    for ref in args:
        task_id = _resolve_task_id(state, ref)
        if task_id is not None:
            state.task_store.select(task_id, False)
    return f"Selected: {len(state.task_store.selected_ids)}"


def cmd_selectall(state: AppState, args: list[str]) -> str:
    """Select every task in the view; if all already are, deselect."""
    view_ids = [t.id for t in task_api.view_list(state)]
    selected = state.task_store.selected_ids
    if view_ids and len(selected) == len(view_ids):
        state.task_store.clear_selection()
        return "Selection cleared."
    state.task_store.clear_selection()
    state.task_store.select_all(view_ids)
    return f"Selected: {len(state.task_store.selected_ids)}"


def cmd_bulk(state: AppState, args: list[str]) -> str:
    if len(args) != 1 or args[0].lower() not in ("delete", "complete", "uncomplete"):
        return "Usage: /bulk delete|complete|uncomplete"
    if not state.task_store.selected_ids:
        return "Nothing selected. Use /select first."
    action = args[0].lower()
    if action == "delete":
        n = task_api.bulk_delete(state)
    elif action == "complete":
        n = state.task_store.bulk_complete()
    else:
        n = state.task_store.bulk_uncomplete()
    return f"Bulk {action}: {n} task(s)."


def cmd_move(state: AppState, args: list[str]) -> str:
    """/move <task> <target>: drag <task> onto <target>'s position."""
    if len(args) != 2:
        return "Usage: /move <task> <target>"
    dragged = _resolve_task_id(state, args[0])
    target = _resolve_task_id(state, args[1])
    state.task_store.begin_drag(dragged or "")
    if not state.task_store.drop(target or ""):
        return "Nothing moved."
    return "Task moved."


def cmd_search(state: AppState, args: list[str]) -> str:
    state.view = state.view.with_changes(search_term=" ".join(args))
    return f"Search: {state.view.search_term!r}" if args else "Search cleared."


def cmd_filter(state: AppState, args: list[str]) -> str:
    usage = "Usage: /filter status all|completed|pending | priority all|low|medium|high | category all|<name> | reset"
    if args and args[0].lower() == "reset":
        state.view = state.view.with_changes(
            status=StatusFilter.ALL, priority=ALL, category=ALL, search_term=""
        )
        return "Filters reset."
    if len(args) < 2:
        return usage

    kind, value = args[0].lower(), " ".join(args[1:])
    try:
        if kind == "status":
            state.view = state.view.with_changes(status=StatusFilter(value.lower()))
        elif kind == "priority":
            value = value.lower()
            if value != ALL:
                Priority(value)
            state.view = state.view.with_changes(priority=value)
        elif kind == "category":
            state.view = state.view.with_changes(category=ALL if value.lower() == ALL else value)
        else:
            return usage
    except ValueError:
        return usage
    return f"Filter {kind} = {value}"


def cmd_sort(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /sort createdAt|dueDate|priority|timeSpent"
    try:
        key = SortKey.parse(args[0])
    except ValueError:
        return "Usage: /sort createdAt|dueDate|priority|timeSpent"
    state.view = state.view.with_changes(sort_key=key)
    return f"Sort: {key.value}"


def cmd_categories(state: AppState, args: list[str]) -> str:
    cats = task_api.categories(state)
    return "Categories: " + (", ".join(cats) if cats else "-")


def cmd_stats(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.tasks
    stats = compute_statistics(tasks)
    lines = [
        "Statistics:",
        f"  Total: {stats.total}  Completed: {stats.completed}  Pending: {stats.pending}",
        f"  Completion rate: {stats.completion_rate:.0f}%",
        f"  Time spent: {stats.total_hours}h ({format_minutes(stats.total_time_spent)}),"
        f" avg {stats.avg_time_per_task:.0f}m per task",
    ]
    cats = category_breakdown(tasks)
    if cats:
        lines.append("  By category: " + ", ".join(f"{k} {v}" for k, v in cats.items()))
    prios = priority_breakdown(tasks)
    if prios:
        lines.append("  By priority: " + ", ".join(f"{k} {v}" for k, v in prios.items()))
    return "\n".join(lines)


def cmd_templates(state: AppState, args: list[str]) -> str:
    lines = ["Templates:"]
    for i, t in enumerate(DEFAULT_TEMPLATES, start=1):
        lines.append(
            f"  {i}. {t.name} [{t.priority.value}] @{t.category} ~{t.estimated_time}m - {t.description}"
        )
    lines.append("Use /template <number|name> to create a task.")
    return "\n".join(lines)


def cmd_template(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /template <number|name>"
    template = find_template(DEFAULT_TEMPLATES, " ".join(args))
    if template is None:
        return f"Template not found: {' '.join(args)}. Use /templates to list them."
    task = task_api.create_from_template(state, template)
    return f"Task added from template: {task.title}"


def cmd_export(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() not in ("json", "csv"):
        return "Usage: /export json|csv [directory]"
    try:
        path = task_api.export_tasks_file(state, args[0], directory=args[1] if len(args) > 1 else None)
    except OSError as e:
        logger.exception("Export failed")
        return f"Export failed: {e}"
    return f"Exported {len(state.task_store)} tasks to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /import <file.json>"
    try:
        n = task_api.import_tasks_file(state, args[0])
    except TaskImportError as e:
        logger.info("Import failed: %s", e.reason)
        return IMPORT_ERROR_MESSAGE
    return f"Imported {n} task(s)."


def cmd_dark(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Dark mode is {'ON' if state.dark_mode else 'OFF'}. Use /dark on or /dark off."
    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        task_api.set_dark_mode(state, True)
        return "Dark mode ON."
    if arg in ("off", "0", "false", "no"):
        task_api.set_dark_mode(state, False)
        return "Dark mode OFF."
    return "Usage: /dark on | /dark off"


def cmd_notify(state: AppState, args: list[str]) -> str:
    sink = state.notifier.sink
    if not args:
        return f"Notifications: {sink.permission}. Use /notify on or /notify off."
    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes") and hasattr(sink, "request_permission"):
        sink.request_permission()
        return "Notifications enabled."
    if arg in ("off", "0", "false", "no") and hasattr(sink, "revoke_permission"):
        sink.revoke_permission()
        return "Notifications disabled."
    return "Usage: /notify on | /notify off"


def cmd_check(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit is not None and not state.notifier.enabled:
        emit("Notifications are off; overdue tasks are tracked but not shown.")
    sent = task_api.check_overdue(state)
    return f"Overdue check: {len(sent)} new overdue task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [--priority p] [--category c] [--due YYYY-MM-DD] [--tags a,b] [--desc text].",
    aliases=["new"],
)
registry.register("list", cmd_list, help_text="Show the filtered, sorted task list.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show task details: /show <task>.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <task> field=value ...")
registry.register("done", cmd_done, help_text="Toggle completion: /done <task>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <task>.", aliases=["rm"])
registry.register("time", cmd_time, help_text="Log minutes: /time <task> <minutes>.")
registry.register("timer", cmd_timer, help_text="Time tracking: /timer start|stop <task>.")
registry.register("tag", cmd_tag, help_text="Tags: /tag <task> add|remove <tag>.")
registry.register("photo", cmd_photo, help_text="Photos: /photo <task> add <ref> | remove <n>.")
registry.register("select", cmd_select, help_text="Select tasks for bulk actions.")
registry.register("unselect", cmd_unselect, help_text="Unselect tasks (no args clears the selection).")
registry.register("selectall", cmd_selectall, help_text="Select all tasks in view (again to deselect).")
registry.register("bulk", cmd_bulk, help_text="Bulk actions on the selection: delete|complete|uncomplete.")
registry.register("move", cmd_move, help_text="Reorder: /move <task> <target>.")
registry.register("search", cmd_search, help_text="Search title/description/tags (no args clears).")
registry.register("filter", cmd_filter, help_text="Filter by status, priority or category (or reset).")
registry.register("sort", cmd_sort, help_text="Sort by createdAt|dueDate|priority|timeSpent.")
registry.register("categories", cmd_categories, help_text="List categories in use.")
registry.register("stats", cmd_stats, help_text="Statistics and analytics.")
registry.register("templates", cmd_templates, help_text="List task templates.")
registry.register("template", cmd_template, help_text="Create a task from a template.")
registry.register("export", cmd_export, help_text="Export tasks: /export json|csv [directory].")
registry.register("import", cmd_import, help_text="Import tasks from a JSON file.")
registry.register("dark", cmd_dark, help_text="Display mode: /dark on | /dark off.")
registry.register("notify", cmd_notify, help_text="Notifications: /notify on | /notify off.")
registry.register("check", cmd_check, help_text="Run the overdue check now.")
