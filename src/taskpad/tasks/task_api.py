# src/taskpad/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..core.state import AppState
from .task_export import TaskImportError, export_csv, export_filename, export_json, parse_import
from .task_filters import apply_filter, derive_categories
from .task_models import Priority, Task, TaskDraft, TaskTemplate, unique_tags
from .task_notifications import Notification
from .task_scheduler import local_now, run_overdue_check
from .task_templates import draft_from_template
from .task_timer import TaskTimer

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"title", "description", "completed", "priority", "category", "due_date", "created_by"}
)


def _created_by(state: AppState, created_by: str | None) -> str:
    if created_by:
        return created_by
    return str(getattr(state.settings, "created_by", "") or "You")


# ---- create ----


def create_task(
    state: AppState,
    *,
    title: str,
    description: str = "",
    priority: Priority = Priority.MEDIUM,
    category: str = "",
    due_date: date | None = None,
    tags: Iterable[str] = (),
    photos: Iterable[str] = (),
    created_by: str | None = None,
) -> Task | None:
    """
    Validate and add a task. Returns None (and adds nothing) for a blank title.
    """
    title = (title or "").strip()
    if not title:
        logger.debug("create_task rejected: empty title")
        return None

    draft = TaskDraft(
        title=title,
        description=description.strip(),
        priority=priority,
        category=category.strip(),
        due_date=due_date,
        created_by=_created_by(state, created_by),
        photos=tuple(photos),
        tags=unique_tags(list(tags)),
    )
    task = state.task_store.add(draft)
    state.notifier.task_added(task)
    return task


def create_from_template(state: AppState, template: TaskTemplate) -> Task:
    task = state.task_store.add(draft_from_template(template, created_by=_created_by(state, None)))
    state.notifier.template_used(task)
    logger.info("Task %s created from template %r", task.id, template.name)
    return task


# ---- edit ----


def _apply_edit(state: AppState, task: Task) -> Task | None:
    if not state.task_store.update(task):
        return None
    state.notifier.task_updated(task)
    return task


def edit_task(state: AppState, task_id: str, **changes: Any) -> Task | None:
    """
    Replace selected fields of a task, keeping id and created_at.

    Returns None for an unknown id or a blank title.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"fields cannot be edited: {', '.join(sorted(unknown))}")

    task = state.task_store.get(task_id)
    if task is None:
        return None

    if "title" in changes:
        changes["title"] = str(changes["title"] or "").strip()
        if not changes["title"]:
            return None
    if "priority" in changes:
        changes["priority"] = Priority(changes["priority"])

    return _apply_edit(state, replace(task, **changes))


def add_tag(state: AppState, task_id: str, tag: str) -> Task | None:
    task = state.task_store.get(task_id)
    tag = tag.strip()
    if task is None or not tag:
        return None
    if tag in task.tags:
        return task
    return _apply_edit(state, replace(task, tags=(*task.tags, tag)))


def remove_tag(state: AppState, task_id: str, tag: str) -> Task | None:
    task = state.task_store.get(task_id)
    if task is None or tag not in task.tags:
        return None
    return _apply_edit(state, replace(task, tags=tuple(t for t in task.tags if t != tag)))


def attach_photo(state: AppState, task_id: str, photo_ref: str) -> Task | None:
    task = state.task_store.get(task_id)
    if task is None or not photo_ref:
        return None
    return _apply_edit(state, replace(task, photos=(*task.photos, photo_ref)))


def remove_photo(state: AppState, task_id: str, index: int) -> Task | None:
    task = state.task_store.get(task_id)
    if task is None or not 0 <= index < len(task.photos):
        return None
    photos = task.photos[:index] + task.photos[index + 1 :]
    return _apply_edit(state, replace(task, photos=photos))


# ---- completion / deletion ----


def toggle_task(state: AppState, task_id: str) -> Task | None:
    task = state.task_store.toggle_completion(task_id)
    # Announce false -> true only.
    if task is not None and task.completed:
        state.notifier.task_completed(task)
    return task


def remove_task(state: AppState, task_id: str) -> bool:
    task = state.task_store.get(task_id)
    if not state.task_store.delete(task_id):
        return False
    state.timers.pop(task_id, None)
    if task is not None:
        state.notifier.task_deleted(task)
    return True


def bulk_delete(state: AppState) -> int:
    """Delete the selected tasks and discard their running timers."""
    for task_id in state.task_store.selected_ids:
        state.timers.pop(task_id, None)
    return state.task_store.bulk_delete()


# ---- time tracking ----


def add_time(state: AppState, task_id: str, minutes: int) -> Task | None:
    if minutes < 1:
        return None
    return state.task_store.update_time(task_id, minutes)


def start_timer(state: AppState, task_id: str) -> bool:
    if task_id not in state.task_store:
        return False
    timer = state.timers.setdefault(task_id, TaskTimer())
    timer.start()
    return True


def stop_timer(state: AppState, task_id: str) -> int:
    """Stop a running timer; returns the minutes credited to the task."""
    timer = state.timers.pop(task_id, None)
    if timer is None or not timer.running:
        return 0
    minutes = timer.stop()
    if add_time(state, task_id, minutes) is None:
        return 0
    return minutes


# ---- view ----


def view_list(state: AppState) -> list[Task]:
    return apply_filter(state.task_store.tasks, state.view)


def categories(state: AppState) -> list[str]:
    return derive_categories(state.task_store.tasks)


# ---- import / export ----


def import_tasks_text(state: AppState, text: str) -> int:
    tasks = parse_import(text)
    return state.task_store.import_tasks(tasks)


def import_tasks_file(state: AppState, path: str | Path) -> int:
    try:
        text = Path(path).expanduser().read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TaskImportError(f"cannot read {path}: {e}") from e
    return import_tasks_text(state, text)


def export_tasks_file(
    state: AppState,
    kind: str,
    *,
    directory: str | Path | None = None,
    today: date | None = None,
) -> Path:
    kind = kind.lower()
    if kind not in ("json", "csv"):
        raise ValueError(f"unknown export format: {kind}")

    tasks = state.task_store.tasks
    content = export_json(tasks) if kind == "json" else export_csv(tasks)

    target_dir = Path(directory or getattr(state.settings, "export_dir", "."))
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(kind, today or date.today())
    path.write_text(content, "utf-8")
    logger.info("Exported %d tasks to %s", len(tasks), path)
    return path


# ---- notifications / preferences ----


def check_overdue(state: AppState, now: datetime | None = None) -> list[Notification]:
    return run_overdue_check(
        state.overdue_policy, state.task_store.tasks, state.notifier, now or local_now()
    )


def set_dark_mode(state: AppState, enabled: bool) -> None:
    state.dark_mode = bool(enabled)
    state.preferences.set_dark_mode(state.dark_mode)
