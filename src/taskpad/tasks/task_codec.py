# src/taskpad/tasks/task_codec.py

"""
Wire format for tasks.

The persisted snapshot, JSON export and JSON import all share one shape:
a JSON array of records with camelCase keys (id, title, description,
completed, priority, category, dueDate, createdAt, createdBy, photos,
timeSpent, tags).

Decoding is schema-validating and never raises for bad input: it returns a
DecodeResult carrying either the typed task list or the reason for failure.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from .task_models import Priority, Task


class TaskDecodeError(ValueError):
    """A single record does not match the task schema."""


@dataclass(frozen=True, slots=True)
class DecodeResult:
    ok: bool
    tasks: list[Task] = field(default_factory=list)
    reason: str = ""

    @staticmethod
    def success(tasks: list[Task]) -> DecodeResult:
        return DecodeResult(ok=True, tasks=tasks)

    @staticmethod
    def failure(reason: str) -> DecodeResult:
        return DecodeResult(ok=False, reason=reason)


# ---- timestamps ----


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def parse_due_date(raw: str) -> date:
    """Accept a plain date or a full ISO datetime (truncated to its date)."""
    raw = raw.strip()
    if len(raw) == 10:
        return date.fromisoformat(raw)
    return datetime.fromisoformat(raw).date()


# ---- encode ----


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "completed": task.completed,
        "priority": task.priority.value,
        "category": task.category,
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "createdAt": format_timestamp(task.created_at),
        "createdBy": task.created_by,
        "photos": list(task.photos),
        "timeSpent": task.time_spent,
        "tags": list(task.tags),
    }


def encode_tasks(tasks: list[Task], *, indent: int | None = None) -> str:
    return json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False, indent=indent)


# ---- decode ----


def _str_field(raw: dict[str, Any], key: str, default: str | None = None) -> str:
    val = raw.get(key, default)
    if val is None and default is not None:
        return default
    if not isinstance(val, str):
        raise TaskDecodeError(f"'{key}' must be a string")
    return val


def _str_list(raw: dict[str, Any], key: str) -> tuple[str, ...]:
    val = raw.get(key)
    if val is None:
        return ()
    if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
        raise TaskDecodeError(f"'{key}' must be a list of strings")
    return tuple(val)


def task_from_dict(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise TaskDecodeError("task record must be an object")

    raw_id = raw.get("id")
    # Legacy snapshots may carry numeric ids; bool is an int subclass and is not an id.
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)
    if not isinstance(raw_id, str) or not raw_id:
        raise TaskDecodeError("'id' must be a non-empty string")

    title = _str_field(raw, "title")
    if not title.strip():
        raise TaskDecodeError(f"task {raw_id}: 'title' must not be empty")

    completed = raw.get("completed", False)
    if not isinstance(completed, bool):
        raise TaskDecodeError(f"task {raw_id}: 'completed' must be a boolean")

    try:
        priority = Priority(raw.get("priority", Priority.MEDIUM.value))
    except ValueError as e:
        raise TaskDecodeError(f"task {raw_id}: unknown priority {raw.get('priority')!r}") from e

    due_raw = raw.get("dueDate")
    due_date: date | None = None
    if due_raw not in (None, ""):
        if not isinstance(due_raw, str):
            raise TaskDecodeError(f"task {raw_id}: 'dueDate' must be a string")
        try:
            due_date = parse_due_date(due_raw)
        except ValueError as e:
            raise TaskDecodeError(f"task {raw_id}: bad dueDate {due_raw!r}") from e

    created_raw = _str_field(raw, "createdAt")
    try:
        created_at = parse_timestamp(created_raw)
    except ValueError as e:
        raise TaskDecodeError(f"task {raw_id}: bad createdAt {created_raw!r}") from e

    time_spent = raw.get("timeSpent", 0)
    if isinstance(time_spent, float) and time_spent.is_integer():
        time_spent = int(time_spent)
    if not isinstance(time_spent, int) or isinstance(time_spent, bool) or time_spent < 0:
        raise TaskDecodeError(f"task {raw_id}: 'timeSpent' must be a non-negative integer")

    return Task(
        id=raw_id,
        title=title,
        created_at=created_at,
        description=_str_field(raw, "description", ""),
        completed=completed,
        priority=priority,
        category=_str_field(raw, "category", ""),
        due_date=due_date,
        created_by=_str_field(raw, "createdBy", ""),
        photos=_str_list(raw, "photos"),
        time_spent=time_spent,
        tags=_str_list(raw, "tags"),
    )


def decode_task_records(data: Any) -> DecodeResult:
    if not isinstance(data, list):
        return DecodeResult.failure("expected a JSON array of tasks")
    tasks: list[Task] = []
    for i, raw in enumerate(data):
        try:
            tasks.append(task_from_dict(raw))
        except TaskDecodeError as e:
            return DecodeResult.failure(f"record {i}: {e}")
    return DecodeResult.success(tasks)


def decode_tasks(text: str) -> DecodeResult:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        return DecodeResult.failure(f"invalid JSON: {e}")
    return decode_task_records(data)
