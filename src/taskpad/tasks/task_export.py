# src/taskpad/tasks/task_export.py

"""Export (JSON, CSV) and import (JSON) data contracts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from .task_codec import decode_tasks, encode_tasks, format_timestamp
from .task_models import Task

logger = logging.getLogger(__name__)

CSV_HEADERS = (
    "Title",
    "Description",
    "Priority",
    "Category",
    "Completed",
    "Due Date",
    "Time Spent (min)",
    "Tags",
    "Created At",
)

IMPORT_ERROR_MESSAGE = "Error importing file. Please make sure it's a valid JSON file."


class TaskImportError(ValueError):
    """The import payload is not a valid task list; nothing was imported."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def export_filename(kind: str, today: date) -> str:
    return f"tasks-{today.isoformat()}.{kind}"


def export_json(tasks: Sequence[Task]) -> str:
    return encode_tasks(list(tasks), indent=2)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def export_csv(tasks: Sequence[Task]) -> str:
    lines = [",".join(CSV_HEADERS)]
    for task in tasks:
        lines.append(
            ",".join(
                [
                    _quote(task.title),
                    _quote(task.description),
                    task.priority.value,
                    _quote(task.category),
                    "true" if task.completed else "false",
                    task.due_date.isoformat() if task.due_date else "",
                    str(task.time_spent),
                    _quote(";".join(task.tags)),
                    format_timestamp(task.created_at),
                ]
            )
        )
    return "\n".join(lines)


def parse_import(text: str) -> list[Task]:
    result = decode_tasks(text)
    if not result.ok:
        logger.info("Import rejected: %s", result.reason)
        raise TaskImportError(result.reason)
    return result.tasks
