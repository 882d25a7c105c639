# src/taskpad/tasks/task_analytics.py

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .task_models import Task

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True, slots=True)
class TaskStatistics:
    total: int
    completed: int
    pending: int
    completion_rate: float  # percent, 0..100
    total_time_spent: int  # minutes
    avg_time_per_task: float  # minutes

    @property
    def total_hours(self) -> int:
        return math.floor(self.total_time_spent / 60 + 0.5)


def compute_statistics(tasks: Sequence[Task]) -> TaskStatistics:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    time_spent = sum(t.time_spent for t in tasks)
    return TaskStatistics(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_rate=(completed / total) * 100 if total else 0.0,
        total_time_spent=time_spent,
        avg_time_per_task=time_spent / total if total else 0.0,
    )


def category_breakdown(tasks: Sequence[Task]) -> dict[str, int]:
    out: dict[str, int] = {}
    for task in tasks:
        key = task.category or UNCATEGORIZED
        out[key] = out.get(key, 0) + 1
    return out


def priority_breakdown(tasks: Sequence[Task]) -> dict[str, int]:
    out: dict[str, int] = {}
    for task in tasks:
        out[task.priority.value] = out.get(task.priority.value, 0) + 1
    return out


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"
