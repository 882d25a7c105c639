# src/taskpad/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass(frozen=True, slots=True)
class Task:
    """
    A single to-do item.

    Tasks are immutable: every mutation in TaskStore produces a replacement
    (dataclasses.replace) that carries the same id and created_at.
    """

    id: str
    title: str
    created_at: datetime

    description: str = ""
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: str = ""
    due_date: date | None = None
    created_by: str = ""

    photos: tuple[str, ...] = ()
    time_spent: int = 0  # minutes
    tags: tuple[str, ...] = ()

    def is_overdue(self, now: datetime) -> bool:
        """Due date strictly before `now` (at start of day) and not completed."""
        if self.completed or self.due_date is None:
            return False
        due_at = datetime(
            self.due_date.year, self.due_date.month, self.due_date.day, tzinfo=now.tzinfo
        )
        return due_at < now

    def days_overdue(self, now: datetime) -> int:
        if self.due_date is None:
            return 0
        return max(0, (now.date() - self.due_date).days)


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Everything a new task needs except the store-assigned id and created_at."""

    title: str
    description: str = ""
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: str = ""
    due_date: date | None = None
    created_by: str = ""
    photos: tuple[str, ...] = ()
    time_spent: int = 0
    tags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TaskTemplate:
    name: str
    description: str
    priority: Priority
    category: str
    tags: tuple[str, ...]
    estimated_time: int  # minutes


def unique_tags(tags: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Strip, drop empties and duplicates; first occurrence wins."""
    out: list[str] = []
    for tag in tags:
        t = tag.strip()
        if t and t not in out:
            out.append(t)
    return tuple(out)
