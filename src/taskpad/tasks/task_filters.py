# src/taskpad/tasks/task_filters.py

"""
View-list derivation: filter + sort over the full task list.

Everything here is pure: inputs are never mutated, a new list is returned.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum

from .task_models import PRIORITY_RANK, Priority, Task

ALL = "all"


class StatusFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class SortKey(StrEnum):
    CREATED_AT = "createdAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    TIME_SPENT = "timeSpent"

    @classmethod
    def parse(cls, raw: str) -> SortKey:
        """Accept the wire names and their snake_case spellings."""
        key = raw.strip().replace("_", "").lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"unknown sort key: {raw!r}")


@dataclass(frozen=True, slots=True)
class TaskFilter:
    search_term: str = ""
    status: StatusFilter = StatusFilter.ALL
    priority: str = ALL  # "all" or a Priority value
    category: str = ALL  # "all" or an exact category
    sort_key: SortKey = SortKey.CREATED_AT

    def with_changes(self, **changes: object) -> TaskFilter:
        return replace(self, **changes)  # type: ignore[arg-type]


# ---- predicates ----


def matches_search(task: Task, search_term: str) -> bool:
    if search_term == "":
        return True
    needle = search_term.lower()
    return (
        needle in task.title.lower()
        or needle in task.description.lower()
        or any(needle in tag.lower() for tag in task.tags)
    )


def matches_status(task: Task, status: StatusFilter) -> bool:
    if status == StatusFilter.COMPLETED:
        return task.completed
    if status == StatusFilter.PENDING:
        return not task.completed
    return True


def matches_priority(task: Task, priority: str) -> bool:
    return priority == ALL or task.priority == priority


def matches_category(task: Task, category: str) -> bool:
    return category == ALL or task.category == category


def matches(task: Task, task_filter: TaskFilter) -> bool:
    return (
        matches_search(task, task_filter.search_term)
        and matches_status(task, task_filter.status)
        and matches_priority(task, task_filter.priority)
        and matches_category(task, task_filter.category)
    )


# ---- sorting ----


def sort_tasks(tasks: Iterable[Task], sort_key: SortKey) -> list[Task]:
    """Stable sort; ties keep their incoming order."""
    if sort_key == SortKey.DUE_DATE:
        # Undated tasks go last.
        return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or date.min))
    if sort_key == SortKey.PRIORITY:
        return sorted(tasks, key=lambda t: PRIORITY_RANK[Priority(t.priority)], reverse=True)
    if sort_key == SortKey.TIME_SPENT:
        return sorted(tasks, key=lambda t: t.time_spent, reverse=True)
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


def apply_filter(tasks: Iterable[Task], task_filter: TaskFilter) -> list[Task]:
    """The view list: tasks passing every predicate, in sort order."""
    return sort_tasks((t for t in tasks if matches(t, task_filter)), task_filter.sort_key)


def derive_categories(tasks: Iterable[Task]) -> list[str]:
    """Distinct non-empty categories in order of first appearance."""
    seen: dict[str, None] = {}
    for task in tasks:
        if task.category:
            seen.setdefault(task.category, None)
    return list(seen)
