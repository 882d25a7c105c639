# src/taskpad/tasks/task_templates.py

from __future__ import annotations

from collections.abc import Sequence

from .task_models import Priority, TaskDraft, TaskTemplate

DEFAULT_TEMPLATES: tuple[TaskTemplate, ...] = (
    TaskTemplate(
        name="Daily Standup",
        description="Prepare for daily team standup meeting",
        priority=Priority.MEDIUM,
        category="Work",
        tags=("meeting", "daily"),
        estimated_time=15,
    ),
    TaskTemplate(
        name="Code Review",
        description="Review pull requests and provide feedback",
        priority=Priority.HIGH,
        category="Work",
        tags=("development", "review"),
        estimated_time=30,
    ),
    TaskTemplate(
        name="Grocery Shopping",
        description="Buy weekly groceries",
        priority=Priority.LOW,
        category="Personal",
        tags=("shopping", "weekly"),
        estimated_time=60,
    ),
    TaskTemplate(
        name="Exercise Session",
        description="Complete workout routine",
        priority=Priority.MEDIUM,
        category="Health",
        tags=("fitness", "routine"),
        estimated_time=45,
    ),
)


def draft_from_template(template: TaskTemplate, *, created_by: str) -> TaskDraft:
    # estimated_time is shown next to the template only; new tasks start at 0 minutes.
    return TaskDraft(
        title=template.name,
        description=template.description,
        completed=False,
        priority=template.priority,
        category=template.category,
        created_by=created_by,
        photos=(),
        time_spent=0,
        tags=tuple(template.tags),
    )


def find_template(templates: Sequence[TaskTemplate], key: str) -> TaskTemplate | None:
    """Look up by 1-based number or case-insensitive name."""
    key = key.strip()
    if key.isdecimal():
        n = int(key)
        return templates[n - 1] if 1 <= n <= len(templates) else None
    lowered = key.lower()
    for template in templates:
        if template.name.lower() == lowered:
            return template
    return None
