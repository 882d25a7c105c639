# src/taskpad/tasks/task_notifications.py

from __future__ import annotations

"""
Notification policy.

Two kinds of notifications:
- overdue reminders, produced by OverduePolicy on each periodic check and
  deduplicated per task id until the task stops being overdue;
- one-shot announcements for user actions (added, updated, completed,
  deleted, created from template), emitted once per action, never retried.

TaskNotifier is the permission gate in front of the NotificationSink port.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import NotificationSink
from .task_models import Task

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = "granted"


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    body: str
    tag: str
    require_interaction: bool = False


def overdue_notification(task: Task, now: datetime) -> Notification:
    days = task.days_overdue(now)
    if days == 0:
        body = f'"{task.title}" is due today.'
    elif days == 1:
        body = f'"{task.title}" is 1 day overdue.'
    else:
        body = f'"{task.title}" is {days} days overdue.'
    return Notification(
        title="Task overdue",
        body=body,
        tag=f"overdue-{task.id}",
        require_interaction=True,
    )


class OverduePolicy:
    """
    Per-task state machine: not-notified -> notified -> not-notified.

    A task moves to notified the first time a check sees it overdue, and back
    once a check no longer sees it overdue (completed, due date moved,
    deleted), which makes it eligible again later.
    """

    def __init__(self) -> None:
        self._notified: set[str] = set()

    @property
    def notified_ids(self) -> frozenset[str]:
        return frozenset(self._notified)

    def check(self, tasks: Iterable[Task], now: datetime) -> list[Notification]:
        overdue = [t for t in tasks if t.is_overdue(now)]
        newly = [t for t in overdue if t.id not in self._notified]

        out: list[Notification] = []
        for task in newly:
            out.append(overdue_notification(task, now))

        self._notified = {t.id for t in overdue}
        if newly:
            logger.info("Overdue check: %d newly overdue of %d", len(newly), len(overdue))
        return out

    def reset(self) -> None:
        self._notified.clear()


class TaskNotifier:
    """Permission-gated front for a NotificationSink plus user-action announcements."""

    def __init__(self, sink: NotificationSink) -> None:
        self._sink = sink

    @property
    def sink(self) -> NotificationSink:
        return self._sink

    @property
    def enabled(self) -> bool:
        return getattr(self._sink, "permission", None) == PERMISSION_GRANTED

    def emit(self, notification: Notification) -> bool:
        """Show if permitted; returns whether it was handed to the sink."""
        if not self.enabled:
            logger.debug("Notification suppressed (permission) tag=%s", notification.tag)
            return False
        try:
            self._sink.show(notification)
        except Exception:
            # Fire-and-forget: a broken sink must not break the action that triggered it.
            logger.exception("Notification sink failed tag=%s", notification.tag)
            return False
        return True

    def emit_all(self, notifications: Iterable[Notification]) -> int:
        return sum(1 for n in notifications if self.emit(n))

    # ---- announcements ----

    def task_added(self, task: Task) -> bool:
        return self.emit(Notification("Task added", f'"{task.title}" was added.', f"added-{task.id}"))

    def task_updated(self, task: Task) -> bool:
        return self.emit(
            Notification("Task updated", f'"{task.title}" was updated.', f"updated-{task.id}")
        )

    def task_completed(self, task: Task) -> bool:
        return self.emit(
            Notification("Task completed", f'"{task.title}" is done. Nice work!', f"completed-{task.id}")
        )

    def task_deleted(self, task: Task) -> bool:
        return self.emit(
            Notification("Task deleted", f'"{task.title}" was deleted.', f"deleted-{task.id}")
        )

    def template_used(self, task: Task) -> bool:
        return self.emit(
            Notification(
                "Task created from template",
                f'"{task.title}" was created from a template.',
                f"template-{task.id}",
            )
        )
