# src/taskpad/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime

from ..core.ports import TaskPersistence
from .task_models import Task, TaskDraft

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TaskStore:
    """
    In-memory owner of the task list, the selection set and the drag pointer.

    Every change to the task list is followed by a full snapshot write through
    the injected TaskPersistence port (write-through, no batching). The store
    does not validate drafts; callers (task_api) do.

    Unknown ids are silent no-ops everywhere; return values tell the caller
    whether anything happened.
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        *,
        now: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._persistence = persistence
        self._now = now
        self._id_factory = id_factory
        self._last_issued_ms = 0

        self._tasks: list[Task] = list(persistence.load() or [])
        self._selected: list[str] = []
        self._dragged_id: str | None = None

        logger.info("TaskStore ready total=%s", len(self._tasks))

    # ---- low-level helpers ----

    def _commit(self) -> None:
        try:
            self._persistence.save(list(self._tasks))
        except Exception:
            # Best-effort: keep the in-memory change, next save retries the full list.
            logger.exception("Failed to persist task snapshot (total=%s)", len(self._tasks))

    def _index_of(self, task_id: str) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return -1

    def _new_id(self) -> str:
        existing = {t.id for t in self._tasks}
        if self._id_factory is not None:
            new_id = self._id_factory()
            while new_id in existing:
                new_id = self._id_factory()
            return new_id

        # Millisecond timestamp, bumped until it is distinct from anything issued or stored.
        ms = max(time.time_ns() // 1_000_000, self._last_issued_ms + 1)
        while str(ms) in existing:
            ms += 1
        self._last_issued_ms = ms
        return str(ms)

    def _indexes_of(self, task_id: str) -> list[int]:
        # Imports may bring duplicate ids; mutations apply to every copy.
        return [i for i, task in enumerate(self._tasks) if task.id == task_id]

    def _created_now(self) -> datetime:
        # The wire format keeps milliseconds; memory holds the same value.
        now = self._now()
        return now.replace(microsecond=now.microsecond // 1000 * 1000)

    # ---- queries ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selected)

    @property
    def dragged_id(self) -> str | None:
        return self._dragged_id

    def get(self, task_id: str) -> Task | None:
        i = self._index_of(task_id)
        return self._tasks[i] if i >= 0 else None

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return isinstance(task_id, str) and self._index_of(task_id) >= 0

    # ---- single-task mutations ----

    def add(self, draft: TaskDraft) -> Task:
        task = Task(
            id=self._new_id(),
            title=draft.title,
            created_at=self._created_now(),
            description=draft.description,
            completed=draft.completed,
            priority=draft.priority,
            category=draft.category,
            due_date=draft.due_date,
            created_by=draft.created_by,
            photos=tuple(draft.photos),
            time_spent=draft.time_spent,
            tags=tuple(draft.tags),
        )
        self._tasks.insert(0, task)
        self._commit()
        logger.debug("Task added id=%s title=%r total=%s", task.id, task.title, len(self._tasks))
        return task

    def update(self, task: Task) -> bool:
        matched = self._indexes_of(task.id)
        if not matched:
            return False
        for i in matched:
            self._tasks[i] = task
        self._commit()
        logger.debug("Task updated id=%s copies=%s", task.id, len(matched))
        return True

    def delete(self, task_id: str) -> bool:
        # Selection is pruned whether or not the task exists.
        if task_id in self._selected:
            self._selected.remove(task_id)

        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        if len(self._tasks) == before:
            return False
        self._commit()
        logger.debug("Task deleted id=%s total=%s", task_id, len(self._tasks))
        return True

    def toggle_completion(self, task_id: str) -> Task | None:
        matched = self._indexes_of(task_id)
        if not matched:
            return None
        for i in matched:
            self._tasks[i] = replace(self._tasks[i], completed=not self._tasks[i].completed)
        self._commit()
        task = self._tasks[matched[0]]
        logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)
        return task

    def update_time(self, task_id: str, additional_minutes: int) -> Task | None:
        matched = self._indexes_of(task_id)
        if not matched:
            return None
        for i in matched:
            old = self._tasks[i]
            self._tasks[i] = replace(old, time_spent=old.time_spent + int(additional_minutes))
        self._commit()
        task = self._tasks[matched[0]]
        logger.debug("Task time id=%s now=%s", task_id, task.time_spent)
        return task

    # ---- selection ----

    def select(self, task_id: str, selected: bool = True) -> None:
        if not selected:
            if task_id in self._selected:
                self._selected.remove(task_id)
            return
        if task_id in self._selected or task_id not in self:
            return
        self._selected.append(task_id)

    def select_all(self, task_ids: Iterable[str]) -> None:
        for task_id in task_ids:
            self.select(task_id, True)

    def clear_selection(self) -> None:
        self._selected.clear()

    # ---- bulk operations (act on the selection, then clear it) ----

    def _set_completed_for_selection(self, completed: bool) -> int:
        chosen = set(self._selected)
        changed = 0
        for i, task in enumerate(self._tasks):
            if task.id in chosen:
                self._tasks[i] = replace(task, completed=completed)
                changed += 1
        self._selected.clear()
        if changed:
            self._commit()
        return changed

    def bulk_delete(self) -> int:
        chosen = set(self._selected)
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id not in chosen]
        self._selected.clear()
        removed = before - len(self._tasks)
        if removed:
            self._commit()
        logger.debug("Bulk delete removed=%s", removed)
        return removed

    def bulk_complete(self) -> int:
        return self._set_completed_for_selection(True)

    def bulk_uncomplete(self) -> int:
        return self._set_completed_for_selection(False)

    # ---- import ----

    def import_tasks(self, tasks: Iterable[Task]) -> int:
        """Append verbatim: no dedup, no id collision handling."""
        incoming = list(tasks)
        if not incoming:
            return 0
        self._tasks.extend(incoming)
        self._commit()
        logger.info("Imported %d tasks (total=%s)", len(incoming), len(self._tasks))
        return len(incoming)

    # ---- manual ordering ----

    def reorder(self, dragged_id: str, target_id: str) -> bool:
        """
        Move the dragged task to the target's position.

        Splice semantics: remove the dragged task, then insert it at the index
        the target had before the removal. Everything else keeps its relative
        order.
        """
        if not dragged_id or not target_id or dragged_id == target_id:
            return False
        src = self._index_of(dragged_id)
        dst = self._index_of(target_id)
        if src < 0 or dst < 0:
            return False

        task = self._tasks.pop(src)
        self._tasks.insert(dst, task)
        self._commit()
        logger.debug("Task reordered id=%s from=%s to=%s", dragged_id, src, dst)
        return True

    def begin_drag(self, task_id: str) -> None:
        self._dragged_id = task_id

    def cancel_drag(self) -> None:
        self._dragged_id = None

    def drop(self, target_id: str) -> bool:
        dragged_id = self._dragged_id
        # Cleared on every drop attempt, valid or not.
        self._dragged_id = None
        if dragged_id is None:
            return False
        return self.reorder(dragged_id, target_id)
