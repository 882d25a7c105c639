# src/taskpad/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage medium and the notification channel swappable and
makes testing easier.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task
    from ..tasks.task_notifications import Notification


class KeyValueStore(Protocol):
    """Opaque local key-value medium (string keys, string values)."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class TaskPersistence(Protocol):
    """
    Snapshot persistence for the task list.

    load() returns None when there is nothing usable to hydrate from
    (absent or discarded snapshot).
    """

    def load(self) -> list[Task] | None: ...
    def save(self, tasks: list[Task]) -> None: ...


class NotificationSink(Protocol):
    """
    Outbound notification channel (desktop popup, console line, ...).

    permission is one of "granted", "denied", "default". Anything other than
    "granted" means notifications are skipped without error.
    """

    @property
    def permission(self) -> str: ...

    def show(self, notification: Notification) -> None: ...
