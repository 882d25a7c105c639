# src/taskpad/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..storage.snapshot import Preferences
from ..tasks.task_filters import TaskFilter
from ..tasks.task_notifications import OverduePolicy, TaskNotifier
from ..tasks.task_store import TaskStore
from ..tasks.task_timer import TaskTimer


@dataclass
class AppState:
    """
    Everything one session needs.

    settings is kept as Any so tests can pass a SimpleNamespace.
    lock serializes store mutations (console thread) with overdue checks
    (background thread).
    """

    settings: Any

    task_store: TaskStore
    preferences: Preferences
    notifier: TaskNotifier

    overdue_policy: OverduePolicy = field(default_factory=OverduePolicy)
    view: TaskFilter = field(default_factory=TaskFilter)
    timers: dict[str, TaskTimer] = field(default_factory=dict)
    dark_mode: bool = False

    lock: threading.RLock = field(default_factory=threading.RLock)
