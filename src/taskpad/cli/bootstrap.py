# src/taskpad/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/notifications).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_notifier import ConsoleNotifier
from ..core.ports import KeyValueStore, NotificationSink
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..storage.snapshot import KeyValueTaskPersistence, Preferences
from ..tasks.task_notifications import TaskNotifier
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    kv: KeyValueStore | None = None,
    sink: NotificationSink | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the storage/notification adapters) injectable makes
    the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.db_path)
    if sink is None:
        sink = ConsoleNotifier(permission=getattr(settings, "notification_permission", "granted"))

    preferences = Preferences(kv)
    state = AppState(
        settings=settings,
        task_store=TaskStore(KeyValueTaskPersistence(kv)),
        preferences=preferences,
        notifier=TaskNotifier(sink),
        dark_mode=preferences.dark_mode(),
    )
    logger.info(
        "State ready: tasks=%d dark_mode=%s notifications=%s",
        len(state.task_store),
        state.dark_mode,
        sink.permission,
    )
    return state
