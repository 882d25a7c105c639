# src/taskpad/storage/snapshot.py

"""
Snapshot persistence on top of a KeyValueStore.

Layout:
- "todoTasks" -> JSON array of task records (written after every change)
- "darkMode"  -> JSON boolean (display preference)
"""

from __future__ import annotations

import json
import logging

from ..core.ports import KeyValueStore
from ..tasks.task_codec import decode_tasks, encode_tasks
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "todoTasks"
DARK_MODE_KEY = "darkMode"


class KeyValueTaskPersistence:
    """TaskPersistence implementation storing the whole list under one key."""

    def __init__(self, kv: KeyValueStore, *, key: str = TASKS_KEY) -> None:
        self._kv = kv
        self._key = key

    def load(self) -> list[Task] | None:
        raw = self._kv.get(self._key)
        if raw is None:
            logger.info("No saved tasks found under %s", self._key)
            return None

        result = decode_tasks(raw)
        if not result.ok:
            # Start empty; the corrupt value is overwritten on the next save.
            logger.warning("Discarding corrupt task snapshot key=%s: %s", self._key, result.reason)
            return None

        logger.info("Loaded %d tasks from %s", len(result.tasks), self._key)
        return result.tasks

    def save(self, tasks: list[Task]) -> None:
        self._kv.set(self._key, encode_tasks(tasks))


class Preferences:
    """Display preferences sharing the task storage medium."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def dark_mode(self) -> bool:
        raw = self._kv.get(DARK_MODE_KEY)
        if raw is None:
            return False
        try:
            val = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Ignoring corrupt %s value %r", DARK_MODE_KEY, raw)
            return False
        if not isinstance(val, bool):
            logger.warning("Ignoring non-boolean %s value %r", DARK_MODE_KEY, raw)
            return False
        return val

    def set_dark_mode(self, enabled: bool) -> None:
        self._kv.set(DARK_MODE_KEY, json.dumps(bool(enabled)))
