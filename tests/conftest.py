# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskpad.cli.bootstrap import create_initial_state
from taskpad.core.state import AppState

from .fakes import FakeSink, InMemoryKeyValueStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the task API.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskpad",
        data_dir=tmp_path,
        db_path=tmp_path / "storage.sqlite3",
        export_dir=tmp_path / "exports",
        created_by="Tester",
        overdue_check_enabled=False,
        overdue_check_interval_seconds=1,
        notification_permission="granted",
    )


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture()
def state(settings: SimpleNamespace, kv: InMemoryKeyValueStore, sink: FakeSink) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: the storage medium is in-memory here; SqliteKeyValueStore has its
    own tests against tmp_path.
    """
    return create_initial_state(settings=settings, kv=kv, sink=sink)
