# tests/test_task_store.py

from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import UTC, datetime

from taskpad.storage.snapshot import KeyValueTaskPersistence
from taskpad.tasks.task_export import export_json, parse_import
from taskpad.tasks.task_models import Priority, TaskDraft
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeClock, FakePersistence, InMemoryKeyValueStore, make_task


def _store(*ids: str) -> TaskStore:
    return TaskStore(FakePersistence(initial=[make_task(i) for i in ids]), now=FakeClock())


def _ids(store: TaskStore) -> list[str]:
    return [t.id for t in store.tasks]


def test_add_prepends_and_assigns_id_and_created_at() -> None:
    clock = FakeClock()
    p = FakePersistence()
    store = TaskStore(p, now=clock)

    first = store.add(TaskDraft(title="Buy milk", priority=Priority.HIGH))
    second = store.add(TaskDraft(title="Walk dog"))

    assert _ids(store) == [second.id, first.id]
    assert first.id != second.id
    assert first.created_at == clock.current
    assert first.completed is False
    assert first.time_spent == 0
    assert len(p.saves) == 2
    assert p.saves[-1][0].title == "Walk dog"


def test_generated_ids_are_unique_even_within_one_millisecond() -> None:
    store = _store()
    ids = {store.add(TaskDraft(title=f"t{i}")).id for i in range(50)}
    assert len(ids) == 50


def test_id_factory_skips_existing_ids() -> None:
    counter = itertools.count(1)
    p = FakePersistence(initial=[make_task("1"), make_task("2")])
    store = TaskStore(p, id_factory=lambda: str(next(counter)))

    task = store.add(TaskDraft(title="fresh"))
    assert task.id == "3"


def test_load_starts_empty_when_nothing_saved() -> None:
    store = TaskStore(FakePersistence(initial=None))
    assert store.tasks == []
    assert len(store) == 0


def test_update_replaces_in_place_and_ignores_unknown() -> None:
    p = FakePersistence(initial=[make_task("1"), make_task("2")])
    store = TaskStore(p)

    changed = replace(store.get("2"), title="renamed")
    assert store.update(changed) is True
    assert store.get("2").title == "renamed"
    assert _ids(store) == ["1", "2"]

    saves_before = len(p.saves)
    assert store.update(make_task("99")) is False
    assert len(p.saves) == saves_before


def test_delete_removes_task_and_prunes_selection() -> None:
    store = _store("1", "2", "3")
    store.select("2")
    store.select("3")

    assert store.delete("2") is True
    assert _ids(store) == ["1", "3"]
    assert store.selected_ids == ["3"]

    assert store.delete("2") is False


def test_toggle_completion_flips_and_returns_task() -> None:
    store = _store("1")
    assert store.toggle_completion("1").completed is True
    assert store.toggle_completion("1").completed is False
    assert store.toggle_completion("nope") is None


def test_update_time_accumulates_minutes() -> None:
    store = _store("1")
    store.update_time("1", 5)
    task = store.update_time("1", 10)
    assert task is not None
    assert task.time_spent == 15
    assert store.update_time("missing", 5) is None


def test_select_ignores_unknown_and_duplicates() -> None:
    store = _store("1", "2")
    store.select("1")
    store.select("1")
    store.select("ghost")
    assert store.selected_ids == ["1"]

    store.select("1", False)
    assert store.selected_ids == []


def test_select_all_and_clear_selection() -> None:
    store = _store("1", "2", "3")
    store.select_all(["1", "3", "x"])
    assert store.selected_ids == ["1", "3"]
    store.clear_selection()
    assert store.selected_ids == []


def test_bulk_complete_and_uncomplete_clear_selection() -> None:
    store = _store("1", "2", "3")
    store.select_all(["1", "2"])

    assert store.bulk_complete() == 2
    assert [t.completed for t in store.tasks] == [True, True, False]
    assert store.selected_ids == []

    store.select("2")
    assert store.bulk_uncomplete() == 1
    assert [t.completed for t in store.tasks] == [True, False, False]


def test_bulk_delete_removes_selected_only() -> None:
    p = FakePersistence(initial=[make_task(i) for i in ("1", "2", "3")])
    store = TaskStore(p)
    store.select_all(["1", "3"])

    assert store.bulk_delete() == 2
    assert _ids(store) == ["2"]
    assert store.selected_ids == []
    assert _ids_of(p.saves[-1]) == ["2"]


def test_bulk_with_empty_selection_does_not_save() -> None:
    p = FakePersistence(initial=[make_task("1")])
    store = TaskStore(p)
    assert store.bulk_delete() == 0
    assert store.bulk_complete() == 0
    assert p.saves == []


def test_import_appends_verbatim_without_dedup() -> None:
    store = _store("1", "2")
    incoming = [make_task("2", "dup"), make_task("7")]

    assert store.import_tasks(incoming) == 2
    assert _ids(store) == ["1", "2", "2", "7"]
    assert store.import_tasks([]) == 0


def test_reorder_moves_dragged_to_target_position() -> None:
    store = _store("a", "b", "c")
    assert store.reorder("a", "c") is True
    assert _ids(store) == ["b", "c", "a"]

    store = _store("a", "b", "c")
    assert store.reorder("c", "a") is True
    assert _ids(store) == ["c", "a", "b"]


def test_reorder_noops() -> None:
    p = FakePersistence(initial=[make_task(i) for i in ("a", "b", "c")])
    store = TaskStore(p)

    assert store.reorder("a", "a") is False
    assert store.reorder("a", "zzz") is False
    assert store.reorder("zzz", "a") is False
    assert store.reorder("", "a") is False
    assert _ids(store) == ["a", "b", "c"]
    assert p.saves == []


def test_reorder_is_a_permutation() -> None:
    ids = ["a", "b", "c", "d", "e"]
    for src, dst in itertools.permutations(ids, 2):
        store = _store(*ids)
        store.reorder(src, dst)
        result = _ids(store)
        assert sorted(result) == ids
        assert result.index(src) == ids.index(dst)
        others = [i for i in result if i != src]
        assert others == [i for i in ids if i != src]


def test_drop_always_clears_drag_pointer() -> None:
    store = _store("a", "b", "c")

    store.begin_drag("a")
    assert store.dragged_id == "a"
    assert store.drop("a") is False
    assert store.dragged_id is None

    store.begin_drag("c")
    assert store.drop("a") is True
    assert store.dragged_id is None
    assert _ids(store) == ["c", "a", "b"]

    assert store.drop("b") is False

    store.begin_drag("b")
    store.cancel_drag()
    assert store.dragged_id is None


def test_persistence_failure_keeps_in_memory_change() -> None:
    p = FakePersistence(fail=True)
    store = TaskStore(p)
    task = store.add(TaskDraft(title="still here"))
    assert store.get(task.id) is not None


def test_every_mutation_writes_full_snapshot() -> None:
    p = FakePersistence(initial=[make_task("1"), make_task("2")])
    store = TaskStore(p)

    store.toggle_completion("1")
    store.update_time("2", 3)
    store.reorder("2", "1")

    assert len(p.saves) == 3
    assert _ids_of(p.saves[-1]) == ["2", "1"]
    assert p.saves[-1][0].time_spent == 3
    assert p.saves[-1][1].completed is True


def test_contains_and_get() -> None:
    store = _store("1")
    assert "1" in store
    assert "2" not in store
    assert 1 not in store
    assert store.get("2") is None


def _ids_of(tasks) -> list[str]:
    return [t.id for t in tasks]


def test_created_at_is_kept_at_millisecond_precision() -> None:
    clock = FakeClock(datetime(2024, 5, 1, 9, 0, 54, 771855, tzinfo=UTC))
    store = TaskStore(FakePersistence(), now=clock)

    task = store.add(TaskDraft(title="Buy milk"))
    assert task.created_at.microsecond == 771000


def test_added_task_survives_export_import_and_restart() -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(KeyValueTaskPersistence(kv))
    task = store.add(TaskDraft(title="Buy milk", tags=("errand",)))

    assert parse_import(export_json(store.tasks)) == store.tasks

    reopened = TaskStore(KeyValueTaskPersistence(kv))
    assert reopened.get(task.id) == task


def test_mutations_apply_to_every_copy_of_a_duplicated_id() -> None:
    store = _store("1", "2")
    store.import_tasks([make_task("1", "copy")])

    store.toggle_completion("1")
    assert [t.completed for t in store.tasks if t.id == "1"] == [True, True]

    store.update_time("1", 4)
    assert [t.time_spent for t in store.tasks if t.id == "1"] == [4, 4]

    assert store.update(make_task("1", "same")) is True
    assert [t.title for t in store.tasks if t.id == "1"] == ["same", "same"]

    assert store.delete("1") is True
    assert _ids(store) == ["2"]
