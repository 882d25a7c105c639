# tests/test_task_export.py

from __future__ import annotations

import json
from datetime import date

import pytest

from taskpad.tasks.task_export import (
    CSV_HEADERS,
    TaskImportError,
    export_csv,
    export_filename,
    export_json,
    parse_import,
)

from .fakes import make_task


def test_export_filename() -> None:
    assert export_filename("json", date(2024, 5, 1)) == "tasks-2024-05-01.json"
    assert export_filename("csv", date(2024, 12, 31)) == "tasks-2024-12-31.csv"


def test_csv_header_and_row_format() -> None:
    task = make_task(
        "1",
        'Say "hi"',
        description="line, with comma",
        category="Home",
        completed=True,
        due_date=date(2024, 5, 2),
        time_spent=30,
        tags=("a", "b"),
    )
    lines = export_csv([task]).split("\n")

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[0].startswith("Title,Description,Priority,Category,Completed")
    assert lines[1] == (
        '"Say ""hi""","line, with comma",medium,"Home",true,2024-05-02,30,"a;b",'
        "2024-05-01T09:01:00.000Z"
    )


def test_csv_empty_fields() -> None:
    lines = export_csv([make_task("2", "Plain")]).split("\n")
    assert lines[1].startswith('"Plain","",medium,"",false,,0,"",')


def test_csv_of_no_tasks_is_header_only() -> None:
    assert export_csv([]) == ",".join(CSV_HEADERS)


def test_json_export_is_pretty_and_reimportable() -> None:
    tasks = [make_task("1", "A", tags=("x",)), make_task("2", "B", completed=True)]
    text = export_json(tasks)

    assert text.startswith("[\n  {")
    assert json.loads(text)[1]["completed"] is True
    assert parse_import(text) == tasks


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        '{"tasks": []}',
        '[{"title": "no id", "createdAt": "2024-05-01T00:00:00Z"}]',
        '[{"id": "1", "title": "x", "createdAt": "2024-05-01T00:00:00Z", "priority": "urgent"}]',
    ],
)
def test_import_rejects_invalid_payloads(payload: str) -> None:
    with pytest.raises(TaskImportError) as exc:
        parse_import(payload)
    assert exc.value.reason


def test_import_of_empty_array_is_valid() -> None:
    assert parse_import("[]") == []
