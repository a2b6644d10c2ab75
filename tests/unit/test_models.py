"""Tests for domain models."""

from datetime import UTC, datetime, timedelta

import pytest

from todo_state.models.todo import FilterStatus, Todo, TodoFilter

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def _todo(**changes: object) -> Todo:
    fields: dict[str, object] = {
        "id": "t1",
        "title": "Buy milk",
        "completed": False,
        "created_at": NOW,
        "updated_at": NOW,
        "position": 0,
    }
    fields.update(changes)
    return Todo(**fields)  # type: ignore[arg-type]


def test_todo_is_frozen() -> None:
    todo = _todo()
    with pytest.raises(AttributeError):
        todo.title = "changed"  # type: ignore[misc]


def test_touched_bumps_updated_at_past_previous_value() -> None:
    todo = _todo()

    same_instant = todo.touched(NOW, completed=True)
    later = todo.touched(NOW + timedelta(hours=1))

    assert same_instant.completed is True
    assert same_instant.updated_at == NOW + timedelta(microseconds=1)
    assert later.updated_at == NOW + timedelta(hours=1)
    assert todo.completed is False


def test_from_record_accepts_iso_strings() -> None:
    todo = Todo.from_record(
        {
            "id": "t1",
            "title": "Buy milk",
            "completed": True,
            "created_at": NOW.isoformat(),
            "updated_at": NOW.isoformat(),
            "position": 3,
        }
    )

    assert todo == _todo(completed=True, position=3)


@pytest.mark.parametrize(
    ("changes", "error"),
    [
        ({"title": "  "}, ValueError),
        ({"completed": "yes"}, TypeError),
        ({"position": "1"}, TypeError),
        ({"id": 5}, TypeError),
        ({"updated_at": NOW - timedelta(seconds=1)}, ValueError),
        ({"created_at": 12}, TypeError),
    ],
)
def test_from_record_rejects_invalid_records(changes: dict[str, object], error: type) -> None:
    record = {
        "id": "t1",
        "title": "Buy milk",
        "completed": False,
        "created_at": NOW,
        "updated_at": NOW,
        "position": 0,
        **changes,
    }

    with pytest.raises(error):
        Todo.from_record(record)


def test_from_record_requires_all_fields() -> None:
    with pytest.raises(KeyError):
        Todo.from_record({"id": "t1", "title": "x"})


def test_filter_defaults_match_everything() -> None:
    assert TodoFilter().matches(_todo())
    assert TodoFilter().matches(_todo(completed=True))


def test_filter_status_accepts_plain_strings() -> None:
    todo_filter = TodoFilter(status="completed")  # type: ignore[arg-type]

    assert todo_filter.status is FilterStatus.COMPLETED
    assert not todo_filter.matches(_todo())


def test_filter_rejects_unknown_status() -> None:
    with pytest.raises(ValueError):
        TodoFilter(status="done")  # type: ignore[arg-type]


def test_filter_search_is_case_insensitive_substring() -> None:
    todo = _todo(title="Buy Milk at the Store")

    assert TodoFilter(search_query="milk").matches(todo)
    assert TodoFilter(search_query="  THE store ").matches(todo)
    assert not TodoFilter(search_query="bread").matches(todo)
