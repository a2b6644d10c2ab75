"""Tests for the canonical JSON codec."""

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime
from types import MappingProxyType

import pytest

from todo_state.models.todo import FilterStatus
from todo_state.storage import codec


def test_round_trip_preserves_dates_nested_records_and_lists() -> None:
    state = {
        "todos": [
            {"id": "a", "done": False, "due": date(2024, 5, 1)},
            {"id": "b", "done": True, "tags": ["x", "y"]},
        ],
        "saved_at": datetime(2024, 1, 2, 3, 4, 5, 678, tzinfo=UTC),
        "meta": {"version": 1, "owner": None, "ratio": 0.5},
    }

    assert codec.decode(codec.encode(state)) == state


def test_encode_is_sorted_json() -> None:
    text = codec.encode({"b": 1, "a": 2})

    assert text == '{"a": 2, "b": 1}'
    assert json.loads(text) == {"a": 2, "b": 1}


def test_encode_handles_read_only_mappings_tuples_and_enums() -> None:
    value = MappingProxyType({"items": (1, 2), "status": FilterStatus.ACTIVE})

    assert codec.decode(codec.encode(value)) == {"items": [1, 2], "status": "active"}


def test_encode_writes_dataclasses_as_records() -> None:
    @dataclass(frozen=True)
    class Point:
        x: int
        y: int

    assert codec.decode(codec.encode({"p": Point(1, 2)})) == {"p": {"x": 1, "y": 2}}


def test_encode_rejects_unsupported_values() -> None:
    with pytest.raises(TypeError):
        codec.encode({"f": object()})
    with pytest.raises(ValueError):
        codec.encode({"n": float("nan")})


def test_decode_rejects_malformed_json() -> None:
    with pytest.raises(ValueError):
        codec.decode("{not json")


def test_decode_accepts_utf8_bytes() -> None:
    assert codec.decode('{"title": "Kaffee kochen ☕"}'.encode()) == {"title": "Kaffee kochen ☕"}


def test_plain_objects_with_other_keys_are_not_mistaken_for_dates() -> None:
    value = {"__datetime__": "2024-01-01T00:00:00", "extra": 1}

    assert codec.decode(codec.encode(value)) == value


@pytest.mark.parametrize(
    "text",
    [
        '{"__datetime__": 5}',
        '{"__date__": null}',
        '{"__datetime__": "not a date"}',
        "[" * 100_000 + "]" * 100_000,
    ],
    ids=["int-datetime", "null-date", "bad-iso", "deep-nesting"],
)
def test_decode_reports_corrupt_content_as_value_error(text: str) -> None:
    with pytest.raises(ValueError):
        codec.decode(text)


def test_encode_reports_deep_nesting_as_value_error() -> None:
    value: list[object] = []
    for _ in range(100_000):
        value = [value]

    with pytest.raises(ValueError, match="nested too deeply"):
        codec.encode(value)
