"""Domain models for the todo list."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

# Smallest step used to keep successive updated_at values strictly ordered.
_TICK = timedelta(microseconds=1)


class FilterStatus(StrEnum):
    """Which todos a filter lets through by completion state."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Todo:
    """A single todo item."""

    id: str
    title: str
    completed: bool
    created_at: datetime
    updated_at: datetime
    position: int

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Todo":
        """Build a Todo from a stored record.

        Raises:
            KeyError: If a field is missing.
            TypeError: If a field has the wrong type.
            ValueError: If the record breaks a Todo invariant.
        """
        if not isinstance(record, Mapping):
            msg = f"todo record must be a mapping, got {type(record).__name__}"
            raise TypeError(msg)

        todo_id = record["id"]
        title = record["title"]
        completed = record["completed"]
        created_at = _as_datetime(record["created_at"])
        updated_at = _as_datetime(record["updated_at"])
        position = record["position"]

        if not isinstance(todo_id, str) or not todo_id:
            msg = f"todo id must be a non-empty string, got {todo_id!r}"
            raise TypeError(msg)
        if not isinstance(title, str) or not title.strip():
            msg = f"todo {todo_id!r} has an empty title"
            raise ValueError(msg)
        if not isinstance(completed, bool):
            msg = f"todo {todo_id!r}: completed must be a bool, got {completed!r}"
            raise TypeError(msg)
        if not isinstance(position, int) or isinstance(position, bool):
            msg = f"todo {todo_id!r}: position must be an int, got {position!r}"
            raise TypeError(msg)
        if updated_at < created_at:
            msg = f"todo {todo_id!r} was updated before it was created"
            raise ValueError(msg)

        return cls(
            id=todo_id,
            title=title,
            completed=completed,
            created_at=created_at,
            updated_at=updated_at,
            position=position,
        )

    def touched(self, now: datetime, **changes: Any) -> "Todo":
        """Return a copy with changes applied and updated_at bumped past its old value."""
        return replace(self, updated_at=max(now, self.updated_at + _TICK), **changes)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    msg = f"expected a datetime, got {value!r}"
    raise TypeError(msg)


@dataclass(frozen=True)
class TodoFilter:
    """Predicate selecting todos by status and title search."""

    status: FilterStatus = FilterStatus.ALL
    search_query: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", FilterStatus(self.status))

    def matches(self, todo: Todo) -> bool:
        if self.status is FilterStatus.ACTIVE and todo.completed:
            return False
        if self.status is FilterStatus.COMPLETED and not todo.completed:
            return False
        query = self.search_query.strip().casefold()
        return query in todo.title.casefold()


@dataclass(frozen=True)
class TodoCounts:
    """Summary of how many todos are in each state."""

    total: int
    active: int
    completed: int
