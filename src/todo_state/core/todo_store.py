"""Todo list store built on persisted, observable state."""

import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from todo_state.config import DEFAULT_STORAGE_KEY
from todo_state.core.persistent import PersistentStateManager, StorageErrorHook
from todo_state.core.state import State
from todo_state.errors import NotFoundError, ValidationError
from todo_state.models.todo import Todo, TodoCounts, TodoFilter
from todo_state.protocols import StorageProvider, Subscriber, Unsubscribe

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

# Attempts at drawing a fresh id before giving up on the id factory.
_MAX_ID_ATTEMPTS = 16


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


def renumber(todos: Iterable[Todo]) -> tuple[Todo, ...]:
    """Assign positions 0..n-1 in iteration order, keeping unchanged todos as-is."""
    result: list[Todo] = []
    for position, todo in enumerate(todos):
        if todo.position != position:
            todo = replace(todo, position=position)
        result.append(todo)
    return tuple(result)


def decode_todo_state(raw: Any) -> State:
    """Turn a stored record back into todo state.

    Stored positions decide the order; they are renumbered densely, so gaps or
    duplicates left by older data are repaired. Records without a position
    keep their list order.

    Raises:
        KeyError, TypeError, ValueError: If the record is not valid todo state.
    """
    if not isinstance(raw, Mapping):
        msg = f"todo state must be a mapping, got {type(raw).__name__}"
        raise TypeError(msg)
    records = raw["todos"]
    if not isinstance(records, Sequence) or isinstance(records, str):
        msg = f"'todos' must be a list, got {type(records).__name__}"
        raise TypeError(msg)

    todos = [Todo.from_record({"position": i, **record}) for i, record in enumerate(records)]
    ids = [todo.id for todo in todos]
    if len(set(ids)) != len(ids):
        msg = "stored todos contain duplicate ids"
        raise ValueError(msg)

    # sorted() is stable: ties on position keep their stored order.
    ordered = renumber(sorted(todos, key=lambda todo: todo.position))
    return {**raw, "todos": ordered}


class TodoStore:
    """Todo list operations over persisted state.

    The state record is ``{"todos": (Todo, ...)}`` ordered by position, and
    positions always form 0..n-1. Every operation is a single state update:
    it validates first, so a failed operation leaves state untouched.
    """

    def __init__(
        self,
        provider: StorageProvider,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        on_error: StorageErrorHook | None = None,
    ) -> None:
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_id
        self._manager = PersistentStateManager(
            {"todos": ()},
            key,
            provider,
            decode=decode_todo_state,
            on_error=on_error,
        )
        logger.debug("Todo store {!r} ready with {} todos", key, len(self.todos))

    @property
    def todos(self) -> tuple[Todo, ...]:
        """All todos ordered by position."""
        return self._manager.get_state()["todos"]

    @property
    def is_durable(self) -> bool:
        return self._manager.is_durable

    def get_state(self) -> State:
        return self._manager.get_state()

    def subscribe(self, callback: Subscriber[State]) -> Unsubscribe:
        return self._manager.subscribe(callback)

    def unsubscribe(self, callback: Subscriber[State]) -> bool:
        return self._manager.unsubscribe(callback)

    def close(self) -> None:
        self._manager.close()

    def get_todo(self, todo_id: str) -> Todo:
        return self.todos[self._index_of(todo_id)]

    def add_todo(self, title: str) -> Todo:
        """Append a new active todo at the end of the list."""
        title = _clean_title(title)
        todos = self.todos
        now = self._clock()
        todo = Todo(
            id=self._fresh_id(todos),
            title=title,
            completed=False,
            created_at=now,
            updated_at=now,
            position=len(todos),
        )
        self._commit((*todos, todo))
        logger.debug("Added todo {} at position {}", todo.id, todo.position)
        return todo

    def toggle_todo(self, todo_id: str) -> Todo:
        """Flip the completed flag of a todo."""
        index = self._index_of(todo_id)
        old = self.todos[index]
        return self._replace(index, old.touched(self._clock(), completed=not old.completed))

    def update_title(self, todo_id: str, title: str) -> Todo:
        title = _clean_title(title)
        index = self._index_of(todo_id)
        return self._replace(index, self.todos[index].touched(self._clock(), title=title))

    def delete_todo(self, todo_id: str) -> Todo:
        """Remove a todo and close the gap in positions.

        Returns:
            The removed todo.
        """
        index = self._index_of(todo_id)
        todos = self.todos
        removed = todos[index]
        self._commit(renumber(todos[:index] + todos[index + 1 :]))
        logger.debug("Deleted todo {}", todo_id)
        return removed

    def reorder(self, todo_id: str, to_position: int) -> Todo:
        """Move one todo to to_position, shifting the todos in between.

        to_position is clamped to the valid range. Moving a todo onto its
        current position is a no-op and does not notify subscribers.

        Returns:
            The moved todo with its new position.
        """
        index = self._index_of(todo_id)
        todos = list(self.todos)
        target = max(0, min(to_position, len(todos) - 1))
        if target == index:
            return todos[index]

        moved = todos.pop(index).touched(self._clock())
        todos.insert(target, moved)
        ordered = renumber(todos)
        self._commit(ordered)
        logger.debug("Moved todo {} from {} to {}", todo_id, index, target)
        return ordered[target]

    def clear_completed(self) -> list[Todo]:
        """Remove every completed todo.

        Returns:
            The removed todos, in their former order.
        """
        todos = self.todos
        removed = [todo for todo in todos if todo.completed]
        if removed:
            self._commit(renumber(todo for todo in todos if not todo.completed))
            logger.debug("Cleared {} completed todos", len(removed))
        return removed

    def set_all_completed(self, completed: bool = True) -> int:
        """Mark every todo completed (or active).

        Returns:
            How many todos changed.
        """
        now = self._clock()
        changed = 0
        updated: list[Todo] = []
        for todo in self.todos:
            if todo.completed != completed:
                todo = todo.touched(now, completed=completed)
                changed += 1
            updated.append(todo)
        if changed:
            self._commit(tuple(updated))
        return changed

    def get_filtered_todos(self, todo_filter: TodoFilter | None = None) -> list[Todo]:
        """Return todos matching the filter, ordered by position.

        Pure: reads the current snapshot and never changes state.
        """
        todo_filter = todo_filter or TodoFilter()
        return sorted(
            (todo for todo in self.todos if todo_filter.matches(todo)),
            key=lambda todo: todo.position,
        )

    def counts(self) -> TodoCounts:
        todos = self.todos
        completed = sum(1 for todo in todos if todo.completed)
        return TodoCounts(total=len(todos), active=len(todos) - completed, completed=completed)

    def _index_of(self, todo_id: str) -> int:
        for index, todo in enumerate(self.todos):
            if todo.id == todo_id:
                return index
        raise NotFoundError(todo_id)

    def _fresh_id(self, todos: Sequence[Todo]) -> str:
        taken = {todo.id for todo in todos}
        for _ in range(_MAX_ID_ATTEMPTS):
            todo_id = self._id_factory()
            if todo_id not in taken:
                return todo_id
        msg = f"Id factory produced no unused id in {_MAX_ID_ATTEMPTS} attempts"
        raise RuntimeError(msg)

    def _replace(self, index: int, todo: Todo) -> Todo:
        todos = self.todos
        self._commit(todos[:index] + (todo,) + todos[index + 1 :])
        return todo

    def _commit(self, todos: tuple[Todo, ...]) -> None:
        self._manager.set_state({"todos": todos})


def _clean_title(title: str) -> str:
    if not isinstance(title, str):
        msg = f"Title must be a string, got {type(title).__name__}"
        raise ValidationError(msg)
    cleaned = title.strip()
    if not cleaned:
        msg = "Title must not be empty"
        raise ValidationError(msg)
    return cleaned
