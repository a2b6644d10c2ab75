"""Observable, persisted state container backing a todo-list store."""

from todo_state.core import (
    Observable,
    PersistentStateManager,
    StateContainer,
    TodoStore,
    shallow_merge,
)
from todo_state.errors import (
    InvalidKeyError,
    NotFoundError,
    StorageError,
    TodoStateError,
    ValidationError,
)
from todo_state.models import FilterStatus, Todo, TodoCounts, TodoFilter
from todo_state.protocols import StorageProvider
from todo_state.storage import InMemoryStorage, JsonFileStorage, SqliteStorage

__all__ = [
    "FilterStatus",
    "InMemoryStorage",
    "InvalidKeyError",
    "JsonFileStorage",
    "NotFoundError",
    "Observable",
    "PersistentStateManager",
    "SqliteStorage",
    "StateContainer",
    "StorageError",
    "StorageProvider",
    "Todo",
    "TodoCounts",
    "TodoFilter",
    "TodoStateError",
    "TodoStore",
    "ValidationError",
    "shallow_merge",
]
