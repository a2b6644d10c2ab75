"""Storage backends implementing the StorageProvider protocol."""

from todo_state.storage.json_file import JsonFileStorage
from todo_state.storage.memory import InMemoryStorage
from todo_state.storage.sqlite import SqliteStorage

__all__ = ["InMemoryStorage", "JsonFileStorage", "SqliteStorage"]
