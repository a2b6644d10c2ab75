"""Configuration constants for todo-state."""

import os
from pathlib import Path

# Storage key holding the todo list state.
DEFAULT_STORAGE_KEY: str = "todos"

# Backend used by the CLI when --backend is not given. One of "json", "sqlite".
DEFAULT_BACKEND: str = "json"

# Database file name inside the data directory for the sqlite backend.
SQLITE_FILENAME: str = "todos.db"


def _data_directories() -> list[Path]:
    candidates: list[Path] = []
    env_dir = os.environ.get("TODO_STATE_DIR")
    if env_dir:
        candidates.append(Path(env_dir).expanduser())
    candidates += [
        Path("~/.local/share/todo-state").expanduser(),
        Path("~/.todo-state").expanduser(),
    ]
    return candidates


# Directory with data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = _data_directories()


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the first candidate."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
