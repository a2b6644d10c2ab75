"""Error types raised by the todo state store."""


class TodoStateError(Exception):
    """Base class for all todo-state errors."""


class ValidationError(TodoStateError, ValueError):
    """Bad input to a domain operation. State is left unchanged."""


class NotFoundError(TodoStateError, LookupError):
    """An operation referenced a todo id that does not exist."""

    def __init__(self, todo_id: str) -> None:
        super().__init__(f"Todo {todo_id!r} not found")
        self.todo_id = todo_id


class StorageError(TodoStateError):
    """A storage backend failed to read or write a key."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"Storage failure for key {key!r}: {message}")
        self.key = key


class InvalidKeyError(StorageError, ValueError):
    """A backend cannot store a key with this name."""
