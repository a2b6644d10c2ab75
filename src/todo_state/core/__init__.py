"""State containers and the todo store."""

from todo_state.core.observable import Observable
from todo_state.core.persistent import PersistentStateManager
from todo_state.core.state import StateContainer, shallow_merge
from todo_state.core.todo_store import TodoStore

__all__ = ["Observable", "PersistentStateManager", "StateContainer", "TodoStore", "shallow_merge"]
