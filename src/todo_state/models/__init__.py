"""Domain models."""

from todo_state.models.todo import FilterStatus, Todo, TodoCounts, TodoFilter

__all__ = ["FilterStatus", "Todo", "TodoCounts", "TodoFilter"]
