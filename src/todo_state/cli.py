"""Command-line interface for the todo store."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from todo_state.config import (
    DEFAULT_BACKEND,
    DEFAULT_STORAGE_KEY,
    SQLITE_FILENAME,
    resolve_data_directory,
)
from todo_state.core.todo_store import TodoStore
from todo_state.errors import StorageError, TodoStateError
from todo_state.logging_config import configure_logging
from todo_state.models.todo import FilterStatus, Todo, TodoFilter
from todo_state.protocols import StorageProvider
from todo_state.storage import JsonFileStorage, SqliteStorage

app = typer.Typer(help="Todo list backed by a persisted, observable state store.")


class Backend(StrEnum):
    JSON = "json"
    SQLITE = "sqlite"


DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding the todo data"),
]
BackendOption = Annotated[
    Backend,
    typer.Option("--backend", "-b", help="Storage backend"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _on_storage_error(error: StorageError) -> None:
    logger.error("Changes were not saved: {}", error)


@contextmanager
def _open_store(data_dir: Path | None, backend: Backend) -> Iterator[TodoStore]:
    """Open the store on the chosen backend and release it afterwards."""
    directory = data_dir or resolve_data_directory()
    provider: StorageProvider
    sqlite: SqliteStorage | None = None
    if backend is Backend.SQLITE:
        directory.mkdir(parents=True, exist_ok=True)
        sqlite = SqliteStorage(directory / SQLITE_FILENAME)
        provider = sqlite
    else:
        provider = JsonFileStorage(directory)

    store = TodoStore(provider, key=DEFAULT_STORAGE_KEY, on_error=_on_storage_error)
    try:
        yield store
    except TodoStateError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    finally:
        store.close()
        if sqlite is not None:
            sqlite.close()


def _format_todo(todo: Todo) -> str:
    mark = "x" if todo.completed else " "
    return f"  {todo.position:>3}. [{mark}] {todo.title}  (id={todo.id})"


def _todo_json(todo: Todo) -> dict[str, object]:
    return {
        "id": todo.id,
        "title": todo.title,
        "completed": todo.completed,
        "position": todo.position,
        "created_at": todo.created_at.isoformat(),
        "updated_at": todo.updated_at.isoformat(),
    }


@app.command()
def add(
    title: str = typer.Argument(..., help="Title of the new todo"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Add a todo at the end of the list."""
    with _open_store(data_dir, backend) as store:
        todo = store.add_todo(title)
        typer.echo(f"Added {todo.title!r} (id={todo.id})")


@app.command(name="list")
def list_cmd(
    status: Annotated[
        FilterStatus,
        typer.Option("--status", "-s", help="Show all, active or completed todos"),
    ] = FilterStatus.ALL,
    search: Annotated[
        str,
        typer.Option("--search", "-t", help="Case-insensitive title search"),
    ] = "",
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """List todos in order."""
    with _open_store(data_dir, backend) as store:
        todos = store.get_filtered_todos(TodoFilter(status=status, search_query=search))
        counts = store.counts()

    if output_json:
        data = {
            "todos": [_todo_json(todo) for todo in todos],
            "count": len(todos),
            "active": counts.active,
            "completed": counts.completed,
        }
        typer.echo(json.dumps(data, indent=2))
        return

    if not todos:
        typer.echo("No todos.")
    for todo in todos:
        typer.echo(_format_todo(todo))
    typer.echo(f"\n{counts.active} active, {counts.completed} completed")


@app.command()
def toggle(
    todo_id: str = typer.Argument(..., help="Todo id"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Mark a todo completed, or active again."""
    with _open_store(data_dir, backend) as store:
        todo = store.toggle_todo(todo_id)
        state = "completed" if todo.completed else "active"
        typer.echo(f"{todo.title!r} is now {state}")


@app.command()
def delete(
    todo_id: str = typer.Argument(..., help="Todo id"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Delete a todo."""
    with _open_store(data_dir, backend) as store:
        todo = store.delete_todo(todo_id)
        typer.echo(f"Deleted {todo.title!r}")


@app.command()
def move(
    todo_id: str = typer.Argument(..., help="Todo id"),
    position: int = typer.Argument(..., help="Target position, zero-based"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Move a todo to another position."""
    with _open_store(data_dir, backend) as store:
        todo = store.reorder(todo_id, position)
        typer.echo(f"Moved {todo.title!r} to position {todo.position}")


@app.command()
def rename(
    todo_id: str = typer.Argument(..., help="Todo id"),
    title: str = typer.Argument(..., help="New title"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Change the title of a todo."""
    with _open_store(data_dir, backend) as store:
        todo = store.update_title(todo_id, title)
        typer.echo(f"Renamed to {todo.title!r}")


@app.command(name="clear-completed")
def clear_completed(
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Delete all completed todos."""
    with _open_store(data_dir, backend) as store:
        removed = store.clear_completed()
        typer.echo(f"Removed {len(removed)} completed todos")


@app.command(name="complete-all")
def complete_all(
    undo: bool = typer.Option(False, "--undo", help="Mark all todos active instead"),
    data_dir: DataDirOption = None,
    backend: BackendOption = Backend(DEFAULT_BACKEND),
) -> None:
    """Mark every todo completed."""
    with _open_store(data_dir, backend) as store:
        changed = store.set_all_completed(not undo)
        typer.echo(f"Updated {changed} todos")
