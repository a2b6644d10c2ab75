"""Record-shaped state container with shallow-merge updates."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from todo_state.core.observable import ErrorHook, Observable

State = Mapping[str, Any]


def shallow_merge(current: State, partial: State) -> dict[str, Any]:
    """Merge partial over current, one level deep.

    Every key of current is kept unless partial has it. Values from partial
    replace the old value wholesale, nested mappings included: they are not
    merged recursively. Neither argument is modified.

    Raises:
        TypeError: If either argument is not a mapping.
    """
    if not isinstance(current, Mapping):
        msg = f"current state must be a mapping, got {type(current).__name__}"
        raise TypeError(msg)
    if not isinstance(partial, Mapping):
        msg = f"partial state must be a mapping, got {type(partial).__name__}"
        raise TypeError(msg)
    return {**current, **partial}


def _freeze(state: State) -> State:
    return MappingProxyType(dict(state))


class StateContainer(Observable[State]):
    """Observable record whose updates are partial, shallow merges.

    Subscribers always receive the full state. Each update produces a new
    read-only snapshot; earlier snapshots are never modified.
    """

    def __init__(self, initial: State, *, on_error: ErrorHook | None = None) -> None:
        super().__init__(_freeze(shallow_merge({}, initial)), on_error=on_error)

    def get_state(self) -> State:
        """Return the current read-only snapshot."""
        return self.get_value()

    def set_state(self, partial: State) -> None:
        """Merge partial into the state and notify subscribers.

        The merge is applied to the latest state right away, even when
        called from a subscriber; only the notification waits for the
        running round. Updates made by subscribers therefore see each other.
        """
        if not isinstance(partial, Mapping):
            msg = f"partial state must be a mapping, got {type(partial).__name__}"
            raise TypeError(msg)
        update = dict(partial)
        self._update(lambda current: _freeze(shallow_merge(current, update)))

    def set_value(self, value: State) -> None:
        """Replace the whole state (no merge) and notify subscribers."""
        if not isinstance(value, Mapping):
            msg = f"state must be a mapping, got {type(value).__name__}"
            raise TypeError(msg)
        snapshot = _freeze(value)
        self._update(lambda _current: snapshot)
