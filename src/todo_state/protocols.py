"""Protocols for dependency injection in the state store."""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

T_contra = TypeVar("T_contra", contravariant=True)


class Subscriber(Protocol[T_contra]):
    """Callback receiving every new value of an observable."""

    def __call__(self, value: T_contra, /) -> None: ...


# Handle returned by subscribe(); calling it removes the subscription.
Unsubscribe = Callable[[], None]


@runtime_checkable
class StorageProvider(Protocol):
    """Protocol for key/value persistence backends.

    Values are serialized with the canonical JSON codec
    (see ``todo_state.storage.codec``).
    """

    def get(self, key: str) -> Any | None:
        """Return the decoded value for key.

        Returns None when the key is missing or its data is corrupt.
        """
        ...

    def set(self, key: str, value: Any) -> None:
        """Serialize and store value under key. Raises StorageError on failure."""
        ...

    def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is a no-op."""
        ...

    def clear(self) -> None:
        """Delete every key held by this provider."""
        ...

    def keys(self) -> list[str]:
        """Return the stored keys, sorted."""
        ...
