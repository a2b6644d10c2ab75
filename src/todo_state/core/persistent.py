"""State container wired to write through to a storage provider."""

from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from todo_state.core.observable import ErrorHook
from todo_state.core.state import State, StateContainer
from todo_state.errors import StorageError
from todo_state.protocols import StorageProvider, Subscriber, Unsubscribe

StateDecoder = Callable[[Any], State]
StorageErrorHook = Callable[[StorageError], None]


class PersistentStateManager:
    """Load state from a provider once, then persist every change.

    On construction the stored value under ``key`` seeds the state if it is
    well-formed; otherwise ``initial_state`` is used. Well-formed means a
    mapping, or, when ``decode`` is given, a value ``decode`` accepts without
    raising ValueError, TypeError or KeyError. ``decode`` is the place to
    migrate older stored shapes.

    Every state notification, including the replay at construction, is
    written synchronously with ``provider.set``. A failed write is logged and
    reported to ``on_error``; the in-memory state stays authoritative and the
    next successful write re-syncs storage.
    """

    def __init__(
        self,
        initial_state: State,
        key: str,
        provider: StorageProvider,
        *,
        decode: StateDecoder | None = None,
        on_error: StorageErrorHook | None = None,
        on_subscriber_error: ErrorHook | None = None,
    ) -> None:
        self._key = key
        self._provider = provider
        self._on_error = on_error
        self.is_durable = False

        state = self._load(decode)
        if state is None:
            logger.debug("No usable stored state for {!r}, using initial state", key)
            state = initial_state
        else:
            logger.debug("Loaded stored state for {!r}", key)

        self._container = StateContainer(state, on_error=on_subscriber_error)
        self._unsubscribe: Unsubscribe | None = self._container.subscribe(self._write)

    @property
    def key(self) -> str:
        return self._key

    @property
    def provider(self) -> StorageProvider:
        return self._provider

    def get_state(self) -> State:
        return self._container.get_state()

    def set_state(self, partial: State) -> None:
        self._container.set_state(partial)

    def subscribe(self, callback: Subscriber[State]) -> Unsubscribe:
        return self._container.subscribe(callback)

    def unsubscribe(self, callback: Subscriber[State]) -> bool:
        return self._container.unsubscribe(callback)

    def close(self) -> None:
        """Stop persisting changes. Safe to call more than once."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.debug("Stopped persisting {!r}", self._key)

    def _load(self, decode: StateDecoder | None) -> State | None:
        try:
            raw = self._provider.get(self._key)
        except StorageError as e:
            logger.warning("Reading {!r} failed, starting fresh: {}", self._key, e)
            self._report(e)
            return None
        if raw is None:
            return None

        if decode is not None:
            try:
                raw = decode(raw)
            except (ValueError, TypeError, KeyError) as e:
                logger.warning("Stored state for {!r} is malformed, ignoring it: {}", self._key, e)
                return None
        if not isinstance(raw, Mapping):
            logger.warning(
                "Stored state for {!r} is a {}, not a record; ignoring it",
                self._key,
                type(raw).__name__,
            )
            return None
        return raw

    def _write(self, state: State) -> None:
        try:
            self._provider.set(self._key, state)
        except StorageError as e:
            self.is_durable = False
            logger.warning("Could not persist {!r}, keeping state in memory: {}", self._key, e)
            self._report(e)
            return
        self.is_durable = True

    def _report(self, error: StorageError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Storage error hook raised")
