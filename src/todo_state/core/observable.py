"""Observable value holder with ordered, synchronous subscribers."""

from collections import deque
from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

from todo_state.protocols import Subscriber, Unsubscribe

T = TypeVar("T")

ErrorHook = Callable[[Exception], None]


class _Subscription(Generic[T]):
    __slots__ = ("active", "callback", "since")

    def __init__(self, callback: Subscriber[T], since: int) -> None:
        self.callback = callback
        self.active = True
        # Version replayed on subscribe; older queued values are skipped.
        self.since = since


class Observable(Generic[T]):
    """Hold a single value and notify subscribers when it changes.

    - Subscribers are called synchronously, in subscription order.
    - ``subscribe`` calls the new subscriber once with the current value.
    - An exception raised by one subscriber is logged and handed to
      ``on_error``; the remaining subscribers are still notified and the
      caller of ``set_value`` never sees it.
    - ``set_value`` called from inside a subscriber takes effect at once,
      so ``get_value`` and later updates see it, but its notification is
      queued until the running round has finished.
    """

    def __init__(self, value: T, *, on_error: ErrorHook | None = None) -> None:
        self._value = value
        self._version = 0
        self._on_error = on_error
        self._subscriptions: list[_Subscription[T]] = []
        # Values still to be announced, with the version each one got.
        self._pending: deque[tuple[int, T]] = deque()
        self._notifying = False

    def get_value(self) -> T:
        return self._value

    def set_value(self, value: T) -> None:
        """Replace the value and notify every subscriber."""
        self._update(lambda _current: value)

    def subscribe(self, callback: Subscriber[T]) -> Unsubscribe:
        """Register callback, replay the current value to it, return its remover."""
        subscription = _Subscription(callback, self._version)
        self._subscriptions.append(subscription)
        self._call(subscription, self._value)

        def unsubscribe() -> None:
            if subscription.active:
                subscription.active = False
                self._subscriptions.remove(subscription)

        return unsubscribe

    def unsubscribe(self, callback: Subscriber[T]) -> bool:
        """Remove the earliest registration of callback.

        Returns:
            True if a registration was removed.
        """
        for subscription in self._subscriptions:
            if subscription.callback == callback:
                subscription.active = False
                self._subscriptions.remove(subscription)
                return True
        return False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _update(self, transform: Callable[[T], T]) -> None:
        self._value = transform(self._value)
        self._version += 1
        self._pending.append((self._version, self._value))
        if self._notifying:
            logger.debug("Update issued during notification, notification queued")
            return

        self._notifying = True
        try:
            while self._pending:
                self._notify(*self._pending.popleft())
        finally:
            self._notifying = False
            self._pending.clear()

    def _notify(self, version: int, value: T) -> None:
        for subscription in list(self._subscriptions):
            if subscription.active and subscription.since < version:
                self._call(subscription, value)

    def _call(self, subscription: _Subscription[T], value: T) -> None:
        try:
            subscription.callback(value)
        except Exception as e:
            logger.exception("Subscriber {!r} raised", subscription.callback)
            self._report(e)

    def _report(self, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Error hook raised while reporting a subscriber failure")
