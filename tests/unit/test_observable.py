"""Tests for Observable subscriber notification."""

from todo_state.core.observable import Observable
from tests.unit.fakes import Recorder


def test_get_value_returns_initial_value() -> None:
    assert Observable(3).get_value() == 3


def test_subscribe_replays_current_value() -> None:
    obs = Observable("a")
    recorder = Recorder()

    obs.subscribe(recorder)

    assert recorder.values == ["a"]


def test_set_value_notifies_subscribers_in_subscription_order() -> None:
    obs = Observable(0)
    calls: list[tuple[str, int]] = []
    obs.subscribe(lambda v: calls.append(("first", v)))
    obs.subscribe(lambda v: calls.append(("second", v)))
    calls.clear()

    obs.set_value(1)

    assert calls == [("first", 1), ("second", 1)]
    assert obs.get_value() == 1


def test_unsubscribe_handle_stops_notifications_and_is_idempotent() -> None:
    obs = Observable(0)
    recorder = Recorder()
    other = Recorder()
    unsubscribe = obs.subscribe(recorder)
    obs.subscribe(other)

    unsubscribe()
    unsubscribe()
    obs.set_value(1)

    assert recorder.values == [0]
    assert other.values == [0, 1]
    assert obs.subscriber_count == 1


def test_unsubscribe_by_callback_removes_one_registration() -> None:
    obs = Observable(0)
    recorder = Recorder()
    obs.subscribe(recorder)
    obs.subscribe(recorder)

    assert obs.unsubscribe(recorder) is True
    obs.set_value(1)

    assert recorder.values == [0, 0, 1]
    assert obs.unsubscribe(recorder) is True
    assert obs.unsubscribe(recorder) is False


def test_throwing_subscriber_does_not_stop_others() -> None:
    """A raising subscriber is isolated: later subscribers still run."""
    errors: list[Exception] = []
    obs = Observable(0, on_error=errors.append)
    recorder = Recorder()

    def explode(value: int) -> None:
        if value:
            raise RuntimeError("boom")

    obs.subscribe(explode)
    obs.subscribe(recorder)

    obs.set_value(1)

    assert recorder.values == [0, 1]
    assert len(errors) == 1
    assert str(errors[0]) == "boom"


def test_throwing_subscriber_is_logged(log_messages: list[str]) -> None:
    obs = Observable(0)

    def explode(_value: int) -> None:
        raise ValueError("bad subscriber")

    obs.subscribe(explode)

    assert any("raised" in m for m in log_messages)


def test_failing_error_hook_is_contained() -> None:
    def broken_hook(_error: Exception) -> None:
        raise RuntimeError("hook broke too")

    obs = Observable(0, on_error=broken_hook)
    recorder = Recorder()
    obs.subscribe(lambda _v: 1 / 0)
    obs.subscribe(recorder)

    obs.set_value(5)

    assert recorder.values == [0, 5]


def test_set_value_inside_subscriber_is_queued_after_current_round() -> None:
    """Nested updates wait for the running round to finish."""
    obs = Observable(0)
    calls: list[tuple[str, int]] = []

    def first(value: int) -> None:
        calls.append(("first", value))
        if value == 1:
            obs.set_value(2)

    obs.subscribe(first)
    obs.subscribe(lambda v: calls.append(("second", v)))
    calls.clear()

    obs.set_value(1)

    assert calls == [("first", 1), ("second", 1), ("first", 2), ("second", 2)]
    assert obs.get_value() == 2


def test_subscriber_removed_mid_round_is_not_called() -> None:
    obs = Observable(0)
    recorder = Recorder()
    handles = {}

    def remover(value: int) -> None:
        if value:
            handles["late"]()

    obs.subscribe(remover)
    handles["late"] = obs.subscribe(recorder)

    obs.set_value(1)

    assert recorder.values == [0]



def test_set_value_inside_subscriber_is_visible_at_once() -> None:
    obs = Observable(0)
    seen: list[int] = []

    def bump(value: int) -> None:
        if value == 1:
            obs.set_value(2)
            seen.append(obs.get_value())

    obs.subscribe(bump)
    obs.set_value(1)

    assert seen == [2]


def test_subscriber_added_mid_round_sees_each_value_once() -> None:
    obs = Observable(0)
    recorder = Recorder()

    def late_joiner(value: int) -> None:
        if value == 1:
            obs.set_value(2)
            obs.subscribe(recorder)

    obs.subscribe(late_joiner)
    obs.set_value(1)

    assert recorder.values == [2]
