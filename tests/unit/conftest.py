"""Shared test fixtures."""

from collections.abc import Iterator

import pytest
from loguru import logger

from todo_state.core.todo_store import TodoStore
from tests.unit.fakes import FakeClock, FakeStorage, sequential_ids


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(storage: FakeStorage, clock: FakeClock) -> TodoStore:
    """Return an empty store with deterministic ids and time."""
    return TodoStore(storage, clock=clock, id_factory=sequential_ids())


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG")
    yield messages
    logger.remove(handler_id)
