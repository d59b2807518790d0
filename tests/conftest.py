"""Pytest configuration and fixtures."""

from collections.abc import Callable
from typing import Any

import pytest
from workqueue.application.completion import Completion
from workqueue.application.work_queue import WorkQueue


class StopRecorder:
    """On-stop observer that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, Any, Any, Any]] = []

    def __call__(self, reason: Any, state: Any, error: Any, result: Any) -> None:
        self.calls.append((reason, state, error, result))


BodyFactory = Callable[..., Callable[[Any, Completion], None]]


@pytest.fixture
def queue() -> WorkQueue:
    """Fresh, unbounded work queue."""
    return WorkQueue()


@pytest.fixture
def on_stop() -> StopRecorder:
    """Recording on-stop observer."""
    return StopRecorder()


@pytest.fixture
def executed() -> list[str]:
    """Names of task bodies in the order they ran."""
    return []


@pytest.fixture
def make_body(executed: list[str]) -> BodyFactory:
    """Factory for bodies that record their name and signal synchronously."""

    def factory(
        name: str, error: Any = None, result: Any = None
    ) -> Callable[[Any, Completion], None]:
        def body(state: Any, completion: Completion) -> None:
            executed.append(name)
            completion(error, result)

        return body

    return factory
