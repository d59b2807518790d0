"""Core domain models for workqueue."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# body(state, completion) -> None, or a coroutine for async bodies
TaskBody = Callable[..., Any]
# on_complete(state, error, result) -> bool; only an explicit False stops the chain
CompletionPolicy = Callable[[Any, Any, Any], Any]
# on_stop(reason, state, error, result), plain function or coroutine function
StopObserver = Callable[["StopReason", Any, Any, Any], Awaitable[None] | None]


class StopReason(str, Enum):
    """Why a run-loop invocation ended."""

    STOPPED = "stopped"  # A completion policy returned False
    EMPTIED = "emptied"  # No pending tasks were left


class QueueState(str, Enum):
    """State of the most recent run-loop invocation."""

    IDLE = "idle"  # Never run
    RUNNING = "running"
    STOPPED = "stopped"
    EMPTIED = "emptied"


def continue_unless_error(state: Any, error: Any, result: Any) -> bool:
    """Default completion policy: keep going until a task reports an error."""
    return error is None


def always_continue(state: Any, error: Any, result: Any) -> bool:
    """Completion policy that ignores task errors."""
    return True


class Task(BaseModel):
    """A unit of queued work.

    Tasks are created by ``WorkQueue.push`` and are immutable afterwards; only
    their position in the queue changes.

    Attributes:
        id: Queue-assigned identifier, monotonically increasing, never reused
        label: Human-readable name used in logs (defaults to "task #<id>")
        body: Work function, called as ``body(state, completion)``
        on_complete: Completion policy, called as ``on_complete(state, error, result)``
    """

    id: int = Field(ge=1)
    label: str
    body: TaskBody
    on_complete: CompletionPolicy = Field(default=continue_unless_error)

    model_config = ConfigDict(frozen=True)

    def __repr__(self) -> str:
        return f"Task(id={self.id}, label={self.label!r})"


@dataclass(frozen=True)
class RunOutcome:
    """Result of one run-loop invocation.

    Carries the same values that were delivered to the on-stop observer, plus
    the number of tasks dispatched during the invocation.
    """

    reason: StopReason
    state: Any
    error: Any = None
    result: Any = None
    tasks_run: int = 0

    @property
    def stopped(self) -> bool:
        return self.reason == StopReason.STOPPED
