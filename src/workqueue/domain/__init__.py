"""Domain models for workqueue."""

from workqueue.domain.models import (
    CompletionPolicy,
    QueueState,
    RunOutcome,
    StopObserver,
    StopReason,
    Task,
    TaskBody,
    always_continue,
    continue_unless_error,
)

__all__ = [
    "CompletionPolicy",
    "QueueState",
    "RunOutcome",
    "StopObserver",
    "StopReason",
    "Task",
    "TaskBody",
    "always_continue",
    "continue_unless_error",
]
