"""workqueue - a sequential, FIFO task executor for asyncio."""

from workqueue.application.completion import Completion
from workqueue.application.work_queue import WorkQueue
from workqueue.domain.models import (
    QueueState,
    RunOutcome,
    StopReason,
    Task,
    always_continue,
    continue_unless_error,
)
from workqueue.infrastructure.exceptions import (
    InvalidTaskError,
    QueueBusyError,
    QueueFullError,
    WorkQueueError,
)

__version__ = "0.1.0"

__all__ = [
    "Completion",
    "InvalidTaskError",
    "QueueBusyError",
    "QueueFullError",
    "QueueState",
    "RunOutcome",
    "StopReason",
    "Task",
    "WorkQueue",
    "WorkQueueError",
    "__version__",
    "always_continue",
    "continue_unless_error",
]
