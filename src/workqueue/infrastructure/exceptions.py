"""Exception hierarchy for workqueue.

Task runtime failures are not exceptions here: they travel as the ``error``
value of a completion signal and are judged by the task's completion policy.
The classes below cover misuse of the queue itself.
"""


class WorkQueueError(Exception):
    """Base exception for all workqueue errors."""

    pass


class InvalidTaskError(WorkQueueError, TypeError):
    """A task could not be constructed.

    Raised synchronously by ``WorkQueue.push`` when the body is missing or not
    callable, or when a completion policy is given but is not callable. The
    queue is never modified when this is raised.
    """

    pass


class QueueFullError(WorkQueueError):
    """The queue already holds ``max_size`` pending tasks.

    Attributes:
        max_size: Admission bound configured on the queue
    """

    def __init__(self, max_size: int):
        """Initialize queue full error.

        Args:
            max_size: Admission bound configured on the queue
        """
        super().__init__(f"Work queue is full ({max_size} pending tasks)")
        self.max_size = max_size


class QueueBusyError(WorkQueueError):
    """``run`` was called while another run of the same queue is in progress."""

    def __init__(self, message: str = "Work queue is already running"):
        super().__init__(message)


class ConfigError(WorkQueueError):
    """Configuration file could not be read or failed validation.

    Attributes:
        path: Offending file, if the error came from a file
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.args[0]} ({self.path})"
        return str(self.args[0])
