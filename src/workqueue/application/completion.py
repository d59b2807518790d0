"""One-shot completion signal handed to every task body."""

import asyncio
import threading
from typing import Any

from workqueue.domain.models import Task
from workqueue.infrastructure.logger import get_logger

logger = get_logger(__name__)


class Completion:
    """Single-use completion signal for one dispatched task.

    A task body receives its ``Completion`` and must call it exactly once, now
    or later, with ``(error, result)``. The first call resolves the signal;
    any later call is ignored. Calls from threads other than the event loop's
    are handed over with ``call_soon_threadsafe``.

    Usage:
        def body(state, completion):
            loop = asyncio.get_running_loop()
            loop.call_later(0.1, completion, None, "done")
    """

    def __init__(self, task: Task, loop: asyncio.AbstractEventLoop | None = None):
        """Initialize completion signal.

        Args:
            task: Task this signal belongs to
            loop: Event loop the run loop is waiting on (default: running loop)
        """
        self.task = task
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[tuple[Any, Any]] = self._loop.create_future()
        self._lock = threading.Lock()
        self._signaled = False
        self._loop_thread = threading.get_ident()

    @property
    def done(self) -> bool:
        """True once the task has signaled completion."""
        return self._signaled

    def complete(self, error: Any = None, result: Any = None) -> bool:
        """Signal that the task is finished.

        Args:
            error: Anything other than None marks the task as failed
            result: Task result handed to the completion policy

        Returns:
            True if this call resolved the signal, False if it was already resolved
        """
        with self._lock:
            if self._signaled:
                logger.warning(
                    "duplicate_completion_ignored",
                    task_id=self.task.id,
                    label=self.task.label,
                )
                return False
            self._signaled = True

        if threading.get_ident() == self._loop_thread:
            self._resolve(error, result)
        else:
            self._loop.call_soon_threadsafe(self._resolve, error, result)
        return True

    def __call__(self, error: Any = None, result: Any = None) -> bool:
        return self.complete(error, result)

    def _resolve(self, error: Any, result: Any) -> None:
        # The waiting run loop may have been cancelled in the meantime
        if not self._future.done():
            self._future.set_result((error, result))

    async def wait(self) -> tuple[Any, Any]:
        """Wait for the signal and return ``(error, result)``."""
        return await self._future

    def __repr__(self) -> str:
        return f"Completion(task_id={self.task.id}, done={self._signaled})"
