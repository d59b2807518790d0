"""Sequential FIFO work queue and its run loop.

The queue holds pending tasks in push order. ``run`` removes the head task,
dispatches its body, waits for the task's completion signal, asks the task's
completion policy whether to continue, and repeats until the queue is empty or
a policy returns False. Exactly one body is in flight at any time.

State transitions for one run invocation:
    IDLE/STOPPED/EMPTIED -> RUNNING (run called)
    RUNNING -> RUNNING (task completed, policy allowed continuation)
    RUNNING -> STOPPED (policy returned False)
    RUNNING -> EMPTIED (no pending task left)
"""

import asyncio
import inspect
from collections import deque
from collections.abc import Awaitable
from typing import Any

from pydantic import ValidationError

from workqueue.application.completion import Completion
from workqueue.domain.models import (
    CompletionPolicy,
    QueueState,
    RunOutcome,
    StopObserver,
    StopReason,
    Task,
    TaskBody,
    continue_unless_error,
)
from workqueue.infrastructure.config import QueueConfig
from workqueue.infrastructure.exceptions import InvalidTaskError, QueueBusyError, QueueFullError
from workqueue.infrastructure.logger import get_logger

logger = get_logger(__name__)


class WorkQueue:
    """Ordered collection of tasks plus the loop that executes them one by one.

    Usage:
        queue = WorkQueue()
        queue.push(fetch, label="fetch")
        queue.push(parse, on_complete=always_continue)

        outcome = await queue.run({"level": 0}, on_stop=report)
        if outcome.reason == StopReason.STOPPED:
            ...  # queue.length() tasks are still pending

    Each queue owns its id counter, so independent queues never share state.
    """

    def __init__(self, max_size: int | None = None, label_format: str = "task #{id}"):
        """Initialize work queue.

        Args:
            max_size: Maximum number of pending tasks (None for unbounded)
            label_format: Format for generated labels, receives ``id``
        """
        self.max_size = max_size
        self.label_format = label_format

        self._pending: deque[Task] = deque()
        self._next_id = 1
        self._state = QueueState.IDLE
        self._current: Task | None = None
        # Strong references to scheduled runs and async bodies
        self._background: set[asyncio.Future[Any]] = set()

    @classmethod
    def from_config(cls, config: QueueConfig) -> "WorkQueue":
        """Build a queue from the ``queue`` section of the configuration."""
        return cls(max_size=config.max_size, label_format=config.label_format)

    # ----- Admission -----

    def push(
        self,
        body: TaskBody,
        on_complete: CompletionPolicy | None = None,
        label: str | None = None,
    ) -> Task:
        """Append a new task to the tail of the queue.

        Args:
            body: Called as ``body(state, completion)``; must eventually call
                ``completion(error, result)`` exactly once. Coroutine functions
                are accepted: a coroutine that returns without signaling
                completes the task with its return value. The next task does
                not start until a coroutine body has returned, even when it
                signaled earlier.
            on_complete: Completion policy ``(state, error, result) -> bool``.
                Defaults to ``continue_unless_error``.
            label: Optional name used in logs (must be a string)

        Returns:
            The created task

        Raises:
            InvalidTaskError: If body is missing or not callable, on_complete
                is given but not callable, or label is not a string
            QueueFullError: If the queue already holds max_size pending tasks
        """
        if body is None or not callable(body):
            raise InvalidTaskError("A task must have a callable body")
        if on_complete is not None and not callable(on_complete):
            raise InvalidTaskError("A task completion policy must be callable")
        if label is not None and not isinstance(label, str):
            raise InvalidTaskError("A task label must be a string")
        if self.max_size is not None and len(self._pending) >= self.max_size:
            raise QueueFullError(self.max_size)

        task_id = self._next_id
        try:
            task = Task(
                id=task_id,
                label=label or self.label_format.format(id=task_id),
                body=body,
                on_complete=on_complete or continue_unless_error,
            )
        except ValidationError as e:
            raise InvalidTaskError(f"Invalid task: {e}") from e

        # Ids are only consumed by admitted tasks
        self._next_id += 1
        self._pending.append(task)

        logger.debug("task_pushed", task_id=task.id, label=task.label, pending=len(self._pending))
        return task

    # ----- Removal / introspection -----

    def pop_head(self) -> Task | None:
        """Remove and return the next task to run, without running it."""
        try:
            return self._pending.popleft()
        except IndexError:
            return None

    def pop_tail(self) -> Task | None:
        """Remove and return the most recently pushed task, without running it."""
        try:
            return self._pending.pop()
        except IndexError:
            return None

    def clear(self) -> int:
        """Discard every pending task.

        A task that is already executing is not affected.

        Returns:
            Number of tasks discarded
        """
        discarded = len(self._pending)
        self._pending.clear()
        if discarded:
            logger.info("queue_cleared", discarded=discarded)
        return discarded

    def length(self) -> int:
        """Number of pending (not yet started) tasks."""
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def pending(self) -> tuple[Task, ...]:
        """Snapshot of pending tasks in execution order."""
        return tuple(self._pending)

    @property
    def state(self) -> QueueState:
        """State of the most recent run invocation."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == QueueState.RUNNING

    @property
    def current_task(self) -> Task | None:
        """Task whose body is in flight, if any."""
        return self._current

    def __repr__(self) -> str:
        return f"WorkQueue(pending={len(self._pending)}, state={self._state.value})"

    # ----- Execution -----

    async def run(self, state: Any = None, on_stop: StopObserver | None = None) -> RunOutcome:
        """Execute pending tasks head-first until the queue empties or a policy stops it.

        Args:
            state: Value passed unchanged to every body and completion policy
            on_stop: Called once as ``on_stop(reason, state, error, result)``
                when this invocation ends; may be a coroutine function

        Returns:
            RunOutcome with the stop reason, the state, and the last error/result

        Raises:
            QueueBusyError: If this queue is already running
        """
        self._claim(on_stop)
        return await self._run_loop(state, on_stop)

    def start(
        self, state: Any = None, on_stop: StopObserver | None = None
    ) -> "asyncio.Task[RunOutcome]":
        """Schedule ``run`` on the running event loop and return immediately.

        Returns:
            The asyncio task wrapping the run; await it for the RunOutcome

        Raises:
            RuntimeError: If no event loop is running; the queue is left unchanged
            QueueBusyError: If this queue is already running
        """
        loop = asyncio.get_running_loop()
        self._claim(on_stop)
        runner = loop.create_task(self._run_loop(state, on_stop))
        self._background.add(runner)
        runner.add_done_callback(self._background.discard)
        return runner

    def _claim(self, on_stop: StopObserver | None) -> None:
        if on_stop is not None and not callable(on_stop):
            raise TypeError("on_stop must be callable")
        if self._state == QueueState.RUNNING:
            raise QueueBusyError()
        self._state = QueueState.RUNNING

    async def _run_loop(self, state: Any, on_stop: StopObserver | None) -> RunOutcome:
        tasks_run = 0
        error: Any = None
        result: Any = None

        try:
            while True:
                task = self.pop_head()
                if task is None:
                    reason = StopReason.EMPTIED
                    error = result = None
                    break

                tasks_run += 1
                error, result = await self._execute(task, state)

                if self._apply_policy(task, state, error, result) is False:
                    reason = StopReason.STOPPED
                    break
        except BaseException:
            self._state = QueueState.STOPPED
            raise

        # Mark the queue idle before notifying, so the observer may restart it
        self._state = QueueState(reason.value)
        if reason == StopReason.STOPPED:
            logger.info(
                "queue_stopped",
                tasks_run=tasks_run,
                pending=len(self._pending),
                error=_describe(error),
            )
        else:
            logger.info("queue_emptied", tasks_run=tasks_run)

        outcome = RunOutcome(
            reason=reason, state=state, error=error, result=result, tasks_run=tasks_run
        )
        if on_stop is not None:
            await _maybe_await(on_stop(reason, state, error, result))
        return outcome

    async def _execute(self, task: Task, state: Any) -> tuple[Any, Any]:
        """Dispatch one task body and wait for its completion signal."""
        completion = Completion(task)
        watched: asyncio.Future[Any] | None = None
        self._current = task
        logger.info(
            "task_dequeued", task_id=task.id, label=task.label, pending=len(self._pending)
        )

        try:
            try:
                returned = task.body(state, completion)
            except Exception as e:
                if completion.done:
                    logger.exception(
                        "task_body_raised_after_completion", task_id=task.id, label=task.label
                    )
                else:
                    logger.warning(
                        "task_body_raised", task_id=task.id, label=task.label, error=str(e)
                    )
                    completion.complete(e, None)
            else:
                if inspect.isawaitable(returned):
                    watched = self._watch_body(returned, completion)

            error, result = await completion.wait()
            if watched is not None and not watched.done():
                # Signaled early: the coroutine is still in flight until it returns
                await asyncio.wait({watched})
        finally:
            self._current = None

        logger.info(
            "task_completed",
            task_id=task.id,
            label=task.label,
            failed=error is not None,
        )
        return error, result

    def _watch_body(
        self, returned: Awaitable[Any], completion: Completion
    ) -> "asyncio.Future[Any]":
        """Run an async body and complete the task from its outcome if it did not signal."""
        future = asyncio.ensure_future(returned)
        self._background.add(future)

        def _finished(fut: "asyncio.Future[Any]") -> None:
            self._background.discard(fut)
            task = completion.task
            if fut.cancelled():
                if not completion.done:
                    completion.complete(asyncio.CancelledError(), None)
                return

            exc = fut.exception()
            if exc is not None:
                if completion.done:
                    logger.error(
                        "task_body_raised_after_completion",
                        task_id=task.id,
                        label=task.label,
                        error=str(exc),
                    )
                else:
                    logger.warning(
                        "task_body_raised", task_id=task.id, label=task.label, error=str(exc)
                    )
                    completion.complete(exc, None)
            elif not completion.done:
                completion.complete(None, fut.result())

        future.add_done_callback(_finished)
        return future

    def _apply_policy(self, task: Task, state: Any, error: Any, result: Any) -> Any:
        try:
            return task.on_complete(state, error, result)
        except Exception:
            logger.exception("completion_policy_failed", task_id=task.id, label=task.label)
            raise


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


def _describe(error: Any) -> str | None:
    if error is None:
        return None
    if isinstance(error, BaseException):
        return f"{type(error).__name__}: {error}"
    return repr(error)
