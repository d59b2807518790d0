"""Randomized demonstration tasks.

Each ``tick`` body pauses for a random number of timer ticks, raising
``state["level"]`` on every tick, and then fails with a probability that grows
with the level. The ``final`` body signals synchronously. The observer reports
every stop and the runner restarts the queue while tasks remain, so a run
drains the whole queue even when some tasks fail.
"""

import asyncio
import random
from collections.abc import Callable
from typing import Any

from workqueue.application.completion import Completion
from workqueue.application.work_queue import WorkQueue
from workqueue.domain.models import RunOutcome, StopReason, always_continue
from workqueue.infrastructure.config import DemoConfig
from workqueue.infrastructure.logger import get_logger

logger = get_logger(__name__)


class DemoRunner:
    """Builds a queue of random tasks and drains it, restarting after each stop."""

    def __init__(
        self,
        config: DemoConfig,
        queue: WorkQueue | None = None,
        emit: Callable[[str], None] | None = None,
        stop_on_error: bool = True,
    ):
        """Initialize demo runner.

        Args:
            config: Demo settings (task count, seed, tick timing)
            queue: Queue to fill (default: a fresh unbounded queue)
            emit: Sink for human-readable progress lines (default: logger)
            stop_on_error: If False, failed tasks do not stop the chain
        """
        self.config = config
        self.queue = queue if queue is not None else WorkQueue()
        self.stop_on_error = stop_on_error
        self.outcomes: list[RunOutcome] = []
        self._emit = emit or (lambda line: logger.info("demo", line=line))
        self._random = random.Random(config.seed)

    def build(self) -> None:
        """Push ``config.tasks`` tasks: random tickers followed by one synchronous task."""
        for index in range(self.config.tasks):
            body = self.final if index == self.config.tasks - 1 else self.tick
            self.queue.push(body, self.report_completion)

    async def run(self) -> list[RunOutcome]:
        """Drain the queue from a fresh state and return every run outcome."""
        state: dict[str, Any] = {"level": 0}
        while True:
            self.outcomes.append(await self.queue.run(state, self.on_stop))
            if self.queue.length() == 0:
                return self.outcomes

    def _failure(self, level: int) -> dict[str, str] | None:
        threshold = round(100 - self._random.random() * level * self.config.error_step * 100) / 100
        roll = self._random.random()
        if roll >= threshold:
            return {"error": f"random error: {roll:.3f}"}
        return None

    def tick(self, state: dict[str, Any], completion: Completion) -> None:
        label = completion.task.label
        pauses = round(self._random.random() * self.config.max_pause_ticks)
        self._emit(f"{label}: state {state}")
        state["res"] = state.get("res", 0) + 1
        loop = asyncio.get_running_loop()

        def wait(remaining: int) -> None:
            self._emit(f"{label}: wait ({remaining})...")
            state["level"] += 1
            remaining -= 1
            if remaining <= 0:
                completion(self._failure(state["level"]), state["res"])
                return
            loop.call_later(self.config.tick_seconds, wait, remaining)

        wait(pauses)

    def final(self, state: dict[str, Any], completion: Completion) -> None:
        self._emit(f"{completion.task.label} (last): state {state}")
        state["res"] = state.get("res", 0) + 1
        completion(self._failure(state["level"]), state["res"])

    def report_completion(self, state: dict[str, Any], error: Any, result: Any) -> bool:
        self._emit(f"complete: result {result}, state {state}")
        if error:
            self._emit(f"**** ERROR: {error}")
        if not self.stop_on_error:
            return always_continue(state, error, result)
        return not error

    def on_stop(
        self, reason: StopReason, state: dict[str, Any], error: Any, result: Any
    ) -> None:
        remaining = self.queue.length()
        self._emit(
            f"{reason.value}: state {state}, error {error}, result {result}; "
            f"{remaining} task{'' if remaining == 1 else 's'} remain"
        )
