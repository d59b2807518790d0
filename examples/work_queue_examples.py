"""Work Queue Examples

Usage patterns for WorkQueue: a flat chain in place of nested callbacks,
error-tolerant policies, retries driven by a completion policy, and async
bodies.

Run with: python examples/work_queue_examples.py
"""

import asyncio
from typing import Any

from workqueue import Completion, StopReason, WorkQueue, always_continue
from workqueue.infrastructure import setup_logging


async def flat_chain() -> dict[str, Any]:
    """Three timer-driven steps that would otherwise be three nested callbacks."""
    queue = WorkQueue()

    def step(name: str, delay: float):
        def body(state: dict[str, Any], completion: Completion) -> None:
            loop = asyncio.get_running_loop()
            state.setdefault("steps", []).append(name)
            loop.call_later(delay, completion, None, name)

        return body

    queue.push(step("connect", 0.05), label="connect")
    queue.push(step("authenticate", 0.02), label="authenticate")
    queue.push(step("fetch", 0.01), label="fetch")

    outcome = await queue.run({})
    return outcome.state


async def tolerate_errors() -> list[str]:
    """Keep going after a failed task by supplying a permissive policy."""
    queue = WorkQueue()
    log: list[str] = []

    def failing(state: Any, completion: Completion) -> None:
        log.append("failing")
        completion(RuntimeError("disk full"), None)

    def cleanup(state: Any, completion: Completion) -> None:
        log.append("cleanup")
        completion(None, None)

    queue.push(failing, always_continue)
    queue.push(cleanup)

    await queue.run()
    return log


async def retry_from_policy(max_attempts: int = 3) -> int:
    """Re-push a failing task from its completion policy until it succeeds."""
    queue = WorkQueue()
    attempts = {"count": 0}

    def flaky(state: Any, completion: Completion) -> None:
        attempts["count"] += 1
        failed = attempts["count"] < max_attempts
        completion("temporary failure" if failed else None, attempts["count"])

    def retry(state: Any, error: Any, result: Any) -> bool:
        if error is not None:
            queue.push(flaky, retry)
        return True

    queue.push(flaky, retry)
    await queue.run()
    return attempts["count"]


async def async_bodies() -> Any:
    """Coroutine bodies complete with their return value."""
    queue = WorkQueue()

    async def download(state: dict[str, Any], completion: Completion) -> int:
        await asyncio.sleep(0.01)
        state["bytes"] = 2048
        return state["bytes"]

    async def checksum(state: dict[str, Any], completion: Completion) -> str:
        return f"sha:{state['bytes']:x}"

    queue.push(download)
    queue.push(checksum, lambda state, error, result: False)

    outcome = await queue.run({})
    assert outcome.reason == StopReason.STOPPED
    return outcome.result


async def main() -> None:
    setup_logging(log_level="WARNING")
    print("flat chain:", await flat_chain())
    print("tolerate errors:", await tolerate_errors())
    print("attempts until success:", await retry_from_policy())
    print("async result:", await async_bodies())


if __name__ == "__main__":
    asyncio.run(main())
