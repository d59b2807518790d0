"""Application services for workqueue."""

from workqueue.application.completion import Completion
from workqueue.application.demo_tasks import DemoRunner
from workqueue.application.work_queue import WorkQueue

__all__ = [
    "Completion",
    "DemoRunner",
    "WorkQueue",
]
