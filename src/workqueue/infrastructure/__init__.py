"""Infrastructure layer for workqueue."""

from workqueue.infrastructure.config import Config, ConfigManager, DemoConfig, QueueConfig
from workqueue.infrastructure.exceptions import (
    ConfigError,
    InvalidTaskError,
    QueueBusyError,
    QueueFullError,
    WorkQueueError,
)
from workqueue.infrastructure.logger import get_logger, setup_logging

__all__ = [
    "Config",
    "ConfigError",
    "ConfigManager",
    "DemoConfig",
    "InvalidTaskError",
    "QueueBusyError",
    "QueueConfig",
    "QueueFullError",
    "WorkQueueError",
    "get_logger",
    "setup_logging",
]
