"""Configuration management with hierarchical loading."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from workqueue.infrastructure.exceptions import ConfigError
from workqueue.infrastructure.logger import get_logger

logger = get_logger(__name__)


class QueueConfig(BaseModel):
    """Work queue configuration."""

    max_size: int | None = Field(default=None, ge=1)  # None = unbounded
    label_format: str = "task #{id}"


class DemoConfig(BaseModel):
    """Settings for the randomized demonstration run."""

    tasks: int = Field(default=3, ge=0)
    seed: int | None = None
    max_pause_ticks: int = Field(default=4, ge=0)
    tick_seconds: float = Field(default=0.1, ge=0.0)
    error_step: float = Field(default=0.2, ge=0.0, le=1.0)


class Config(BaseModel):
    """Main configuration model."""

    version: str = "0.1.0"
    log_level: str = "INFO"
    queue: QueueConfig = Field(default_factory=QueueConfig)
    demo: DemoConfig = Field(default_factory=DemoConfig)


class ConfigManager:
    """Manage configuration loading from multiple sources with hierarchy."""

    def __init__(self, project_root: Path | None = None) -> None:
        """Initialize config manager.

        Args:
            project_root: Root directory of the project (default: current directory)
        """
        self.project_root = project_root or Path.cwd()
        self._config: Config | None = None

    def load_config(self) -> Config:
        """Load configuration from all sources in hierarchy order.

        Configuration hierarchy (highest priority last):
        1. System defaults (embedded in Config model)
        2. Project defaults (.workqueue/config.yaml)
        3. User overrides (~/.workqueue/config.yaml)
        4. Project overrides (.workqueue/local.yaml)
        5. Environment variables (WORKQUEUE_* prefix)

        Returns:
            Merged configuration

        Raises:
            ConfigError: If a file cannot be parsed or the merged result is invalid
        """
        if self._config is not None:
            return self._config

        config_dict: dict[str, Any] = {}

        for path in (
            self.project_root / ".workqueue" / "config.yaml",
            Path.home() / ".workqueue" / "config.yaml",
            self.project_root / ".workqueue" / "local.yaml",
        ):
            if path.exists():
                config_dict = self._merge_dicts(config_dict, self._load_yaml(path))
                logger.debug("config_file_loaded", path=str(path))

        config_dict = self._apply_env_vars(config_dict)

        try:
            self._config = Config(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        return self._config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML configuration file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML: {e}", path=str(path)) from e
        if not isinstance(data, dict):
            raise ConfigError("Top level of a config file must be a mapping", path=str(path))
        return data

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_vars(self, config_dict: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variables with WORKQUEUE_ prefix."""
        env_mappings = {
            "WORKQUEUE_LOG_LEVEL": ["log_level"],
            "WORKQUEUE_QUEUE_MAX_SIZE": ["queue", "max_size"],
            "WORKQUEUE_DEMO_TASKS": ["demo", "tasks"],
            "WORKQUEUE_DEMO_SEED": ["demo", "seed"],
        }

        for env_var, path in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                current = config_dict
                for key in path[:-1]:
                    if key not in current:
                        current[key] = {}
                    current = current[key]
                try:
                    current[path[-1]] = int(value)
                except ValueError:
                    current[path[-1]] = value

        return config_dict

    def get_log_dir(self) -> Path:
        """Get path to log directory."""
        log_dir = self.project_root / ".workqueue" / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir
