"""Unit tests for configuration management."""

from pathlib import Path

import pytest
from workqueue.infrastructure.config import Config, ConfigManager, DemoConfig, QueueConfig
from workqueue.infrastructure.exceptions import ConfigError


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user config location at an empty directory and clear env overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "WORKQUEUE_LOG_LEVEL",
        "WORKQUEUE_QUEUE_MAX_SIZE",
        "WORKQUEUE_DEMO_TASKS",
        "WORKQUEUE_DEMO_SEED",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / ".workqueue").mkdir(parents=True)
    return root


class TestConfig:
    """Tests for Config model."""

    def test_default_config(self) -> None:
        """Test creating a config with defaults."""
        config = Config()

        assert config.version == "0.1.0"
        assert config.log_level == "INFO"
        assert config.queue.max_size is None
        assert config.queue.label_format == "task #{id}"
        assert config.demo.tasks == 3
        assert config.demo.max_pause_ticks == 4

    def test_custom_config_values(self) -> None:
        config = Config(
            log_level="DEBUG",
            queue=QueueConfig(max_size=50),
            demo=DemoConfig(tasks=10, seed=1),
        )

        assert config.log_level == "DEBUG"
        assert config.queue.max_size == 50
        assert config.demo.seed == 1

    def test_rejects_zero_max_size(self) -> None:
        with pytest.raises(ValueError):
            QueueConfig(max_size=0)


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_default_config(self, tmp_path: Path) -> None:
        """Test loading config with no files present."""
        config = ConfigManager(project_root=tmp_path).load_config()

        assert config.log_level == "INFO"
        assert config.queue.max_size is None

    def test_load_project_config(self, project_root: Path) -> None:
        (project_root / ".workqueue" / "config.yaml").write_text(
            """
log_level: DEBUG
queue:
  max_size: 500
            """
        )

        config = ConfigManager(project_root=project_root).load_config()

        assert config.log_level == "DEBUG"
        assert config.queue.max_size == 500

    def test_config_hierarchy(self, project_root: Path, isolated_home: Path) -> None:
        """Local overrides beat user config, which beats project defaults."""
        (project_root / ".workqueue" / "config.yaml").write_text(
            """
log_level: INFO
queue:
  max_size: 1000
  label_format: "job {id}"
demo:
  tasks: 2
            """
        )
        user_dir = isolated_home / ".workqueue"
        user_dir.mkdir()
        (user_dir / "config.yaml").write_text(
            """
demo:
  tasks: 5
  seed: 11
            """
        )
        (project_root / ".workqueue" / "local.yaml").write_text(
            """
log_level: DEBUG
queue:
  max_size: 2000
            """
        )

        config = ConfigManager(project_root=project_root).load_config()

        assert config.log_level == "DEBUG"
        assert config.queue.max_size == 2000
        assert config.queue.label_format == "job {id}"
        assert config.demo.tasks == 5
        assert config.demo.seed == 11

    def test_env_var_override(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (project_root / ".workqueue" / "config.yaml").write_text(
            """
log_level: INFO
queue:
  max_size: 1000
            """
        )
        monkeypatch.setenv("WORKQUEUE_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("WORKQUEUE_QUEUE_MAX_SIZE", "3000")
        monkeypatch.setenv("WORKQUEUE_DEMO_SEED", "99")

        config = ConfigManager(project_root=project_root).load_config()

        assert config.log_level == "ERROR"
        assert config.queue.max_size == 3000
        assert config.demo.seed == 99

    def test_config_is_cached(self, project_root: Path) -> None:
        manager = ConfigManager(project_root=project_root)
        assert manager.load_config() is manager.load_config()

    def test_malformed_yaml_raises_config_error(self, project_root: Path) -> None:
        path = project_root / ".workqueue" / "config.yaml"
        path.write_text("queue: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(project_root=project_root).load_config()

        assert exc_info.value.path == str(path)

    def test_non_mapping_yaml_raises_config_error(self, project_root: Path) -> None:
        (project_root / ".workqueue" / "config.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            ConfigManager(project_root=project_root).load_config()

    def test_invalid_values_raise_config_error(self, project_root: Path) -> None:
        (project_root / ".workqueue" / "config.yaml").write_text("demo:\n  tasks: -1\n")

        with pytest.raises(ConfigError):
            ConfigManager(project_root=project_root).load_config()

    def test_get_log_dir(self, tmp_path: Path) -> None:
        log_dir = ConfigManager(project_root=tmp_path).get_log_dir()

        assert log_dir == tmp_path / ".workqueue" / "logs"
        assert log_dir.exists()
