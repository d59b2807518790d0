"""Unit tests for the workqueue CLI commands."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from workqueue import __version__
from workqueue.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Run every command from an empty project directory with an empty home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for var in ("WORKQUEUE_LOG_LEVEL", "WORKQUEUE_DEMO_TASKS", "WORKQUEUE_DEMO_SEED"):
        monkeypatch.delenv(var, raising=False)
    yield tmp_path
    # The demo command installs handlers bound to the runner's temporary streams
    for handler in list(logging.getLogger().handlers):
        logging.getLogger().removeHandler(handler)


class TestVersionCommand:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestConfigShowCommand:
    """Tests for `workqueue config show`."""

    def test_shows_defaults(self) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "log_level: INFO" in result.stdout
        assert "label_format" in result.stdout

    def test_reflects_project_file(self, isolated_project: Path) -> None:
        config_dir = isolated_project / ".workqueue"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("demo:\n  tasks: 9\n")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "tasks: 9" in result.stdout

    def test_invalid_file_exits_with_error(self, isolated_project: Path) -> None:
        config_dir = isolated_project / ".workqueue"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("queue: [unclosed")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestDemoCommand:
    """Tests for `workqueue demo`."""

    def test_demo_runs_to_completion(
        self, isolated_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WORKQUEUE_LOG_LEVEL", "ERROR")
        config_dir = isolated_project / ".workqueue"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("demo:\n  error_step: 0.0\n")

        result = runner.invoke(app, ["demo", "--tasks", "3", "--seed", "5"])

        assert result.exit_code == 0
        assert "Run Outcomes" in result.stdout
        assert "emptied" in result.stdout

    def test_demo_continue_on_error_has_single_outcome(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WORKQUEUE_LOG_LEVEL", "ERROR")

        result = runner.invoke(
            app, ["demo", "--tasks", "2", "--seed", "1", "--continue-on-error"]
        )

        assert result.exit_code == 0
        assert "stopped" not in result.stdout
        assert "emptied" in result.stdout

    def test_demo_uses_configured_queue(
        self, isolated_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WORKQUEUE_LOG_LEVEL", "ERROR")
        config_dir = isolated_project / ".workqueue"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            'queue:\n  label_format: "job {id}"\ndemo:\n  error_step: 0.0\n'
        )

        result = runner.invoke(app, ["demo", "--tasks", "2", "--seed", "4"])

        assert result.exit_code == 0
        assert "job 1" in result.stdout
        assert "task #1" not in result.stdout

    def test_demo_rejects_negative_task_count(self) -> None:
        result = runner.invoke(app, ["demo", "--tasks", "-1"])
        assert result.exit_code != 0
