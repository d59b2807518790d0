"""workqueue CLI - inspect configuration and run the demonstration queue."""

import asyncio
import sys

import typer
import yaml
from rich.console import Console
from rich.table import Table

from workqueue import __version__
from workqueue.infrastructure.exceptions import WorkQueueError

# Initialize Typer app
app = typer.Typer(
    name="workqueue",
    help="Sequential FIFO task executor",
    no_args_is_help=True,
)

console = Console()


# ===== Version =====
@app.command()
def version() -> None:
    """Show workqueue version."""
    console.print(f"[bold]workqueue[/bold] version [cyan]{__version__}[/cyan]")


# ===== Config Commands =====
config_app = typer.Typer(help="Configuration management", no_args_is_help=True)
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show() -> None:
    """Print the merged configuration as YAML."""
    from workqueue.infrastructure import ConfigManager

    try:
        config = ConfigManager().load_config()
    except WorkQueueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False).rstrip())


# ===== Demo =====
@app.command()
def demo(
    tasks: int | None = typer.Option(None, min=0, help="Number of tasks to queue"),
    seed: int | None = typer.Option(None, help="Random seed for reproducible runs"),
    stop_on_error: bool = typer.Option(
        True, "--stop-on-error/--continue-on-error", help="Stop the chain when a task fails"
    ),
    log_to_file: bool = typer.Option(False, help="Also write JSON logs to .workqueue/logs"),
) -> None:
    """Run a queue of randomly pausing, randomly failing tasks.

    Every time the chain stops, the remaining tasks are reported and the queue
    is restarted with the same state until it is empty.

    Examples:
        workqueue demo                          # 3 tasks, random outcome
        workqueue demo --tasks 5 --seed 7       # reproducible run
        workqueue demo --continue-on-error      # failures never stop the chain
    """
    from workqueue.application import DemoRunner, WorkQueue
    from workqueue.infrastructure import ConfigManager, setup_logging

    try:
        config_manager = ConfigManager()
        config = config_manager.load_config()
    except WorkQueueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    setup_logging(
        log_level=config.log_level,
        log_dir=config_manager.get_log_dir() if log_to_file else None,
    )

    demo_config = config.demo.model_copy(
        update={
            key: value
            for key, value in (("tasks", tasks), ("seed", seed))
            if value is not None
        }
    )
    runner = DemoRunner(
        demo_config,
        queue=WorkQueue.from_config(config.queue),
        emit=console.print,
        stop_on_error=stop_on_error,
    )

    try:
        runner.build()
        outcomes = asyncio.run(runner.run())
    except WorkQueueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    table = Table(title="Run Outcomes")
    table.add_column("#", justify="right")
    table.add_column("Reason")
    table.add_column("Tasks", justify="right")
    table.add_column("Error")
    table.add_column("Result")
    for index, outcome in enumerate(outcomes, start=1):
        color = "yellow" if outcome.stopped else "green"
        table.add_row(
            str(index),
            f"[{color}]{outcome.reason.value}[/{color}]",
            str(outcome.tasks_run),
            "-" if outcome.error is None else str(outcome.error),
            "-" if outcome.result is None else str(outcome.result),
        )
    console.print(table)


# ===== Main Entry Point =====
def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
