"""CLI entrypoint for camunda-task-workers."""

import logging
import os

import rich_click as click

from camunda_task_workers import __version__
from camunda_task_workers.controllers import (
    TryTaskCommand,
    WorkerCliController,
    WorkerRunCommand,
)

click.rich_click.USE_MARKDOWN = True
WORKER_CONTROLLER = WorkerCliController()
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@click.group()
@click.version_option(version=__version__, prog_name="camunda-task-workers")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Root log level. Defaults to CAMUNDA_LOG_LEVEL or INFO.",
)
def camunda_task_workers(log_level: str | None) -> None:
    """External task workers for the Camunda engine."""

    level = (log_level or os.getenv("CAMUNDA_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


@camunda_task_workers.command("run")
@click.option(
    "--topic",
    "topics",
    multiple=True,
    help="Serve only this bound topic. Can be repeated.",
)
def run(topics: tuple[str, ...]) -> None:
    """Subscribe to the bound topics and process tasks until interrupted."""

    try:
        lines = WORKER_CONTROLLER.run_worker(WorkerRunCommand(topics=topics))
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@camunda_task_workers.command("topics")
def topics() -> None:
    """List topic to handler bindings."""

    try:
        lines = WORKER_CONTROLLER.topics()
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@camunda_task_workers.command("try")
@click.argument("topic")
@click.option(
    "--var",
    "variables",
    multiple=True,
    help="Input variable as name=value; JSON values are decoded. Can be repeated.",
)
@click.option("--task-id", default="local-task", show_default=True, help="Task id to report.")
def try_task(topic: str, variables: tuple[str, ...], task_id: str) -> None:
    """Run the handler bound to TOPIC locally, without an engine."""

    try:
        result = WORKER_CONTROLLER.try_task(
            TryTaskCommand(topic=topic, variables=variables, task_id=task_id),
        )
    except (KeyError, ValueError) as error:
        message = error.args[0] if isinstance(error, KeyError) else str(error)
        raise click.ClickException(message) from error
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Task was not completed.")


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    camunda_task_workers()
