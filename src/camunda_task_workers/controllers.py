"""Controllers for worker CLI commands."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from camunda_task_workers.config import Settings, load_settings
from camunda_task_workers.engine import RecordingTaskService
from camunda_task_workers.tasks.models import Task, TaskState, Variables
from camunda_task_workers.tasks.routing import TopicRouter
from camunda_task_workers.tasks.runner import run_task

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WorkerRunCommand:
    """CLI input for the long-running worker."""

    topics: tuple[str, ...] = ()


@dataclass(slots=True)
class TryTaskCommand:
    """CLI input for a local, engine-less handler run."""

    topic: str
    variables: tuple[str, ...]
    task_id: str = "local-task"


@dataclass(slots=True)
class TryTaskResult:
    """Printable outcome of a local handler run."""

    lines: list[str]
    success: bool


class WorkerCliController:
    """Application layer for CLI commands."""

    def run_worker(self, command: WorkerRunCommand) -> list[str]:
        """Subscribe to bound topics and serve until interrupted."""

        # Engine client is only needed to serve.
        from camunda_task_workers.engine.camunda import CamundaSubscription  # noqa: PLC0415

        settings = load_settings()
        router = TopicRouter.from_settings(settings)
        if command.topics:
            unknown = [topic for topic in command.topics if topic not in router.handlers]
            if unknown:
                raise ValueError(f"Topics are not bound to a handler: {', '.join(unknown)}")
            router = TopicRouter(
                handlers={topic: router.handlers[topic] for topic in command.topics},
            )
        subscription = CamundaSubscription(settings=settings, router=router)
        try:
            subscription.serve()
        except KeyboardInterrupt:
            logger.info("Worker %s interrupted", settings.worker.worker_id)
        return [f"Worker {settings.worker.worker_id} stopped."]

    def topics(self) -> list[str]:
        router = TopicRouter.from_settings(Settings.from_env())
        return [
            f"{topic} -> {handler.name} (input={handler.field})"
            for topic, handler in router.handlers.items()
        ]

    def try_task(self, command: TryTaskCommand) -> TryTaskResult:
        """Run the handler bound to a topic against the given variables."""

        router = TopicRouter.from_settings(Settings.from_env())
        handler = router.handler_for(command.topic)
        task = Task(
            task_id=command.task_id,
            topic=command.topic,
            variables=Variables.from_raw(parse_variable_assignments(command.variables)),
        )
        service = RecordingTaskService()
        run = run_task(handler, task, service)

        lines = [
            f"Task {run.task_id} on {run.topic} via {handler.name}: {run.state.value}",
            "History: " + " -> ".join(state.value for state in run.history),
        ]
        for call in service.calls:
            if call.kind == "complete":
                payload = call.variables.to_dict() if call.variables is not None else {}
                lines.append(f"complete {json.dumps(payload, sort_keys=True)}")
            else:
                lines.append(f"{call.kind}: {call.message}")
        return TryTaskResult(lines=lines, success=run.state == TaskState.COMPLETED)


def parse_variable_assignments(assignments: tuple[str, ...]) -> dict[str, Any]:
    """Parse ``name=value`` pairs; values are JSON when they parse, text otherwise."""

    values: dict[str, Any] = {}
    for assignment in assignments:
        if "=" not in assignment:
            raise ValueError(
                f"Invalid variable assignment {assignment!r}. Expected format '<name>=<value>'.",
            )
        name, raw = assignment.split("=", 1)
        name = name.strip()
        if not name:
            raise ValueError(f"Invalid variable assignment {assignment!r}. Name is required.")
        try:
            values[name] = json.loads(raw)
        except json.JSONDecodeError:
            values[name] = raw
    return values
