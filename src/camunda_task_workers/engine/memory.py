"""In-process task service used by the ``try`` command and tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from camunda_task_workers.tasks.models import Task, Variables


@dataclass(slots=True)
class ReportedCall:
    """One terminal call received by the recording service."""

    kind: str
    task_id: str
    variables: Variables | None = None
    message: str | None = None
    details: str | None = None


@dataclass(slots=True)
class RecordingTaskService:
    """Keeps every terminal call in memory instead of talking to an engine."""

    calls: list[ReportedCall] = field(default_factory=list)

    def complete(self, task: Task, variables: Variables | None = None) -> None:
        sent = variables if variables is not None else task.variables.dirty()
        self.calls.append(ReportedCall(kind="complete", task_id=task.task_id, variables=sent))

    def handle_bpmn_error(self, task: Task, message: str) -> None:
        self.calls.append(ReportedCall(kind="bpmn_error", task_id=task.task_id, message=message))

    def fail(self, task: Task, message: str, details: str) -> None:
        self.calls.append(
            ReportedCall(kind="failure", task_id=task.task_id, message=message, details=details),
        )

    def kinds(self) -> list[str]:
        return [call.kind for call in self.calls]
