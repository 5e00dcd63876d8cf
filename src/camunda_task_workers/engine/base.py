"""Engine-facing interfaces consumed by the task runner."""

from __future__ import annotations

from typing import Protocol

from camunda_task_workers.tasks.models import Task, Variables


class TaskService(Protocol):
    """Terminal reports for one task; exactly one of them is called per task."""

    def complete(self, task: Task, variables: Variables | None = None) -> None:
        """Complete the task.

        Without ``variables`` the values the handler set on
        ``task.variables`` are sent instead.
        """

    def handle_bpmn_error(self, task: Task, message: str) -> None:
        """Report a business error the process definition can branch on."""

    def fail(self, task: Task, message: str, details: str) -> None:
        """Report a technical failure; engine retries or raises an incident."""
