"""Engine task service implementations."""

from camunda_task_workers.engine.base import TaskService
from camunda_task_workers.engine.memory import RecordingTaskService, ReportedCall

__all__ = [
    "RecordingTaskService",
    "ReportedCall",
    "TaskService",
]
