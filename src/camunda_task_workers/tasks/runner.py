"""Single-pass execution of one handler against one delivered task."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable

from camunda_task_workers.engine.base import TaskService
from camunda_task_workers.tasks.handlers import TaskHandler
from camunda_task_workers.tasks.models import Task, TaskRun, TaskState
from camunda_task_workers.tasks.validator import VariableValidationError, require_number

logger = logging.getLogger(__name__)


def run_task(handler: TaskHandler, task: Task, task_service: TaskService) -> TaskRun:
    """Validate, compute and report exactly once.

    Every in-handler error ends this invocation only: validation errors
    become business errors, computation errors become failures, and
    errors from the report call itself are logged on the returned run.
    """

    run = TaskRun(task_id=task.task_id, topic=task.topic)
    logger.debug("Task %s on %s received variables %r", task.task_id, task.topic, task.variables)

    run.transition(TaskState.VALIDATING)
    try:
        value = require_number(task.variables, handler.field)
    except VariableValidationError as error:
        message = str(error)
        run.transition(TaskState.BUSINESS_ERROR_REPORTED)
        run.message = message
        logger.info("Task %s rejected by %s: %s", task.task_id, handler.name, message)
        _report(run, lambda: task_service.handle_bpmn_error(task, message))
        return run

    run.transition(TaskState.COMPUTING)
    try:
        output = handler.apply(task, value)
    except Exception:  # noqa: BLE001
        logger.exception("Handler %s failed on task %s", handler.name, task.task_id)
        message = f"{handler.name} failed to build output variables"
        details = traceback.format_exc()
        run.transition(TaskState.FAILED)
        run.message = message
        _report(run, lambda: task_service.fail(task, message, details))
        return run

    run.output = output if output is not None else task.variables.dirty()
    run.transition(TaskState.COMPLETED)
    logger.info("Completing task %s with %r", task.task_id, run.output)
    if output is None:
        _report(run, lambda: task_service.complete(task))
    else:
        _report(run, lambda: task_service.complete(task, output))
    return run


def reject_task(task: Task, task_service: TaskService, reason: str) -> TaskRun:
    """Fail a task no handler can take, for example one on an unbound topic."""

    run = TaskRun(task_id=task.task_id, topic=task.topic)
    run.transition(TaskState.FAILED)
    run.message = reason
    logger.error("Task %s on %s rejected: %s", task.task_id, task.topic, reason)
    _report(run, lambda: task_service.fail(task, reason, reason))
    return run


def _report(run: TaskRun, call: Callable[[], None]) -> None:
    try:
        call()
    except Exception as error:  # noqa: BLE001
        run.delivery_error = str(error) or type(error).__name__
        logger.exception(
            "Failed to report %s for task %s; leaving it to lock expiry",
            run.state.value,
            run.task_id,
        )
        return
    logger.info("Task %s reported as %s", run.task_id, run.state.value)
