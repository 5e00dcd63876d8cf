"""Adapter between the Camunda external task client and the task runner."""

from __future__ import annotations

import logging
import signal
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from camunda.client.external_task_client import ExternalTaskClient
from camunda.external_task.external_task import ExternalTask, TaskResult
from camunda.external_task.external_task_executor import ExternalTaskExecutor
from camunda.external_task.external_task_worker import ExternalTaskWorker, NoExternalTaskFound

from camunda_task_workers.config import Settings
from camunda_task_workers.tasks.models import Task, TaskRun, Variables
from camunda_task_workers.tasks.routing import TopicRouter
from camunda_task_workers.tasks.runner import reject_task, run_task

logger = logging.getLogger(__name__)


def task_from_external(external_task: ExternalTask) -> Task:
    return Task(
        task_id=external_task.get_task_id(),
        topic=external_task.get_topic_name(),
        variables=Variables.from_raw(external_task.get_variables() or {}),
    )


class CamundaTaskService:
    """Sends the runner's single terminal call to the engine.

    The call happens inside the action, so transport errors reach the
    runner, which logs them against that task only.
    """

    def __init__(
        self,
        external_task: ExternalTask,
        client: ExternalTaskClient,
        *,
        failure_retries: int = 0,
        failure_retry_timeout_ms: int = 5_000,
    ) -> None:
        self.external_task = external_task
        self.client = client
        self.failure_retries = failure_retries
        self.failure_retry_timeout_ms = failure_retry_timeout_ms
        self.result: TaskResult | None = None

    def complete(self, task: Task, variables: Variables | None = None) -> None:
        sent = variables if variables is not None else task.variables.dirty()
        result = self._record(task, lambda: self.external_task.complete(sent.to_dict()))
        self._send(
            task,
            "completion",
            lambda: self.client.complete(task.task_id, result.global_variables),
        )

    def handle_bpmn_error(self, task: Task, message: str) -> None:
        # Boundary events match on the error code, so the message is the code.
        result = self._record(
            task,
            lambda: self.external_task.bpmn_error(error_code=message, error_message=message),
        )
        self._send(
            task,
            "business error",
            lambda: self.client.bpmn_failure(
                task.task_id,
                result.bpmn_error_code,
                result.error_message,
                result.global_variables,
            ),
        )

    def fail(self, task: Task, message: str, details: str) -> None:
        result = self._record(
            task,
            lambda: self.external_task.failure(
                error_message=message,
                error_details=details,
                max_retries=self.failure_retries,
                retry_timeout=self.failure_retry_timeout_ms,
            ),
        )
        self._send(
            task,
            "failure",
            lambda: self.client.failure(
                task.task_id,
                result.error_message,
                result.error_details,
                result.retries,
                result.retry_timeout,
            ),
        )

    def _record(self, task: Task, build: Callable[[], TaskResult]) -> TaskResult:
        if self.result is not None:
            raise RuntimeError(f"Task {task.task_id} was already reported")
        self.result = build()
        return self.result

    def _send(self, task: Task, kind: str, call: Callable[[], bool]) -> None:
        if not call():
            raise RuntimeError(f"Engine did not accept {kind} for task {task.task_id}")


class ReportingTaskExecutor(ExternalTaskExecutor):
    """Runs an action that reports by itself; nothing is sent afterwards."""

    def execute_task(self, task: ExternalTask, action: Callable[[ExternalTask], Any]) -> Any:
        try:
            return action(task)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Task %s on %s aborted; leaving it to lock expiry",
                task.get_task_id(),
                task.get_topic_name(),
            )
            return None


class CamundaTaskWorker(ExternalTaskWorker):
    """Client worker with per-task error isolation and a clean stop on SIGINT/SIGTERM."""

    def __init__(
        self,
        worker_id: str,
        base_url: str,
        config: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(worker_id, base_url, config)
        self.executor = ReportingTaskExecutor(self.worker_id, self.client)
        self._stop_requested = False

    def request_stop(self) -> None:
        self._stop_requested = True

    def subscribe(
        self,
        topic_names: list[str],
        action: Callable[[ExternalTask], Any],
        process_variables: dict[str, Any] | None = None,
        variables: list[str] | None = None,
    ) -> None:
        """Fetch and execute until a stop is requested.

        The in-flight fetch and its batch finish before the loop exits.
        """

        with self._signal_handlers():
            while not self._stop_requested:
                try:
                    self.fetch_and_execute(topic_names, action, process_variables, variables)
                except NoExternalTaskFound:
                    continue
                except Exception:  # noqa: BLE001
                    sleep_seconds = self.config.get("sleepSeconds", self.DEFAULT_SLEEP_SECONDS)
                    logger.exception(
                        "Fetch for %s failed; retrying in %s s",
                        ", ".join(topic_names),
                        sleep_seconds,
                    )
                    self._sleep_with_stop(sleep_seconds)
        logger.info("Worker %s stopped", self.worker_id)

    def _sleep_with_stop(self, seconds: float) -> None:
        deadline = time.monotonic() + seconds
        while not self._stop_requested and time.monotonic() < deadline:
            time.sleep(min(0.1, max(0.0, deadline - time.monotonic())))

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        def _handler(signum: int, _: object | None) -> None:
            logger.info("Received %s, stopping after the current batch", signal.Signals(signum).name)
            self.request_stop()

        originals: dict[signal.Signals, Any] = {}
        try:
            for signum in (signal.SIGINT, signal.SIGTERM):
                originals[signum] = signal.getsignal(signum)
                signal.signal(signum, _handler)
        except ValueError:
            # Signal handlers can only be installed in main thread.
            pass
        try:
            yield
        finally:
            for signum, original in originals.items():
                try:
                    signal.signal(signum, original)
                except ValueError:
                    pass


class CamundaSubscription:
    """Subscribes one client worker to every bound topic."""

    def __init__(
        self,
        *,
        settings: Settings,
        router: TopicRouter,
        worker_factory: Callable[..., ExternalTaskWorker] = CamundaTaskWorker,
    ) -> None:
        self.settings = settings
        self.router = router
        self.worker = worker_factory(
            worker_id=settings.worker.worker_id,
            base_url=settings.engine.base_url,
            config=self.client_config(),
        )
        self.last_run: TaskRun | None = None

    def client_config(self) -> dict[str, Any]:
        worker = self.settings.worker
        return {
            "maxTasks": worker.max_tasks,
            "lockDuration": worker.lock_duration_ms,
            "asyncResponseTimeout": worker.async_response_timeout_ms,
            "sleepSeconds": worker.sleep_seconds,
            "auth_basic": {
                "username": self.settings.engine.username,
                "password": self.settings.engine.password,
            },
        }

    def handle(self, external_task: ExternalTask) -> TaskRun:
        """Client action: route by topic, run the handler, report to the engine."""

        task = task_from_external(external_task)
        service = CamundaTaskService(
            external_task,
            self.worker.client,
            failure_retries=self.settings.worker.failure_retries,
            failure_retry_timeout_ms=self.settings.worker.failure_retry_timeout_ms,
        )
        try:
            handler = self.router.handler_for(task.topic)
        except KeyError as error:
            self.last_run = reject_task(task, service, str(error.args[0]))
        else:
            self.last_run = run_task(handler, task, service)
        return self.last_run

    def serve(self) -> None:
        """Block in the fetch-and-lock loop until SIGINT or SIGTERM."""

        logger.info(
            "Worker %s subscribing to %s at %s",
            self.settings.worker.worker_id,
            ", ".join(self.router.topics),
            self.settings.engine.base_url,
        )
        self.worker.subscribe(self.router.topics, self.handle)
