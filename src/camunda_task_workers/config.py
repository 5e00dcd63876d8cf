"""Runtime configuration for the external task workers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

DEFAULT_TOPIC_BINDINGS = "work1=order-range-check,work2=local-order-reverse"


@dataclass(slots=True)
class EngineSettings:
    """Connection settings for the engine REST API."""

    base_url: str = ""
    username: str = ""
    password: str = ""


@dataclass(slots=True)
class WorkerSettings:
    """Fetch-and-lock parameters passed through to the task client."""

    worker_id: str = "camunda-task-workers"
    max_tasks: int = 1
    lock_duration_ms: int = 10_000
    async_response_timeout_ms: int = 5_000
    sleep_seconds: int = 30
    failure_retries: int = 0
    failure_retry_timeout_ms: int = 5_000


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    engine: EngineSettings = field(default_factory=EngineSettings)
    worker: WorkerSettings = field(default_factory=WorkerSettings)
    topic_bindings: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment; required engine values stay empty if unset."""

        return cls(
            engine=EngineSettings(
                base_url=os.getenv("CAMUNDA_URL", "").strip(),
                username=os.getenv("CAMUNDA_USER", "").strip(),
                password=os.getenv("CAMUNDA_PASS", ""),
            ),
            worker=WorkerSettings(
                worker_id=os.getenv("CAMUNDA_WORKER_ID", "camunda-task-workers").strip(),
                max_tasks=_env_int("CAMUNDA_MAX_TASKS", 1),
                lock_duration_ms=_env_int("CAMUNDA_LOCK_DURATION_MS", 10_000),
                async_response_timeout_ms=_env_int("CAMUNDA_ASYNC_RESPONSE_TIMEOUT_MS", 5_000),
                sleep_seconds=_env_int("CAMUNDA_SLEEP_SECONDS", 30),
                failure_retries=_env_int("CAMUNDA_FAILURE_RETRIES", 0),
                failure_retry_timeout_ms=_env_int("CAMUNDA_FAILURE_RETRY_TIMEOUT_MS", 5_000),
            ),
            topic_bindings=parse_topic_bindings(
                os.getenv("CAMUNDA_TOPIC_BINDINGS", DEFAULT_TOPIC_BINDINGS),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error if a required setting is missing or invalid."""

        if not self.engine.base_url:
            raise ValueError("CAMUNDA_URL is not set")
        if not self.engine.username:
            raise ValueError("CAMUNDA_USER is not set")
        if not self.engine.password:
            raise ValueError("CAMUNDA_PASS is not set")

        parsed = urlparse(self.engine.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "Invalid CAMUNDA_URL: "
                f"{self.engine.base_url!r}. Expected an absolute URL with http:// or https:// scheme.",
            )
        if not self.worker.worker_id:
            raise ValueError("CAMUNDA_WORKER_ID must not be empty.")
        if self.worker.max_tasks <= 0:
            raise ValueError("CAMUNDA_MAX_TASKS must be > 0.")
        if self.worker.lock_duration_ms <= 0:
            raise ValueError("CAMUNDA_LOCK_DURATION_MS must be > 0.")
        if self.worker.async_response_timeout_ms < 0:
            raise ValueError("CAMUNDA_ASYNC_RESPONSE_TIMEOUT_MS must be >= 0.")
        if self.worker.sleep_seconds < 0:
            raise ValueError("CAMUNDA_SLEEP_SECONDS must be >= 0.")
        if self.worker.failure_retries < 0:
            raise ValueError("CAMUNDA_FAILURE_RETRIES must be >= 0.")
        if self.worker.failure_retry_timeout_ms < 0:
            raise ValueError("CAMUNDA_FAILURE_RETRY_TIMEOUT_MS must be >= 0.")
        if not self.topic_bindings:
            raise ValueError("At least one topic binding is required. Set CAMUNDA_TOPIC_BINDINGS.")


def load_settings() -> Settings:
    """Read and validate settings; called once at startup before any subscription."""

    settings = Settings.from_env()
    settings.validate()
    return settings


def parse_topic_bindings(raw: str) -> dict[str, str]:
    """Parse ``topic=handler`` pairs separated by commas."""

    bindings: dict[str, str] = {}
    for part in raw.split(","):
        token = part.strip()
        if not token:
            continue
        if "=" not in token:
            raise ValueError(
                "Invalid CAMUNDA_TOPIC_BINDINGS entry: "
                f"{token!r}. Expected format '<topic>=<handler>'.",
            )
        topic, handler_name = token.split("=", 1)
        topic = topic.strip()
        handler_name = handler_name.strip().lower()
        if not topic or not handler_name:
            raise ValueError(
                f"Invalid CAMUNDA_TOPIC_BINDINGS entry: {token!r}. Topic and handler are required.",
            )
        if topic in bindings:
            raise ValueError(f"Duplicate topic in CAMUNDA_TOPIC_BINDINGS: {topic!r}")
        bindings[topic] = handler_name
    return bindings


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error
