"""Shared test fixtures."""

from __future__ import annotations

import pytest

from camunda_task_workers.config import (
    DEFAULT_TOPIC_BINDINGS,
    EngineSettings,
    Settings,
    parse_topic_bindings,
)


@pytest.fixture(autouse=True)
def _clean_camunda_env(monkeypatch):
    """Keep the developer's CAMUNDA_* environment out of tests."""
    for name in (
        "CAMUNDA_URL",
        "CAMUNDA_USER",
        "CAMUNDA_PASS",
        "CAMUNDA_WORKER_ID",
        "CAMUNDA_MAX_TASKS",
        "CAMUNDA_LOCK_DURATION_MS",
        "CAMUNDA_ASYNC_RESPONSE_TIMEOUT_MS",
        "CAMUNDA_SLEEP_SECONDS",
        "CAMUNDA_FAILURE_RETRIES",
        "CAMUNDA_FAILURE_RETRY_TIMEOUT_MS",
        "CAMUNDA_TOPIC_BINDINGS",
        "CAMUNDA_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def engine_env(monkeypatch):
    monkeypatch.setenv("CAMUNDA_URL", "http://localhost:8080/engine-rest")
    monkeypatch.setenv("CAMUNDA_USER", "demo")
    monkeypatch.setenv("CAMUNDA_PASS", "demo")


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        engine=EngineSettings(
            base_url="http://localhost:8080/engine-rest",
            username="demo",
            password="demo",
        ),
        topic_bindings=parse_topic_bindings(DEFAULT_TOPIC_BINDINGS),
    )

