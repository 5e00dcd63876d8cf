from __future__ import annotations

import allure
import pytest

from camunda_task_workers.config import (
    EngineSettings,
    Settings,
    WorkerSettings,
    load_settings,
    parse_topic_bindings,
)

pytestmark = [
    allure.epic("Worker Runtime"),
    allure.feature("Startup Configuration"),
]


def test_load_settings_reads_engine_credentials(engine_env) -> None:
    settings = load_settings()

    assert settings.engine.base_url == "http://localhost:8080/engine-rest"
    assert settings.engine.username == "demo"
    assert settings.engine.password == "demo"
    assert settings.topic_bindings == {
        "work1": "order-range-check",
        "work2": "local-order-reverse",
    }


@pytest.mark.parametrize(
    ("missing", "message"),
    [
        ("CAMUNDA_URL", "CAMUNDA_URL is not set"),
        ("CAMUNDA_USER", "CAMUNDA_USER is not set"),
        ("CAMUNDA_PASS", "CAMUNDA_PASS is not set"),
    ],
)
def test_load_settings_fails_fast_on_missing_engine_setting(
    engine_env,
    monkeypatch,
    missing: str,
    message: str,
) -> None:
    monkeypatch.delenv(missing)

    with pytest.raises(ValueError, match=message):
        load_settings()


def test_missing_url_is_reported_before_user_and_password() -> None:
    with pytest.raises(ValueError, match="CAMUNDA_URL is not set"):
        load_settings()


def test_validate_rejects_non_http_url() -> None:
    settings = Settings(
        engine=EngineSettings(base_url="ftp://engine", username="demo", password="demo"),
        topic_bindings={"work1": "order-range-check"},
    )

    with pytest.raises(ValueError, match="Invalid CAMUNDA_URL"):
        settings.validate()


def test_validate_rejects_non_positive_lock_duration(settings: Settings) -> None:
    settings.worker = WorkerSettings(lock_duration_ms=0)

    with pytest.raises(ValueError, match="CAMUNDA_LOCK_DURATION_MS"):
        settings.validate()


def test_validate_rejects_negative_failure_retries(settings: Settings) -> None:
    settings.worker = WorkerSettings(failure_retries=-1)

    with pytest.raises(ValueError, match="CAMUNDA_FAILURE_RETRIES"):
        settings.validate()


def test_worker_settings_come_from_env(engine_env, monkeypatch) -> None:
    monkeypatch.setenv("CAMUNDA_WORKER_ID", "orders-1")
    monkeypatch.setenv("CAMUNDA_MAX_TASKS", "5")
    monkeypatch.setenv("CAMUNDA_LOCK_DURATION_MS", "20000")
    monkeypatch.setenv("CAMUNDA_FAILURE_RETRIES", "2")

    worker = load_settings().worker

    assert worker.worker_id == "orders-1"
    assert worker.max_tasks == 5
    assert worker.lock_duration_ms == 20_000
    assert worker.failure_retries == 2
    assert worker.sleep_seconds == 30


def test_invalid_integer_env_value_is_reported(engine_env, monkeypatch) -> None:
    monkeypatch.setenv("CAMUNDA_MAX_TASKS", "many")

    with pytest.raises(ValueError, match="Invalid integer value for CAMUNDA_MAX_TASKS"):
        load_settings()


def test_parse_topic_bindings_normalizes_handler_names() -> None:
    assert parse_topic_bindings(" work1 = Order-Range-Check , ,work3=local-order-range-check") == {
        "work1": "order-range-check",
        "work3": "local-order-range-check",
    }


def test_parse_topic_bindings_rejects_malformed_entry() -> None:
    with pytest.raises(ValueError, match="Expected format '<topic>=<handler>'"):
        parse_topic_bindings("work1")


def test_parse_topic_bindings_rejects_duplicate_topic() -> None:
    with pytest.raises(ValueError, match="Duplicate topic"):
        parse_topic_bindings("work1=order-range-check,work1=local-order-reverse")


def test_empty_bindings_fail_validation(engine_env, monkeypatch) -> None:
    monkeypatch.setenv("CAMUNDA_TOPIC_BINDINGS", " , ")

    with pytest.raises(ValueError, match="At least one topic binding is required"):
        load_settings()
