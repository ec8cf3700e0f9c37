"""Tests for Settings validation (document store backend and limits)."""

import pytest
from pydantic import ValidationError

from fireeats.core.config import Settings, get_settings

_ENV_VARS = (
    "DATABASE_BACKEND",
    "FIREBASE_SERVICE_ACCOUNT_KEY",
    "FIREBASE_SERVICE_ACCOUNT_PATH",
    "FIRESTORE_EMULATOR_HOST",
    "FIREBASE_PROJECT_ID",
    "QUERY_RESULT_LIMIT",
    "TRANSACTION_MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_memory_backend_is_default() -> None:
    settings = Settings(_env_file=None)
    assert settings.database_backend == "memory"
    assert settings.query_result_limit == 50
    assert settings.transaction_max_attempts == 5


def test_firestore_requires_credentials() -> None:
    with pytest.raises(ValidationError, match="FIREBASE_SERVICE_ACCOUNT_KEY"):
        Settings(_env_file=None, database_backend="firestore")


def test_firestore_with_key_path() -> None:
    settings = Settings(
        _env_file=None,
        database_backend="firestore",
        firebase_service_account_path="/secrets/key.json",
    )
    assert settings.firebase_service_account_path == "/secrets/key.json"


def test_emulator_requires_project_id() -> None:
    with pytest.raises(ValidationError, match="FIREBASE_PROJECT_ID"):
        Settings(
            _env_file=None,
            database_backend="firestore",
            firestore_emulator_host="localhost:8080",
        )
    settings = Settings(
        _env_file=None,
        database_backend="firestore",
        firestore_emulator_host="localhost:8080",
        firebase_project_id="demo",
    )
    assert settings.firebase_service_account_key is None


def test_unknown_backend_rejected() -> None:
    with pytest.raises(ValidationError, match="database_backend"):
        Settings(_env_file=None, database_backend="postgres")


@pytest.mark.parametrize(
    "field",
    ["query_result_limit", "transaction_max_attempts", "firestore_watch_interval_seconds"],
)
def test_non_positive_limits_rejected(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRANSACTION_MAX_ATTEMPTS", "3")
    assert get_settings().transaction_max_attempts == 3
    assert get_settings() is get_settings()
