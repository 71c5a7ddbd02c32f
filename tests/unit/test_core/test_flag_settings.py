"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from flag_service.core.settings import (
    AppSettings,
    DatabaseSettings,
    EvaluationSettings,
    FlagCacheSettings,
    LoggingSettings,
    Settings,
    clear_settings_cache,
    get_app_settings,
    get_settings,
)


def test_app_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_SERVICE_NAME", raising=False)
    monkeypatch.delenv("APP_ENVIRONMENT", raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.service_name == "flag-service"
    assert settings.port == 8080
    assert settings.api_prefix == ""
    assert settings.environment == "development"


def test_app_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_PORT", "9000")
    monkeypatch.setenv("APP_API_PREFIX", "/api/v1")

    settings = AppSettings(_env_file=None)

    assert settings.port == 9000
    assert settings.api_prefix == "/api/v1"


def test_app_rejects_debug_in_production() -> None:
    with pytest.raises(ValidationError, match="Debug mode"):
        AppSettings(_env_file=None, environment="production", debug=True)


def test_app_docs_can_be_disabled() -> None:
    settings = AppSettings(_env_file=None, disable_docs=True)

    assert settings.get_docs_url() is None
    assert settings.get_openapi_url() is None


def test_database_url_aliases(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DB_URL", raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./other.db")

    settings = DatabaseSettings(_env_file=None)

    assert settings.url == "sqlite+aiosqlite:///./other.db"
    assert settings.is_sqlite is True
    assert settings.is_memory is False


def test_database_memory_detection() -> None:
    settings = DatabaseSettings(_env_file=None, url="sqlite+aiosqlite:///:memory:")

    assert settings.is_memory is True


def test_cache_settings_validation() -> None:
    assert FlagCacheSettings(_env_file=None).enabled is True
    with pytest.raises(ValidationError):
        FlagCacheSettings(_env_file=None, ttl_seconds=0)
    with pytest.raises(ValidationError):
        FlagCacheSettings(_env_file=None, max_entries=0)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("none", "none"), ("NONE", "none"), ("first-bucket", "first_bucket"), ("first_bucket", "first_bucket")],
)
def test_evaluation_policy_normalized(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: str,
) -> None:
    monkeypatch.setenv("EVAL_ANONYMOUS_VARIANT", raw)

    assert EvaluationSettings(_env_file=None).anonymous_variant == expected


def test_evaluation_policy_rejects_unknown(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVAL_ANONYMOUS_VARIANT", "random")

    with pytest.raises(ValidationError):
        EvaluationSettings(_env_file=None)


def test_logging_effective_values() -> None:
    settings = LoggingSettings(_env_file=None, level="debug", file_enabled=False)

    assert settings.level == "DEBUG"
    assert settings.effective_console_level == "DEBUG"
    assert settings.effective_file_path is None

    kwargs = settings.to_logging_kwargs()
    assert kwargs["log_level"] == "DEBUG"
    assert kwargs["file_path"] is None


def test_logging_file_path_when_enabled() -> None:
    settings = LoggingSettings(_env_file=None, file_enabled=True, file_path=Path("x/y.jsonl"))

    assert settings.to_logging_kwargs()["file_path"] == str(Path("x/y.jsonl"))


def test_settings_are_frozen() -> None:
    settings = AppSettings(_env_file=None)

    with pytest.raises(ValidationError):
        settings.port = 1234  # type: ignore[misc]


def test_loaders_cache_until_cleared(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_app_settings()
    assert get_app_settings() is first

    monkeypatch.setenv("APP_PORT", "9100")
    clear_settings_cache()

    assert get_app_settings() is not first
    assert get_app_settings().port == 9100


def test_unified_settings_groups_domains() -> None:
    settings = get_settings()

    assert isinstance(settings, Settings)
    assert isinstance(settings.app, AppSettings)
    assert isinstance(settings.db, DatabaseSettings)
    assert isinstance(settings.cache, FlagCacheSettings)
    assert isinstance(settings.evaluation, EvaluationSettings)
    assert isinstance(settings.logging, LoggingSettings)


def test_logging_json_toggle_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_JSON", "false")

    assert LoggingSettings(_env_file=None).json_logs is False
