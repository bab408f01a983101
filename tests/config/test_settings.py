"""Tests covering settings loading from the environment."""

from __future__ import annotations

import pytest

from cep_weather.config.settings import (
    Environment,
    WeatherApiSettings,
    get_settings,
    load_settings,
)
from cep_weather.errors import ConfigurationError


def test_defaults_match_container_topology() -> None:
    settings = load_settings()
    assert settings.environment is Environment.DEV
    assert settings.telemetry.exporter == "otlp"
    assert settings.telemetry.endpoint == "otel-collector:4317"
    assert settings.gateway.orchestrator_url == "http://service-b:8081"
    assert settings.gateway.port == 8080
    assert settings.orchestrator.port == 8081
    assert settings.http.timeout_seconds == 10.0


def test_conventional_environment_variables_override(monkeypatch) -> None:
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "collector.local:4317")
    monkeypatch.setenv("WEATHER_API_KEY", "secret-key")
    monkeypatch.setenv("SERVICE_B_URL", "http://localhost:9000")
    settings = load_settings()
    assert settings.telemetry.endpoint == "collector.local:4317"
    assert settings.weather.resolve_api_key() == "secret-key"
    assert settings.weather.uses_fallback_key is False
    assert settings.gateway.orchestrator_url == "http://localhost:9000"


def test_prefixed_nested_variables(monkeypatch) -> None:
    monkeypatch.setenv("CW_HTTP__TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("CW_TELEMETRY__EXPORTER", "console")
    settings = load_settings()
    assert settings.http.timeout_seconds == 2.5
    assert settings.telemetry.exporter == "console"


def test_environment_selection(monkeypatch) -> None:
    monkeypatch.setenv("CW_ENV", "prod")
    settings = load_settings()
    assert settings.environment is Environment.PROD
    assert settings.telemetry.endpoint == "otel-collector:4317"


def test_unknown_environment_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        load_settings("moon")


def test_invalid_values_are_configuration_errors(monkeypatch) -> None:
    monkeypatch.setenv("CW_HTTP__TIMEOUT_SECONDS", "-1")
    with pytest.raises(ConfigurationError):
        load_settings()


def test_missing_api_key_falls_back_to_demo_key() -> None:
    weather = WeatherApiSettings()
    assert weather.uses_fallback_key is True
    assert weather.resolve_api_key() == "demo"


def test_missing_api_key_in_strict_mode_raises() -> None:
    weather = WeatherApiSettings(require_api_key=True)
    with pytest.raises(ConfigurationError):
        weather.resolve_api_key()


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_environment_does_not_override_explicit_values(monkeypatch) -> None:
    monkeypatch.setenv("CW_ENV", "prod")
    monkeypatch.setenv("CW_TELEMETRY__EXPORTER", "console")
    settings = load_settings()
    assert settings.environment is Environment.PROD
    assert settings.telemetry.exporter == "console"
    assert "debug" not in settings.model_dump()
