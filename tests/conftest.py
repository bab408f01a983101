from __future__ import annotations

from collections.abc import Iterator

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from pydantic import SecretStr

from cep_weather.config.settings import (
    AppSettings,
    TelemetrySettings,
    WeatherApiSettings,
    get_settings,
)
from cep_weather.observability.tracing import Telemetry, create_telemetry
from tests.fakes import WEATHER_TEST_KEY

_ENV_VARS = (
    "CW_ENV",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "WEATHER_API_KEY",
    "SERVICE_B_URL",
    "CW_WEATHER__API_KEY",
    "CW_WEATHER__REQUIRE_API_KEY",
    "CW_HTTP__TIMEOUT_SECONDS",
    "CW_TELEMETRY__EXPORTER",
    "CW_TELEMETRY__ENDPOINT",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def telemetry(span_exporter: InMemorySpanExporter) -> Iterator[Telemetry]:
    instance = create_telemetry(
        "test-service",
        TelemetrySettings(exporter="none"),
        exporter=span_exporter,
    )
    yield instance
    instance.shutdown()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        telemetry=TelemetrySettings(exporter="none"),
        weather=WeatherApiSettings(api_key=SecretStr(WEATHER_TEST_KEY)),
    )
