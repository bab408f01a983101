"""Configuration package exports."""

from __future__ import annotations

from .settings import (
    AppSettings,
    Environment,
    GatewaySettings,
    HttpSettings,
    LoggingSettings,
    ObservabilitySettings,
    OrchestratorSettings,
    TelemetrySettings,
    ViaCepSettings,
    WeatherApiSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "AppSettings",
    "Environment",
    "GatewaySettings",
    "HttpSettings",
    "LoggingSettings",
    "ObservabilitySettings",
    "OrchestratorSettings",
    "TelemetrySettings",
    "ViaCepSettings",
    "WeatherApiSettings",
    "get_settings",
    "load_settings",
]
