"""Configuration system for the gateway and orchestrator services."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigurationError


class Environment(str, Enum):
    """Deployment environments supported by the services."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class TelemetrySettings(BaseModel):
    """Configuration block for OpenTelemetry export."""

    exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp", description="Target exporter type"
    )
    endpoint: str = Field(default="otel-collector:4317", description="OTLP gRPC collector endpoint")
    insecure: bool = Field(default=True, description="Disable TLS towards the collector")
    sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)
    require_collector: bool = Field(
        default=False,
        description="Fail startup when the collector endpoint is not reachable",
    )
    connect_timeout_seconds: float = Field(default=5.0, gt=0)


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["key", "api_key", "authorization", "password", "token"],
        description="Fields that should be redacted in logs",
    )


class ObservabilitySettings(BaseModel):
    """Aggregate observability configuration."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class HttpSettings(BaseModel):
    """Outbound HTTP behaviour shared by every client."""

    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline applied to each outbound call",
    )


class ViaCepSettings(BaseModel):
    """Postal code provider configuration."""

    base_url: str = Field(default="http://viacep.com.br", description="ViaCEP base URL")


class WeatherApiSettings(BaseModel):
    """Weather provider configuration."""

    base_url: str = Field(default="http://api.weatherapi.com/v1", description="WeatherAPI base URL")
    api_key: SecretStr | None = Field(default=None, description="WeatherAPI key")
    fallback_api_key: str = Field(
        default="demo",
        description="Placeholder key used when no API key is configured",
    )
    require_api_key: bool = Field(
        default=False,
        description="Treat a missing API key as a startup configuration error",
    )

    def resolve_api_key(self) -> str:
        """Return the configured key or the placeholder fallback."""
        if self.api_key is not None and self.api_key.get_secret_value():
            return self.api_key.get_secret_value()
        if self.require_api_key:
            raise ConfigurationError("WEATHER_API_KEY is required but not configured")
        return self.fallback_api_key

    @property
    def uses_fallback_key(self) -> bool:
        return self.api_key is None or not self.api_key.get_secret_value()


class GatewaySettings(BaseModel):
    """Service A (gateway) configuration."""

    service_name: str = "service-a"
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    orchestrator_url: str = Field(
        default="http://service-b:8081",
        description="Base URL of the orchestrator service",
    )


class OrchestratorSettings(BaseModel):
    """Service B (orchestrator) configuration."""

    service_name: str = "service-b"
    host: str = "0.0.0.0"
    port: int = Field(default=8081, ge=1, le=65535)


class AppSettings(BaseSettings):
    """Top-level application settings."""

    environment: Environment = Environment.DEV
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    viacep: ViaCepSettings = Field(default_factory=ViaCepSettings)
    weather: WeatherApiSettings = Field(default_factory=WeatherApiSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)

    model_config = SettingsConfigDict(env_prefix="CW_", env_nested_delimiter="__")


# Conventional variable names used by the container images, applied on top of
# the CW_ prefixed settings.
CONVENTIONAL_ENV: Mapping[str, tuple[str, ...]] = {
    "OTEL_EXPORTER_OTLP_ENDPOINT": ("telemetry", "endpoint"),
    "WEATHER_API_KEY": ("weather", "api_key"),
    "SERVICE_B_URL": ("gateway", "orchestrator_url"),
}


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            target[key] = _deep_update(dict(current), value)
        else:
            target[key] = value
    return target


def _conventional_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name, path in CONVENTIONAL_ENV.items():
        value = environ.get(name)
        if not value:
            continue
        cursor = overrides
        for part in path[:-1]:
            cursor = cursor.setdefault(part, {})
        cursor[path[-1]] = value
    return overrides


def load_settings(environment: str | None = None) -> AppSettings:
    """Load application settings for ``environment`` (``CW_ENV`` when omitted)."""
    env_value = (environment or os.getenv("CW_ENV", "dev")).lower()
    try:
        env = Environment(env_value)
    except ValueError as err:
        raise ConfigurationError(f"Unknown environment '{env_value}'") from err
    try:
        base_settings = AppSettings()
        merged = base_settings.model_dump()
        merged = _deep_update(merged, _conventional_overrides(os.environ))
        merged["environment"] = env
        return AppSettings.model_validate(merged)
    except ValidationError as err:
        raise ConfigurationError(f"Invalid configuration: {err}") from err


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Cached accessor used by production code."""
    return load_settings()


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
