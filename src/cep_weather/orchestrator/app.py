"""FastAPI application for the orchestrator (service B).

Key Responsibilities:
    - Wire telemetry, provider clients and :class:`WeatherLookupService`
    - Expose ``POST /weather`` and ``GET /health``
    - Close HTTP clients and flush spans on shutdown

Collaborators:
    - Upstream: ASGI server (uvicorn) via :mod:`cep_weather.cli`, and the gateway
    - Downstream: ViaCEP and WeatherAPI

Example:
    >>> from cep_weather.orchestrator.app import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn --factory cep_weather.orchestrator.app:create_app
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request

from ..clients import CityResolverClient, WeatherClient
from ..config.settings import AppSettings, get_settings
from ..models import MessageResponse, WeatherResponse
from ..observability import Telemetry, TraceContextMiddleware, create_telemetry
from ..presentation import health_router, register_error_handlers
from ..utils.http_client import AsyncHttpClient, HttpClientConfig
from ..utils.logging import configure_logging
from .service import WeatherLookupService

logger = structlog.get_logger(__name__)

ROUTE = "/weather"

_ERROR_RESPONSES = {
    status: {"model": MessageResponse} for status in (400, 404, 422, 500)
}

# ==============================================================================
# APPLICATION FACTORY
# ==============================================================================


def create_app(
    settings: AppSettings | None = None,
    *,
    telemetry: Telemetry | None = None,
    viacep_transport: httpx.AsyncBaseTransport | None = None,
    weather_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the orchestrator application.

    Args:
        settings: Application settings; loaded from the environment when omitted.
        telemetry: Tracing object; created from ``settings`` when omitted, in
            which case the application also shuts it down.
        viacep_transport: Optional httpx transport for the ViaCEP client.
        weather_transport: Optional httpx transport for the WeatherAPI client.

    Raises:
        ConfigurationError: When a WeatherAPI key is required but missing.
        TelemetryStartupError: When the collector is required but unreachable.
    """
    settings = settings or get_settings()
    service_settings = settings.orchestrator
    configure_logging(settings=settings.observability.logging)

    api_key = settings.weather.resolve_api_key()
    if settings.weather.uses_fallback_key:
        logger.warning("orchestrator.weather.fallback_api_key")

    owns_telemetry = telemetry is None
    if telemetry is None:
        telemetry = create_telemetry(
            service_settings.service_name,
            settings.telemetry,
            environment=settings.environment.value,
        )

    viacep_http = AsyncHttpClient(
        telemetry=telemetry,
        config=HttpClientConfig(
            timeout=settings.http.timeout_seconds,
            base_url=settings.viacep.base_url,
        ),
        transport=viacep_transport,
    )
    weather_http = AsyncHttpClient(
        telemetry=telemetry,
        config=HttpClientConfig(
            timeout=settings.http.timeout_seconds,
            base_url=settings.weather.base_url,
        ),
        transport=weather_transport,
    )
    service = WeatherLookupService(
        city_resolver=CityResolverClient(viacep_http, telemetry),
        weather_client=WeatherClient(weather_http, telemetry, api_key=api_key),
        telemetry=telemetry,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "orchestrator.started",
            service=service_settings.service_name,
            port=service_settings.port,
        )
        try:
            async with viacep_http.lifespan(), weather_http.lifespan():
                yield
        finally:
            if owns_telemetry:
                telemetry.shutdown()
            logger.info("orchestrator.stopped")

    app = FastAPI(title="CEP Weather Orchestrator", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.telemetry = telemetry
    app.state.weather_service = service

    app.add_middleware(
        TraceContextMiddleware,
        telemetry=telemetry,
        span_names={ROUTE: "WeatherHandler"},
    )
    register_error_handlers(app)
    app.include_router(health_router(service_settings.service_name))

    @app.post(ROUTE, response_model=WeatherResponse, responses=_ERROR_RESPONSES)
    async def weather(request: Request) -> WeatherResponse:
        body = await request.body()
        return await service.lookup(body, request.state.span)

    return app


__all__ = ["create_app"]
