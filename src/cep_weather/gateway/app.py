"""FastAPI application for the gateway (service A).

Key Responsibilities:
    - Wire telemetry, the orchestrator client and :class:`GatewayService`
    - Expose ``POST /cep-weather`` and ``GET /health``
    - Relay the orchestrator's status code and body unchanged

Collaborators:
    - Upstream: ASGI server (uvicorn) via :mod:`cep_weather.cli`
    - Downstream: The orchestrator service, reached with trace headers injected

Example:
    >>> from cep_weather.gateway.app import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn --factory cep_weather.gateway.app:create_app
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
from fastapi.responses import Response

from ..clients import OrchestratorClient
from ..config.settings import AppSettings, get_settings
from ..models import MessageResponse, WeatherResponse
from ..observability import Telemetry, TraceContextMiddleware, create_telemetry
from ..presentation import health_router, register_error_handlers
from ..utils.http_client import AsyncHttpClient, HttpClientConfig
from ..utils.logging import configure_logging
from .service import GatewayService

logger = structlog.get_logger(__name__)

ROUTE = "/cep-weather"

_RESPONSES = {
    200: {"model": WeatherResponse},
    **{status: {"model": MessageResponse} for status in (400, 404, 422, 500)},
}

# ==============================================================================
# APPLICATION FACTORY
# ==============================================================================


def create_app(
    settings: AppSettings | None = None,
    *,
    telemetry: Telemetry | None = None,
    orchestrator_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the gateway application.

    Args:
        settings: Application settings; loaded from the environment when omitted.
        telemetry: Tracing object; created from ``settings`` when omitted, in
            which case the application also shuts it down.
        orchestrator_transport: Optional httpx transport for the orchestrator hop.

    Raises:
        TelemetryStartupError: When the collector is required but unreachable.
    """
    settings = settings or get_settings()
    service_settings = settings.gateway
    configure_logging(settings=settings.observability.logging)

    owns_telemetry = telemetry is None
    if telemetry is None:
        telemetry = create_telemetry(
            service_settings.service_name,
            settings.telemetry,
            environment=settings.environment.value,
        )

    orchestrator_http = AsyncHttpClient(
        telemetry=telemetry,
        config=HttpClientConfig(
            timeout=settings.http.timeout_seconds,
            base_url=service_settings.orchestrator_url,
            propagate_context=True,
        ),
        transport=orchestrator_transport,
    )
    service = GatewayService(OrchestratorClient(orchestrator_http, telemetry))

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "gateway.started",
            service=service_settings.service_name,
            port=service_settings.port,
            orchestrator_url=service_settings.orchestrator_url,
        )
        try:
            async with orchestrator_http.lifespan():
                yield
        finally:
            if owns_telemetry:
                telemetry.shutdown()
            logger.info("gateway.stopped")

    app = FastAPI(title="CEP Weather Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.telemetry = telemetry
    app.state.gateway_service = service

    app.add_middleware(
        TraceContextMiddleware,
        telemetry=telemetry,
        span_names={ROUTE: "CEPValidationHandler"},
    )
    register_error_handlers(app)
    app.include_router(health_router(service_settings.service_name))

    @app.post(ROUTE, response_class=Response, responses=_RESPONSES)
    async def cep_weather(request: Request) -> Response:
        body = await request.body()
        relayed = await service.forward(body, request.state.span)
        return Response(
            content=relayed.content,
            status_code=relayed.status_code,
            media_type=relayed.media_type,
        )

    return app


__all__ = ["create_app"]
