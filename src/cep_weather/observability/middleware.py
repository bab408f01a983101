"""Server span middleware.

This module opens one SERVER span per inbound request, parented on the trace
context carried by the request headers. Handlers, exception handlers and
outbound clients all run inside that span, so downstream spans join the
caller's trace without any global lookup.

Key Responsibilities:
    - Extract W3C trace context and baggage from inbound headers
    - Open the per-request server span and expose it on ``request.state.span``
    - Record route and status code, and mark 5xx responses as errors

Collaborators:
    - Upstream: ASGI server, FastAPI middleware stack
    - Downstream: :class:`~cep_weather.observability.tracing.Telemetry`

Thread Safety:
    - Thread-safe: each request gets its own span and context
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from collections.abc import Mapping

from fastapi import Request
from opentelemetry.trace import SpanKind, Status, StatusCode
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .tracing import Telemetry

# ==============================================================================
# MIDDLEWARE IMPLEMENTATION
# ==============================================================================


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Open a SERVER span for every request, joined to the caller's trace."""

    def __init__(
        self,
        app,
        *,
        telemetry: Telemetry,
        span_names: Mapping[str, str] | None = None,
    ) -> None:  # type: ignore[override]
        super().__init__(app)
        self._telemetry = telemetry
        self._span_names = dict(span_names or {})

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        name = self._span_names.get(path, f"{request.method} {path}")
        parent = self._telemetry.extract(request.headers)
        with self._telemetry.tracer.start_as_current_span(
            name, context=parent, kind=SpanKind.SERVER
        ) as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.route", path)
            request.state.span = span
            response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 500:
                span.set_status(Status(StatusCode.ERROR, f"status {response.status_code}"))
        return response


__all__ = ["TraceContextMiddleware"]
