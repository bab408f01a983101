"""Client used by the gateway to call the orchestrator service."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog
from opentelemetry.trace import SpanKind

from ..errors import OrchestratorUnavailableError
from ..models import PostalCodeRequest
from ..observability.tracing import Telemetry, mark_span_error
from ..utils.http_client import AsyncHttpClient
from ..validation import ValidatedPostalCode

logger = structlog.get_logger(__name__)

WEATHER_PATH = "/weather"


@dataclass(frozen=True, slots=True)
class RelayedResponse:
    """Orchestrator answer, kept byte for byte."""

    status_code: int
    content: bytes
    media_type: str | None


class OrchestratorClient:
    """POST validated postal codes to the orchestrator.

    The underlying :class:`AsyncHttpClient` must be configured with
    ``propagate_context=True`` so the orchestrator joins the gateway's trace.
    """

    def __init__(self, http: AsyncHttpClient, telemetry: Telemetry) -> None:
        self._http = http
        self._telemetry = telemetry

    async def fetch_weather(self, code: ValidatedPostalCode) -> RelayedResponse:
        """Forward ``code`` and return whatever the orchestrator answered.

        Raises:
            OrchestratorUnavailableError: If the orchestrator cannot be reached.
        """
        body = PostalCodeRequest(cep=code.digits).model_dump_json().encode()
        with self._telemetry.tracer.start_as_current_span(
            "call-service-b", kind=SpanKind.CLIENT
        ) as span:
            try:
                response = await self._http.post(
                    WEATHER_PATH,
                    content=body,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as exc:
                mark_span_error(span, "service_b_unreachable", exc=exc)
                logger.error("gateway.orchestrator.unreachable", error=str(exc))
                raise OrchestratorUnavailableError(cause=exc) from exc
            span.set_attribute("http.status_code", response.status_code)

        return RelayedResponse(
            status_code=response.status_code,
            content=response.content,
            media_type=response.headers.get("content-type"),
        )


__all__ = ["OrchestratorClient", "RelayedResponse", "WEATHER_PATH"]
