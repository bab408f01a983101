"""ViaCEP client resolving postal codes to city names."""

from __future__ import annotations

import httpx
import structlog
from opentelemetry.trace import SpanKind
from pydantic import ValidationError

from ..models import ViaCepPayload
from ..observability.tracing import Telemetry, mark_span_error
from ..outcomes import CityFound, CityNotFound, CityResolution, UpstreamFailure
from ..utils.http_client import AsyncHttpClient
from ..validation import ValidatedPostalCode

logger = structlog.get_logger(__name__)


class CityResolverClient:
    """Look up the city of a validated postal code.

    Every transport error, non-200 status or undecodable body collapses into
    :class:`UpstreamFailure`. A payload flagged with ``erro`` is a definite
    miss and becomes :class:`CityNotFound`.
    """

    def __init__(self, http: AsyncHttpClient, telemetry: Telemetry) -> None:
        self._http = http
        self._telemetry = telemetry

    async def resolve(self, code: ValidatedPostalCode) -> CityResolution:
        with self._telemetry.tracer.start_as_current_span(
            "fetch-city-via-viacep", kind=SpanKind.CLIENT
        ) as span:
            path = f"/ws/{code.digits}/json/"
            span.set_attribute("http.url", path)

            try:
                response = await self._http.get(path)
            except httpx.HTTPError as exc:
                mark_span_error(span, "transport_error", exc=exc)
                logger.warning("viacep.transport_error", cep=code.digits, error=str(exc))
                return UpstreamFailure("viacep transport error", cause=exc)

            if response.status_code != httpx.codes.OK:
                span.set_attribute("http.status_code", response.status_code)
                mark_span_error(span, "unexpected_status")
                logger.warning(
                    "viacep.unexpected_status", cep=code.digits, status=response.status_code
                )
                return UpstreamFailure("viacep unexpected status", status_code=response.status_code)

            try:
                payload = ViaCepPayload.model_validate_json(response.content)
            except ValidationError as exc:
                mark_span_error(span, "decode_error", exc=exc)
                logger.warning("viacep.decode_error", cep=code.digits)
                return UpstreamFailure("viacep decode error", cause=exc)

            if payload.not_found:
                span.set_attribute("city.found", False)
                return CityNotFound()

            span.set_attribute("city.found", True)
            span.set_attribute("city.name", payload.localidade)
            return CityFound(payload.localidade)


__all__ = ["CityResolverClient"]
