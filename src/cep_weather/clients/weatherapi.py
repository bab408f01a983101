"""WeatherAPI client fetching the current temperature of a city."""

from __future__ import annotations

import httpx
import structlog
from opentelemetry.trace import SpanKind
from pydantic import ValidationError

from ..models import WeatherApiPayload
from ..observability.tracing import Telemetry, mark_span_error
from ..outcomes import TemperatureFound, TemperatureReading, UpstreamFailure
from ..utils.http_client import AsyncHttpClient

logger = structlog.get_logger(__name__)


class WeatherClient:
    """Fetch the current Celsius temperature for a city name.

    The API key is sent as a query parameter and never recorded on spans.
    """

    def __init__(self, http: AsyncHttpClient, telemetry: Telemetry, *, api_key: str) -> None:
        self._http = http
        self._telemetry = telemetry
        self._api_key = api_key

    async def fetch_temperature(self, city: str) -> TemperatureReading:
        with self._telemetry.tracer.start_as_current_span(
            "fetch-weather-api", kind=SpanKind.CLIENT
        ) as span:
            span.set_attribute("weather.city", city)

            try:
                # httpx URL-encodes the query, city names carry spaces and accents.
                response = await self._http.get(
                    "/current.json", params={"key": self._api_key, "q": city}
                )
            except httpx.HTTPError as exc:
                mark_span_error(span, "transport_error", exc=exc)
                logger.warning("weatherapi.transport_error", city=city, error=str(exc))
                return UpstreamFailure("weatherapi transport error", cause=exc)

            if response.status_code != httpx.codes.OK:
                span.set_attribute("http.status_code", response.status_code)
                mark_span_error(span, "unexpected_status")
                logger.warning(
                    "weatherapi.unexpected_status", city=city, status=response.status_code
                )
                return UpstreamFailure(
                    "weatherapi unexpected status", status_code=response.status_code
                )

            try:
                payload = WeatherApiPayload.model_validate_json(response.content)
            except ValidationError as exc:
                mark_span_error(span, "decode_error", exc=exc)
                logger.warning("weatherapi.decode_error", city=city)
                return UpstreamFailure("weatherapi decode error", cause=exc)

            celsius = payload.current.temp_c
            span.set_attribute("temp.celsius", celsius)
            return TemperatureFound(celsius)


__all__ = ["WeatherClient"]
