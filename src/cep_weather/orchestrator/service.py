"""Weather lookup pipeline run by the orchestrator (service B).

Key Responsibilities:
    - Decode and re-validate the postal code; the gateway is not trusted
    - Resolve the city, then fetch its temperature, strictly in that order
    - Convert the reading and assemble the response
    - Map every failure to its own error, annotating the server span

Collaborators:
    - Upstream: ``orchestrator.app`` calls :meth:`WeatherLookupService.lookup`
    - Downstream: :class:`CityResolverClient`, :class:`WeatherClient`,
      :func:`~cep_weather.conversion.convert`

Side Effects:
    - Two outbound HTTP calls per successful request

Thread Safety:
    - One instance serves all requests; it holds only the shared clients
"""

from __future__ import annotations

import structlog
from opentelemetry.trace import Span

from ..clients import CityResolverClient, WeatherClient
from ..conversion import convert
from ..errors import (
    CepWeatherError,
    CityLookupError,
    WeatherLookupError,
    ZipcodeNotFoundError,
)
from ..models import WeatherResponse, parse_postal_code_request
from ..observability.tracing import Telemetry
from ..outcomes import CityNotFound, UpstreamFailure
from ..validation import validate_postal_code

logger = structlog.get_logger(__name__)


class WeatherLookupService:
    """Run the decode, validate, resolve, fetch, convert pipeline."""

    def __init__(
        self,
        *,
        city_resolver: CityResolverClient,
        weather_client: WeatherClient,
        telemetry: Telemetry,
    ) -> None:
        self._city_resolver = city_resolver
        self._weather_client = weather_client
        self._telemetry = telemetry

    async def lookup(self, body: bytes, span: Span) -> WeatherResponse:
        """Answer one ``POST /weather`` request.

        Args:
            body: Raw request body.
            span: Server span of the request; failures are recorded on it.

        Returns:
            City and temperature in Celsius, Fahrenheit and Kelvin.

        Raises:
            InvalidRequestBodyError: Body is not a JSON object with a string ``cep``.
            InvalidZipcodeError: Postal code is not eight digits.
            ZipcodeNotFoundError: ViaCEP reports the postal code as unknown.
            CityLookupError: ViaCEP failed.
            WeatherLookupError: WeatherAPI failed.
        """
        try:
            return await self._run(body, span)
        except CepWeatherError as exc:
            span.set_attribute("error.type", exc.error_type)
            raise

    async def _run(self, body: bytes, span: Span) -> WeatherResponse:
        request = parse_postal_code_request(body)

        span.set_attribute("cep.value", request.cep.strip())
        try:
            code = validate_postal_code(request.cep)
        except CepWeatherError:
            span.set_attribute("cep.valid", False)
            raise
        span.set_attribute("cep.valid", True)

        resolution = await self._city_resolver.resolve(code)
        if isinstance(resolution, CityNotFound):
            logger.info("orchestrator.city.not_found", cep=code.digits)
            raise ZipcodeNotFoundError()
        if isinstance(resolution, UpstreamFailure):
            logger.error("orchestrator.city.failed", cep=code.digits, reason=resolution.describe())
            raise CityLookupError(cause=resolution.cause)
        city = resolution.city

        reading = await self._weather_client.fetch_temperature(city)
        if isinstance(reading, UpstreamFailure):
            logger.error("orchestrator.weather.failed", city=city, reason=reading.describe())
            raise WeatherLookupError(cause=reading.cause)

        with self._telemetry.tracer.start_as_current_span("temperature-conversion"):
            conversion = convert(reading.celsius)

        logger.info("orchestrator.weather.resolved", cep=code.digits, city=city)
        return WeatherResponse.from_conversion(city, conversion)


__all__ = ["WeatherLookupService"]
