from __future__ import annotations

import httpx
import pytest

from cep_weather.clients import WeatherClient
from cep_weather.outcomes import TemperatureFound, UpstreamFailure
from cep_weather.utils.http_client import AsyncHttpClient, HttpClientConfig
from tests.fakes import WEATHER_TEST_KEY, RecordingTransport, json_response, weather_found


def _client(telemetry, handler) -> tuple[WeatherClient, RecordingTransport]:
    transport = RecordingTransport(handler)
    http = AsyncHttpClient(
        telemetry=telemetry,
        config=HttpClientConfig(base_url="http://weather.test/v1"),
        transport=transport,
    )
    return WeatherClient(http, telemetry, api_key=WEATHER_TEST_KEY), transport


def _weather_span(span_exporter):
    return next(
        span for span in span_exporter.get_finished_spans() if span.name == "fetch-weather-api"
    )


@pytest.mark.asyncio
async def test_fetch_temperature_encodes_city_and_key(telemetry, span_exporter) -> None:
    client, transport = _client(telemetry, weather_found(21.5))

    result = await client.fetch_temperature("São José dos Campos")

    assert result == TemperatureFound(21.5)
    (request,) = transport.requests
    assert request.url.path == "/v1/current.json"
    assert request.url.params["key"] == WEATHER_TEST_KEY
    assert request.url.params["q"] == "São José dos Campos"
    assert " " not in str(request.url)
    assert "traceparent" not in request.headers

    span = _weather_span(span_exporter)
    assert span.attributes["temp.celsius"] == 21.5
    assert WEATHER_TEST_KEY not in str(dict(span.attributes))


@pytest.mark.asyncio
async def test_non_ok_status_is_upstream_failure(telemetry) -> None:
    client, _ = _client(telemetry, lambda _: json_response(403, {"error": {"code": 2008}}))

    result = await client.fetch_temperature("Recife")

    assert isinstance(result, UpstreamFailure)
    assert result.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"location": {"name": "Recife"}},
        {"current": {}},
        {"current": {"temp_c": "warm"}},
    ],
)
async def test_missing_temperature_is_decode_failure(telemetry, span_exporter, payload) -> None:
    client, _ = _client(telemetry, lambda _: json_response(200, payload))

    result = await client.fetch_temperature("Recife")

    assert isinstance(result, UpstreamFailure)
    assert _weather_span(span_exporter).attributes["error.type"] == "decode_error"


@pytest.mark.asyncio
async def test_timeout_is_upstream_failure(telemetry) -> None:
    def _slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client, transport = _client(telemetry, _slow)

    result = await client.fetch_temperature("Recife")

    assert isinstance(result, UpstreamFailure)
    assert isinstance(result.cause, httpx.ReadTimeout)
    assert len(transport.requests) == 1
