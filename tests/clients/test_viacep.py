from __future__ import annotations

import httpx
import pytest

from cep_weather.clients import CityResolverClient
from cep_weather.outcomes import CityFound, CityNotFound, UpstreamFailure
from cep_weather.utils.http_client import AsyncHttpClient, HttpClientConfig
from cep_weather.validation import ValidatedPostalCode
from tests.fakes import RecordingTransport, json_response, unreachable, viacep_found

CODE = ValidatedPostalCode("01001000")


def _client(telemetry, handler) -> tuple[CityResolverClient, RecordingTransport]:
    transport = RecordingTransport(handler)
    http = AsyncHttpClient(
        telemetry=telemetry,
        config=HttpClientConfig(base_url="http://viacep.test"),
        transport=transport,
    )
    return CityResolverClient(http, telemetry), transport


def _resolver_span(span_exporter):
    return next(
        span for span in span_exporter.get_finished_spans() if span.name == "fetch-city-via-viacep"
    )


@pytest.mark.asyncio
async def test_resolve_returns_city(telemetry, span_exporter) -> None:
    client, transport = _client(telemetry, viacep_found("São Paulo"))

    result = await client.resolve(CODE)

    assert result == CityFound("São Paulo")
    (request,) = transport.requests
    assert request.method == "GET"
    assert request.url.path == "/ws/01001000/json/"
    assert "traceparent" not in request.headers
    span = _resolver_span(span_exporter)
    assert span.attributes["city.found"] is True
    assert span.attributes["city.name"] == "São Paulo"


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", ["true", True])
async def test_erro_flag_means_not_found(telemetry, span_exporter, flag) -> None:
    client, _ = _client(telemetry, lambda _: json_response(200, {"erro": flag}))

    result = await client.resolve(CODE)

    assert isinstance(result, CityNotFound)
    assert _resolver_span(span_exporter).attributes["city.found"] is False


@pytest.mark.asyncio
async def test_non_ok_status_is_upstream_failure(telemetry, span_exporter) -> None:
    client, _ = _client(telemetry, lambda _: httpx.Response(400, text="Bad Request"))

    result = await client.resolve(CODE)

    assert isinstance(result, UpstreamFailure)
    assert result.status_code == 400
    span = _resolver_span(span_exporter)
    assert span.attributes["error.type"] == "unexpected_status"


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"<html>", b"[]", b'{"localidade": 12}'])
async def test_undecodable_body_is_upstream_failure(telemetry, span_exporter, content) -> None:
    client, _ = _client(telemetry, lambda _: httpx.Response(200, content=content))

    result = await client.resolve(CODE)

    assert isinstance(result, UpstreamFailure)
    assert _resolver_span(span_exporter).attributes["error.type"] == "decode_error"


@pytest.mark.asyncio
async def test_transport_error_is_upstream_failure(telemetry) -> None:
    client, transport = _client(telemetry, unreachable)

    result = await client.resolve(CODE)

    assert isinstance(result, UpstreamFailure)
    assert isinstance(result.cause, httpx.ConnectError)
    assert len(transport.requests) == 1
