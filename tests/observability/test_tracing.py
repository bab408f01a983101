from __future__ import annotations

import socket

import pytest
from opentelemetry import baggage
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import StatusCode, get_current_span
from opentelemetry.trace.propagation import set_span_in_context

from cep_weather.config.settings import TelemetrySettings
from cep_weather.errors import TelemetryStartupError
from cep_weather.observability.tracing import (
    _build_exporter,
    create_telemetry,
    ensure_collector_reachable,
    mark_span_error,
)


def test_create_telemetry_sets_resource_attributes(span_exporter) -> None:
    telemetry = create_telemetry(
        "service-b",
        TelemetrySettings(exporter="none"),
        environment="staging",
        exporter=span_exporter,
    )
    with telemetry.tracer.start_as_current_span("work"):
        pass
    (span,) = span_exporter.get_finished_spans()
    assert span.resource.attributes["service.name"] == "service-b"
    assert span.resource.attributes["environment"] == "staging"
    telemetry.shutdown()


def test_inject_and_extract_round_trip(telemetry) -> None:
    headers: dict[str, str] = {}
    with telemetry.tracer.start_as_current_span("outbound") as span:
        ctx = baggage.set_baggage("tenant", "demo")
        telemetry.inject(headers, context=set_span_in_context(span, ctx))

    assert "traceparent" in headers
    assert headers["baggage"] == "tenant=demo"

    extracted = telemetry.extract({"Traceparent": headers["traceparent"], "Baggage": headers["baggage"]})
    remote = get_current_span(extracted).get_span_context()
    assert remote.is_remote
    assert remote.trace_id == span.get_span_context().trace_id
    assert remote.span_id == span.get_span_context().span_id
    assert baggage.get_baggage("tenant", extracted) == "demo"


def test_extract_without_headers_starts_new_trace(telemetry) -> None:
    extracted = telemetry.extract({})
    assert not get_current_span(extracted).get_span_context().is_valid


def test_mark_span_error_sets_status(telemetry, span_exporter) -> None:
    with telemetry.tracer.start_as_current_span("failing") as span:
        mark_span_error(span, "decode_error", exc=ValueError("bad json"))
    (finished,) = span_exporter.get_finished_spans()
    assert finished.status.status_code is StatusCode.ERROR
    assert finished.attributes["error.type"] == "decode_error"
    assert finished.events[0].name == "exception"


def test_console_exporter_uses_batch_processor() -> None:
    telemetry = create_telemetry("service-a", TelemetrySettings(exporter="console"))
    processors = telemetry.provider._active_span_processor._span_processors
    assert len(processors) == 1
    assert isinstance(processors[0], BatchSpanProcessor)
    telemetry.shutdown()


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_required_collector_must_be_reachable() -> None:
    settings = TelemetrySettings(
        endpoint=f"127.0.0.1:{_closed_port()}",
        require_collector=True,
        connect_timeout_seconds=0.5,
    )
    with pytest.raises(TelemetryStartupError):
        _build_exporter(settings)


def test_reachable_collector_passes_probe() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]
        ensure_collector_reachable(f"http://127.0.0.1:{port}", timeout=1.0)
