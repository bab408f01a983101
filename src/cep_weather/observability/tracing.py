"""OpenTelemetry setup as an explicitly constructed object.

Key Responsibilities:
    - Build one :class:`TracerProvider` per process with the configured exporter
    - Hold the tracer and the W3C Trace Context + Baggage propagator used to move
      trace context across HTTP hops
    - Optionally verify that the trace collector is reachable at startup

Collaborators:
    - Upstream: Application factories and the CLI create a :class:`Telemetry`
      and pass it to middleware and HTTP clients
    - Downstream: OpenTelemetry SDK and the OTLP gRPC exporter

Side Effects:
    - Opens a gRPC channel to the collector when the OTLP exporter is selected
    - Never installs a global tracer provider or propagator

Thread Safety:
    - Thread-safe; the SDK provider and propagators may be shared across tasks
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import socket
from collections.abc import Mapping, MutableMapping
from urllib.parse import urlparse

import structlog
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.trace import Span, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from ..config.settings import TelemetrySettings
from ..errors import TelemetryStartupError

logger = structlog.get_logger(__name__)

DEFAULT_COLLECTOR_PORT = 4317

# ==============================================================================
# TELEMETRY OBJECT
# ==============================================================================


class Telemetry:
    """Tracer, provider and propagator belonging to one service process."""

    def __init__(
        self,
        service_name: str,
        provider: TracerProvider,
        *,
        propagator: TextMapPropagator | None = None,
    ) -> None:
        self.service_name = service_name
        self.provider = provider
        self.tracer: Tracer = provider.get_tracer(f"{service_name}-tracer")
        self.propagator = propagator or CompositePropagator(
            [TraceContextTextMapPropagator(), W3CBaggagePropagator()]
        )

    def inject(
        self,
        headers: MutableMapping[str, str],
        context: Context | None = None,
    ) -> MutableMapping[str, str]:
        """Write the current (or given) trace context into ``headers``."""
        self.propagator.inject(headers, context=context)
        return headers

    def extract(self, headers: Mapping[str, str]) -> Context:
        """Return the trace context carried by inbound ``headers``."""
        return self.propagator.extract({key.lower(): value for key, value in headers.items()})

    def shutdown(self) -> None:
        """Flush pending spans and release exporter resources."""
        self.provider.shutdown()


# ==============================================================================
# SPAN HELPERS
# ==============================================================================


def mark_span_error(
    span: Span,
    error_type: str,
    *,
    exc: BaseException | None = None,
    description: str | None = None,
) -> None:
    """Annotate ``span`` with a failure without altering the response."""
    span.set_attribute("error.type", error_type)
    if exc is not None:
        span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, description or error_type))


# ==============================================================================
# FACTORY FUNCTIONS
# ==============================================================================


def _collector_address(endpoint: str) -> tuple[str, int]:
    parsed = urlparse(endpoint if "://" in endpoint else f"//{endpoint}")
    host = parsed.hostname or endpoint
    return host, parsed.port or DEFAULT_COLLECTOR_PORT


def ensure_collector_reachable(endpoint: str, timeout: float) -> None:
    """Open and close a TCP connection to the collector.

    Raises:
        TelemetryStartupError: If the connection cannot be established.
    """
    host, port = _collector_address(endpoint)
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError as exc:
        raise TelemetryStartupError(
            f"trace collector {host}:{port} is not reachable: {exc}"
        ) from exc


def _build_exporter(settings: TelemetrySettings) -> SpanExporter | None:
    target = settings.exporter
    if target == "none":
        return None
    if target == "console":
        return ConsoleSpanExporter()
    if settings.require_collector:
        ensure_collector_reachable(settings.endpoint, settings.connect_timeout_seconds)
    return OTLPSpanExporter(endpoint=settings.endpoint, insecure=settings.insecure)


def create_telemetry(
    service_name: str,
    settings: TelemetrySettings,
    *,
    environment: str = "dev",
    exporter: SpanExporter | None = None,
) -> Telemetry:
    """Configure an OpenTelemetry tracer provider for ``service_name``.

    Args:
        service_name: Name reported to tracing backends.
        settings: Exporter type, endpoint, and sampling configuration.
        environment: Deployment environment recorded as a resource attribute.
        exporter: Exporter override; spans are exported synchronously through
            it instead of the configured exporter. Used by tests.

    Returns:
        A :class:`Telemetry` owning the provider.

    Raises:
        TelemetryStartupError: When ``require_collector`` is set and the
            collector cannot be reached.
    """
    resource = Resource.create({"service.name": service_name, "environment": environment})
    sampler = ParentBased(TraceIdRatioBased(settings.sample_ratio))
    provider = TracerProvider(resource=resource, sampler=sampler)

    if exporter is not None:
        provider.add_span_processor(SimpleSpanProcessor(exporter))
    else:
        configured = _build_exporter(settings)
        if configured is not None:
            provider.add_span_processor(BatchSpanProcessor(configured))

    logger.info(
        "telemetry.configured",
        service=service_name,
        exporter="override" if exporter is not None else settings.exporter,
        endpoint=settings.endpoint,
    )
    return Telemetry(service_name, provider)


__all__ = [
    "Telemetry",
    "create_telemetry",
    "ensure_collector_reachable",
    "mark_span_error",
]
