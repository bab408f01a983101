"""Tracing and logging helpers for the FastAPI services."""

from __future__ import annotations

from .middleware import TraceContextMiddleware
from .tracing import Telemetry, create_telemetry, ensure_collector_reachable, mark_span_error

__all__ = [
    "Telemetry",
    "TraceContextMiddleware",
    "create_telemetry",
    "ensure_collector_reachable",
    "mark_span_error",
]
