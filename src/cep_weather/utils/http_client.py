"""Traced async HTTP client used for every outbound call.

Key Responsibilities:
    - Wrap ``httpx.AsyncClient`` with a per-call deadline
    - Emit an INTERNAL span for each request, nested under the caller's CLIENT span
    - Inject the active trace context into outbound headers when the target is
      one of our own services

Collaborators:
    - Upstream: Provider clients and the orchestrator client
    - Downstream: ``httpx`` for transport, :class:`Telemetry` for spans and
      propagation

Side Effects:
    - Opens network connections via ``httpx``

Thread Safety:
    - One instance is shared by all requests of a service; ``httpx.AsyncClient``
      supports concurrent dispatch and the wrapper holds no mutable state

Performance Characteristics:
    - Connection pooling is delegated to ``httpx``
    - No retries; each failure is returned to the caller immediately

Example:
    >>> client = AsyncHttpClient(telemetry=telemetry, config=HttpClientConfig(timeout=5.0))
    >>> response = await client.request("GET", "https://viacep.com.br/ws/01001000/json/")
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from opentelemetry.trace import SpanKind

from ..observability.tracing import Telemetry

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================


@dataclass(frozen=True)
class HttpClientConfig:
    """Outbound call configuration."""

    timeout: float = 10.0
    base_url: str | None = None
    propagate_context: bool = False


# ==============================================================================
# CLIENT
# ==============================================================================


class AsyncHttpClient:
    """Async HTTP client that traces each request."""

    def __init__(
        self,
        *,
        telemetry: Telemetry,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create the client.

        Args:
            telemetry: Tracing object of the owning service.
            config: Deadline, base URL and propagation behaviour.
            transport: Optional httpx transport override used in tests.
        """
        self._config = config or HttpClientConfig()
        self._telemetry = telemetry
        client_kwargs: dict[str, Any] = {
            "timeout": self._config.timeout,
            "transport": transport,
        }
        if self._config.base_url:
            client_kwargs["base_url"] = self._config.base_url
        self._client = httpx.AsyncClient(**client_kwargs)

    @property
    def timeout(self) -> float:
        return self._config.timeout

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue a single HTTP request inside an ``http.request`` span.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Fully qualified or relative URL depending on ``base_url``.
            **kwargs: Additional arguments forwarded to ``httpx.AsyncClient.request``.

        Returns:
            Response returned by ``httpx``, whatever its status code.

        Raises:
            httpx.HTTPError: On transport failures, including the deadline
                being exceeded.
        """
        with self._telemetry.tracer.start_as_current_span(
            "http.request", kind=SpanKind.INTERNAL
        ) as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.url", url)
            if self._config.propagate_context:
                headers = dict(kwargs.pop("headers", None) or {})
                kwargs["headers"] = self._telemetry.inject(headers)
            response = await self._client.request(method, url, **kwargs)
            span.set_attribute("http.status_code", response.status_code)
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        """Close the underlying ``httpx.AsyncClient``."""
        await self._client.aclose()

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator[AsyncHttpClient]:
        """Provide an async context manager that closes the client.

        Yields:
            The current ``AsyncHttpClient`` instance.
        """
        try:
            yield self
        finally:
            await self.aclose()


__all__ = ["AsyncHttpClient", "HttpClientConfig"]
