"""Validation and relay logic of the gateway (service A)."""

from __future__ import annotations

import structlog
from opentelemetry.trace import Span

from ..clients import OrchestratorClient, RelayedResponse
from ..errors import InvalidRequestBodyError, InvalidZipcodeError
from ..models import parse_postal_code_request
from ..validation import validate_postal_code

logger = structlog.get_logger(__name__)


class GatewayService:
    """Validate the postal code, then relay the orchestrator's answer untouched.

    Only the trimmed, validated code is forwarded; the caller's raw body never
    leaves the gateway.
    """

    def __init__(self, orchestrator: OrchestratorClient) -> None:
        self._orchestrator = orchestrator

    async def forward(self, body: bytes, span: Span) -> RelayedResponse:
        try:
            request = parse_postal_code_request(body)
        except InvalidRequestBodyError as exc:
            span.set_attribute("error.message", exc.message)
            raise

        try:
            code = validate_postal_code(request.cep)
        except InvalidZipcodeError:
            span.set_attribute("cep.valid", False)
            raise

        span.set_attribute("cep.valid", True)
        span.set_attribute("cep.value", code.digits)

        relayed = await self._orchestrator.fetch_weather(code)
        if relayed.status_code != 200:
            span.add_event("orchestrator.non_ok", {"http.status_code": relayed.status_code})
            logger.info("gateway.relay.non_ok", status=relayed.status_code, cep=code.digits)
        return relayed


__all__ = ["GatewayService"]
