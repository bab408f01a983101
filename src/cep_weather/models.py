"""Pydantic models for every JSON document exchanged by the services.

Key Responsibilities:
    - Describe inbound request bodies and outbound response bodies
    - Describe the subset of the ViaCEP and WeatherAPI payloads that is consumed
    - Provide decoding helpers that translate validation failures into the
      service error taxonomy

Collaborators:
    - Upstream: FastAPI handlers and HTTP clients decode raw bytes here
    - Downstream: :mod:`cep_weather.errors` for decode failures

Side Effects:
    - None
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictStr,
    ValidationError,
    field_serializer,
    field_validator,
)

from .conversion import TemperatureConversion
from .errors import InvalidRequestBodyError

# ==============================================================================
# SERVICE PAYLOADS
# ==============================================================================


class PostalCodeRequest(BaseModel):
    """Body accepted by ``POST /cep-weather`` and ``POST /weather``."""

    model_config = ConfigDict(extra="ignore")

    cep: StrictStr = ""

    @field_validator("cep", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class WeatherResponse(BaseModel):
    """Successful orchestrator response."""

    city: str
    temp_C: float
    temp_F: float
    temp_K: float

    @classmethod
    def from_conversion(cls, city: str, conversion: TemperatureConversion) -> WeatherResponse:
        return cls(
            city=city,
            temp_C=conversion.celsius,
            temp_F=conversion.fahrenheit,
            temp_K=conversion.kelvin,
        )

    @field_serializer("temp_C", "temp_F", "temp_K")
    def _integral_as_int(self, value: float) -> float | int:
        # 20.0 renders as 20, matching the published responses.
        return int(value) if value.is_integer() else value


class MessageResponse(BaseModel):
    """Error body returned for every failed request."""

    message: str


# ==============================================================================
# PROVIDER PAYLOADS
# ==============================================================================


class ViaCepPayload(BaseModel):
    """Response of ``GET /ws/{cep}/json/``."""

    model_config = ConfigDict(extra="ignore")

    cep: str = ""
    localidade: str = ""
    # Served as ``"true"`` by older deployments and as a JSON boolean by newer ones.
    erro: StrictStr | StrictBool | None = None

    @property
    def not_found(self) -> bool:
        # Any non-empty string counts, including "false".
        return bool(self.erro)


class CurrentConditions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Booleans and numeric strings are rejected, not coerced.
    temp_c: StrictFloat = Field(allow_inf_nan=False)


class WeatherApiPayload(BaseModel):
    """Response of ``GET /current.json``."""

    model_config = ConfigDict(extra="ignore")

    current: CurrentConditions


# ==============================================================================
# DECODING HELPERS
# ==============================================================================


def parse_postal_code_request(body: bytes) -> PostalCodeRequest:
    """Decode an inbound request body.

    Raises:
        InvalidRequestBodyError: If the body is not a JSON object with a string ``cep``.
    """
    try:
        return PostalCodeRequest.model_validate_json(body)
    except ValidationError as exc:
        raise InvalidRequestBodyError(cause=exc) from exc


__all__ = [
    "CurrentConditions",
    "MessageResponse",
    "PostalCodeRequest",
    "ViaCepPayload",
    "WeatherApiPayload",
    "WeatherResponse",
    "parse_postal_code_request",
]
