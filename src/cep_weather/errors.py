"""Error taxonomy shared by the gateway and orchestrator services.

Key Responsibilities:
    - Define one exception per externally observable failure of a request
    - Carry the HTTP status and response message alongside the exception so the
      application layer renders every failure the same way
    - Define startup errors that never reach a request

Collaborators:
    - Upstream: Validators and services raise these exceptions
    - Downstream: FastAPI exception handlers serialise them as ``{"message": ...}``

Side Effects:
    - None; exceptions are plain data carriers

Thread Safety:
    - Thread-safe; instances are never shared between requests
"""

from __future__ import annotations

from typing import Any

# ==============================================================================
# REQUEST ERRORS
# ==============================================================================


class CepWeatherError(RuntimeError):
    """Base exception for failures surfaced to HTTP callers."""

    status_code: int = 500
    message: str = "internal server error"
    error_type: str = "internal_error"

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None) -> None:
        """Initialise the error with an optional message override.

        Args:
            message: Response message; defaults to the class level message.
            cause: Underlying exception kept for logging and span recording.
        """
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        self.cause = cause

    def to_response(self) -> dict[str, Any]:
        """Return the JSON body rendered for this error."""
        return {"message": self.message}


class InvalidRequestBodyError(CepWeatherError):
    status_code = 400
    message = "invalid request body"
    error_type = "decode_error"


class InvalidZipcodeError(CepWeatherError):
    status_code = 422
    message = "invalid zipcode"
    error_type = "invalid_zipcode"


class ZipcodeNotFoundError(CepWeatherError):
    status_code = 404
    message = "can not find zipcode"
    error_type = "not_found"


class CityLookupError(CepWeatherError):
    status_code = 500
    message = "internal server error during city lookup"
    error_type = "viacep_error"


class WeatherLookupError(CepWeatherError):
    status_code = 500
    message = "internal server error during weather lookup"
    error_type = "weather_api_error"


class OrchestratorUnavailableError(CepWeatherError):
    status_code = 500
    message = "could not connect to service B"
    error_type = "service_b_unreachable"


# ==============================================================================
# STARTUP ERRORS
# ==============================================================================


class ConfigurationError(RuntimeError):
    """Raised when settings cannot be loaded or are inconsistent."""


class TelemetryStartupError(RuntimeError):
    """Raised when the trace collector is required but unreachable."""


__all__ = [
    "CepWeatherError",
    "CityLookupError",
    "ConfigurationError",
    "InvalidRequestBodyError",
    "InvalidZipcodeError",
    "OrchestratorUnavailableError",
    "TelemetryStartupError",
    "WeatherLookupError",
    "ZipcodeNotFoundError",
]
