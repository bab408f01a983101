"""Response rendering shared by both FastAPI applications.

Key Responsibilities:
    - Render :class:`~cep_weather.errors.CepWeatherError` as ``{"message": ...}``
    - Catch anything unexpected and answer with a generic 500
    - Provide the ``/health`` route

Collaborators:
    - Upstream: ``gateway.app`` and ``orchestrator.app`` call
      :func:`register_error_handlers` and include :func:`health_router`
    - Downstream: FastAPI / Starlette responses
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import CepWeatherError

logger = structlog.get_logger(__name__)


def error_response(exc: CepWeatherError) -> JSONResponse:
    """Create the JSON response for a request error."""
    return JSONResponse(exc.to_response(), status_code=exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CepWeatherError)
    async def handle_service_error(request: Request, exc: CepWeatherError) -> JSONResponse:
        logger.info(
            "request.failed",
            path=request.url.path,
            status=exc.status_code,
            error_type=exc.error_type,
        )
        return error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "request.unhandled_error",
            path=request.url.path,
            error=repr(exc),
        )
        return JSONResponse({"message": "internal server error"}, status_code=500)


def health_router(service_name: str) -> APIRouter:
    router = APIRouter()

    @router.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": service_name}

    return router


__all__ = ["error_response", "health_router", "register_error_handlers"]
