"""Command line entry point running either service.

Example:
-------
    >>> cep-weather gateway --port 8080
    >>> cep-weather orchestrator --port 8081
    >>> python -m cep_weather.cli orchestrator --env prod

"""

from __future__ import annotations

# ==============================================================================
# IMPORTS
# ==============================================================================

import argparse
from collections.abc import Sequence

import structlog
import uvicorn

from .config.settings import load_settings
from .errors import ConfigurationError, TelemetryStartupError
from .gateway.app import create_app as create_gateway_app
from .orchestrator.app import create_app as create_orchestrator_app

logger = structlog.get_logger(__name__)

SERVICES = {
    "gateway": create_gateway_app,
    "orchestrator": create_orchestrator_app,
}

# ==============================================================================
# CLI INTERFACE
# ==============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CEP weather services")
    parser.add_argument("service", choices=sorted(SERVICES), help="Service to run")
    parser.add_argument("--host", default=None, help="Bind address (overrides settings)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides settings)")
    parser.add_argument("--env", default=None, help="Deployment environment (dev, staging, prod)")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Load settings, build the selected application and serve it."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env)
        app = SERVICES[args.service](settings)
    except (ConfigurationError, TelemetryStartupError) as exc:
        parser.exit(1, f"failed to start {args.service}: {exc}\n")

    service_settings = settings.gateway if args.service == "gateway" else settings.orchestrator
    host = args.host or service_settings.host
    port = args.port or service_settings.port
    logger.info("service.run", service=args.service, host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_config=None)


__all__ = ["build_parser", "main"]


if __name__ == "__main__":  # pragma: no cover
    main()
