"""Outbound HTTP clients for providers and the orchestrator."""

from .orchestrator import OrchestratorClient, RelayedResponse
from .viacep import CityResolverClient
from .weatherapi import WeatherClient

__all__ = ["CityResolverClient", "OrchestratorClient", "RelayedResponse", "WeatherClient"]
