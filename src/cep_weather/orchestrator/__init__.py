"""Orchestrator (service B): resolves the city and its current temperature."""

from __future__ import annotations

from .app import create_app
from .service import WeatherLookupService

__all__ = ["WeatherLookupService", "create_app"]
