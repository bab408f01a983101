"""Postal code to weather services: a validating gateway and an orchestrator."""

__version__ = "0.1.0"
