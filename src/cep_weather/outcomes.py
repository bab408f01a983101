"""Tagged outcomes returned by the provider clients.

A lookup either finds what it was asked for, reports a definite miss, or fails
upstream. Keeping the miss separate from the failure lets the orchestrator map
each one to its own status code without inspecting exception types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class CityFound:
    city: str


@dataclass(frozen=True, slots=True)
class CityNotFound:
    pass


@dataclass(frozen=True, slots=True)
class TemperatureFound:
    celsius: float


@dataclass(frozen=True, slots=True)
class UpstreamFailure:
    """Transport error, non-200 status, or undecodable body from a provider."""

    reason: str
    status_code: int | None = None
    cause: BaseException | None = None

    def describe(self) -> str:
        if self.status_code is not None:
            return f"{self.reason} (status {self.status_code})"
        if self.cause is not None:
            return f"{self.reason}: {self.cause}"
        return self.reason


CityResolution: TypeAlias = CityFound | CityNotFound | UpstreamFailure
TemperatureReading: TypeAlias = TemperatureFound | UpstreamFailure


__all__ = [
    "CityFound",
    "CityNotFound",
    "CityResolution",
    "TemperatureFound",
    "TemperatureReading",
    "UpstreamFailure",
]
