"""Temperature scale conversion."""

from __future__ import annotations

from dataclasses import dataclass

# Kept at 273 rather than 273.15; published responses depend on it.
KELVIN_OFFSET = 273


@dataclass(frozen=True, slots=True)
class TemperatureConversion:
    """Celsius reading with the derived Fahrenheit and Kelvin values."""

    celsius: float

    @property
    def fahrenheit(self) -> float:
        return self.celsius * 1.8 + 32

    @property
    def kelvin(self) -> float:
        return self.celsius + KELVIN_OFFSET


def convert(celsius: float) -> TemperatureConversion:
    """Convert a Celsius reading into all supported scales."""
    return TemperatureConversion(celsius=celsius)


__all__ = ["KELVIN_OFFSET", "TemperatureConversion", "convert"]
