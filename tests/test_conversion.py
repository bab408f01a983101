from __future__ import annotations

import pytest

from cep_weather.conversion import KELVIN_OFFSET, convert


def test_convert_twenty_celsius() -> None:
    result = convert(20)
    assert result.celsius == 20
    assert result.fahrenheit == 68
    assert result.kelvin == 293


@pytest.mark.parametrize("celsius", [-273.0, -40.0, -12.5, 0.0, 0.1, 21.7, 36.6, 55.55, 1e6])
def test_convert_uses_exact_formulas(celsius: float) -> None:
    result = convert(celsius)
    assert result.fahrenheit == celsius * 1.8 + 32
    assert result.kelvin == celsius + 273


def test_kelvin_offset_is_not_the_physical_constant() -> None:
    assert KELVIN_OFFSET == 273
    assert convert(0).kelvin == 273
