"""Postal code (CEP) validation shared by both services.

Key Responsibilities:
    - Trim surrounding whitespace from the raw postal code
    - Accept exactly eight ASCII decimal digits and nothing else

Collaborators:
    - Upstream: Gateway and orchestrator services validate every inbound code
    - Downstream: :class:`ValidatedPostalCode` is handed to the lookup clients

Side Effects:
    - None; validation is pure

Thread Safety:
    - Thread-safe; no shared state
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidZipcodeError

# ``\d`` would also accept non-ASCII digits.
_CEP_PATTERN = re.compile(r"[0-9]{8}")

CEP_LENGTH = 8


@dataclass(frozen=True, slots=True)
class ValidatedPostalCode:
    """An eight digit postal code that passed validation."""

    digits: str

    def __post_init__(self) -> None:
        if not is_valid_postal_code(self.digits):
            raise ValueError(f"not a valid postal code: {self.digits!r}")

    def __str__(self) -> str:
        return self.digits


def is_valid_postal_code(value: str) -> bool:
    """Return ``True`` when ``value`` is exactly eight ASCII digits."""
    return len(value) == CEP_LENGTH and _CEP_PATTERN.fullmatch(value) is not None


def validate_postal_code(raw: str) -> ValidatedPostalCode:
    """Validate a raw postal code.

    Args:
        raw: Postal code as received from the caller.

    Returns:
        The trimmed postal code wrapped in :class:`ValidatedPostalCode`.

    Raises:
        InvalidZipcodeError: If the trimmed value is not eight ASCII digits.
    """
    code = raw.strip()
    if not is_valid_postal_code(code):
        raise InvalidZipcodeError()
    return ValidatedPostalCode(code)


__all__ = ["CEP_LENGTH", "ValidatedPostalCode", "is_valid_postal_code", "validate_postal_code"]
