"""Parameter checks and small byte helpers used by the command builders."""

from __future__ import annotations

from typing import Any, Tuple

from thermopos.errors import ValidationError

__all__ = [
    "require_range",
    "require_byte",
    "u16_le",
    "param_length",
]


def require_range(name: str, value: Any, low: int, high: int) -> int:
    """
    Return ``value`` if it is an int within [low, high].

    Raises:
        ValidationError: Otherwise. bool is rejected on purpose.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{name} must be an integer, got {type(value).__name__}",
            context={name: value},
        )
    if not low <= value <= high:
        raise ValidationError(
            f"{name} must be between {low} and {high}, got {value}",
            context={name: value},
        )
    return value


def require_byte(name: str, value: Any) -> int:
    return require_range(name, value, 0, 0xFF)


def u16_le(value: int) -> bytes:
    """Encode 0..65535 as two little-endian bytes (nL nH)."""
    return bytes([value & 0xFF, (value >> 8) & 0xFF])


def param_length(payload_length: int, extra: int, limit: int = 0xFFFF) -> Tuple[int, int]:
    """
    Compute pL/pH for a GS ( k store function.

    Args:
        payload_length: Length of the symbol data.
        extra: Fixed bytes counted by pL/pH besides the data (cn, fn, m...).
        limit: Largest value pL + pH * 256 may take.

    Raises:
        ValidationError: If the total does not fit.
    """
    total = payload_length + extra
    if total > limit:
        raise ValidationError(
            f"Symbol data too long ({payload_length} bytes)",
            context={"length": payload_length, "max": limit - extra},
        )
    return total & 0xFF, (total >> 8) & 0xFF
