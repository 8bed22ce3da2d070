"""
One-dimensional barcode commands for ESC/POS printers.

Barcodes are printed with GS k in its length-prefixed form (function B,
m = 65-73): GS k m n d1...dn. The HRI (human readable interpretation)
font and position, module width and bar height are set beforehand with
GS f, GS H, GS w and GS h.

Data is validated against each symbology's character set and length rules
before any bytes are produced.

Reference: Epson ESC/POS Command Reference, GS k
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final, List, Optional

from thermopos.errors import ValidationError
from thermopos.protocol.constants import GS

__all__ = [
    "BarcodeSystem",
    "BarcodeWidth",
    "BarcodeHeight",
    "BarcodeFont",
    "BarcodePosition",
    "BarcodeOption",
    "MAX_BARCODE_DATA",
    "validate_barcode",
    "barcode_width",
    "barcode_height",
    "barcode_font",
    "barcode_position",
    "barcode_print",
    "barcode",
]

MAX_BARCODE_DATA: Final[int] = 255
"""The length byte n of GS k function B limits data to 255 bytes."""

# =============================================================================
# ENUMS
# =============================================================================


class BarcodeSystem(Enum):
    """
    Barcode symbologies (GS k function B, m = 65-73).

    Data rules:
        UPCA:    11 or 12 digits (printer adds or checks the check digit)
        UPCE:    6, 7, 8, 11 or 12 digits; all but 6 digits start with 0
        EAN13:   12 or 13 digits
        EAN8:    7 or 8 digits
        CODE39:  0-9 A-Z space $ % * + - . /
        ITF:     even number of digits, at least 2
        CODABAR: 0-9 A-D a-d $ + - . / :, at least 2 characters
        CODE93:  ASCII 0-127
        CODE128: ASCII 0-127 starting with a code set selector {A {B or {C
    """

    UPCA = 65
    UPCE = 66
    EAN13 = 67
    EAN8 = 68
    CODE39 = 69
    ITF = 70
    CODABAR = 71
    CODE93 = 72
    CODE128 = 73


class BarcodeWidth(Enum):
    """Module width presets (GS w n)."""

    XS = 1
    S = 2
    M = 3
    L = 4
    XL = 5


class BarcodeHeight(Enum):
    """Bar height presets in dots (GS h n)."""

    XS = 51
    S = 102
    M = 153
    L = 204
    XL = 255


class BarcodeFont(Enum):
    """HRI character font (GS f n)."""

    A = 0
    B = 1
    C = 2
    D = 3
    E = 4


class BarcodePosition(Enum):
    """HRI character position (GS H n)."""

    NONE = 0
    ABOVE = 1
    BELOW = 2
    BOTH = 3


@dataclass(frozen=True)
class BarcodeOption:
    """Barcode layout settings sent before each barcode."""

    width: BarcodeWidth = BarcodeWidth.M
    height: BarcodeHeight = BarcodeHeight.S
    font: BarcodeFont = BarcodeFont.A
    position: BarcodePosition = BarcodePosition.BELOW


# =============================================================================
# VALIDATION
# =============================================================================

_CODE39_RE = re.compile(r"^[0-9A-Z $%*+\-./]+$")
_CODABAR_RE = re.compile(r"^[0-9A-Da-d$+\-./:]+$")
_CODE128_SETS: Final = ("{A", "{B", "{C")


def _digits(system: BarcodeSystem, data: str, lengths: tuple) -> None:
    if not data.isascii() or not data.isdigit():
        raise ValidationError(
            f"{system.name} data must contain digits only",
            context={"system": system.name, "data": data},
        )
    if len(data) not in lengths:
        allowed = ", ".join(str(n) for n in lengths)
        raise ValidationError(
            f"{system.name} data must be {allowed} digits long, got {len(data)}",
            context={"system": system.name, "length": len(data)},
        )


def validate_barcode(system: BarcodeSystem, data: str) -> str:
    """
    Check ``data`` against the rules of ``system``.

    Args:
        system: Target symbology.
        data: Payload as it will be sent.

    Returns:
        The payload to send. CODE128 data without a code set selector gets
        ``{B`` prepended; every other symbology returns ``data`` unchanged.

    Raises:
        TypeError: If ``data`` is not a string.
        ValidationError: If the content or length is invalid.
    """
    if not isinstance(system, BarcodeSystem):
        raise TypeError(f"system must be BarcodeSystem, got {type(system).__name__}")
    if not isinstance(data, str):
        raise TypeError(f"Barcode data must be str, got {type(data).__name__}")
    if not data:
        raise ValidationError(
            f"{system.name} data must be a non-empty string",
            context={"system": system.name},
        )

    if system is BarcodeSystem.UPCA:
        _digits(system, data, (11, 12))
    elif system is BarcodeSystem.UPCE:
        _digits(system, data, (6, 7, 8, 11, 12))
        if len(data) != 6 and not data.startswith("0"):
            raise ValidationError(
                "UPCE data of 7, 8, 11 or 12 digits must start with 0",
                context={"system": system.name, "data": data},
            )
    elif system is BarcodeSystem.EAN13:
        _digits(system, data, (12, 13))
    elif system is BarcodeSystem.EAN8:
        _digits(system, data, (7, 8))
    elif system is BarcodeSystem.ITF:
        if not data.isascii() or not data.isdigit():
            raise ValidationError(
                "ITF data must contain digits only",
                context={"system": system.name, "data": data},
            )
        if len(data) < 2 or len(data) % 2:
            raise ValidationError(
                f"ITF data must be an even number of digits, got {len(data)}",
                context={"system": system.name, "length": len(data)},
            )
    elif system is BarcodeSystem.CODE39:
        if not _CODE39_RE.match(data):
            raise ValidationError(
                "CODE39 supports only 0-9, A-Z, space and $%*+-./",
                context={"system": system.name, "data": data},
            )
    elif system is BarcodeSystem.CODABAR:
        if len(data) < 2 or not _CODABAR_RE.match(data):
            raise ValidationError(
                "CODABAR needs at least 2 characters of 0-9, A-D, a-d and $+-./:",
                context={"system": system.name, "data": data},
            )
    elif system is BarcodeSystem.CODE93:
        if not data.isascii():
            raise ValidationError(
                "CODE93 supports ASCII characters only",
                context={"system": system.name},
            )
    elif system is BarcodeSystem.CODE128:
        if not data.isascii():
            raise ValidationError(
                "CODE128 supports ASCII characters only",
                context={"system": system.name},
            )
        if not data.startswith(_CODE128_SETS):
            data = "{B" + data
        if len(data) < 3:
            raise ValidationError(
                "CODE128 data is empty after the code set selector",
                context={"system": system.name},
            )

    if len(data) > MAX_BARCODE_DATA:
        raise ValidationError(
            f"{system.name} data too long ({len(data)} > {MAX_BARCODE_DATA})",
            context={"system": system.name, "length": len(data)},
        )
    return data


# =============================================================================
# COMMANDS
# =============================================================================


def barcode_width(width: int) -> bytes:
    """
    Set module width.

    Command: GS w n
    Hex: 1D 77 n

    Values above 5 are clamped to 5; 0 is rejected.
    """
    if width == 0:
        raise ValidationError("Barcode width cannot be 0", context={"width": width})
    if not isinstance(width, int) or width < 0:
        raise ValidationError("Barcode width must be a positive integer", context={"width": width})
    return GS + b"w" + bytes([min(width, BarcodeWidth.XL.value)])


def barcode_height(height: int) -> bytes:
    """
    Set bar height in dots.

    Command: GS h n
    Hex: 1D 68 n (1-255)
    """
    if not isinstance(height, int) or not 1 <= height <= 255:
        raise ValidationError(
            "Barcode height must be between 1 and 255 dots",
            context={"height": height},
        )
    return GS + b"h" + bytes([height])


def barcode_font(value: BarcodeFont) -> bytes:
    """Command: GS f n (1D 66 n)."""
    return GS + b"f" + bytes([value.value])


def barcode_position(position: BarcodePosition) -> bytes:
    """Command: GS H n (1D 48 n)."""
    return GS + b"H" + bytes([position.value])


def barcode_print(system: BarcodeSystem, data: str) -> bytes:
    """
    Print a barcode.

    Command: GS k m n d1...dn
    Hex: 1D 6B m n data

    Args:
        system: Symbology, its value is m.
        data: Payload, validated with validate_barcode().

    Example:
        >>> barcode_print(BarcodeSystem.EAN8, "1234567")
        b'\\x1dkD\\x071234567'
    """
    payload = validate_barcode(system, data).encode("ascii")
    cmd = GS + b"k"
    cmd += bytes([system.value])  # m
    cmd += bytes([len(payload)])  # n
    cmd += payload  # d1...dn
    return cmd


def barcode(
    system: BarcodeSystem,
    data: str,
    option: Optional[BarcodeOption] = None,
) -> List[bytes]:
    """
    Frames configuring and printing one barcode, in sending order.

    Validation happens first: nothing is returned for invalid data.
    """
    option = option or BarcodeOption()
    print_frame = barcode_print(system, data)
    return [
        barcode_width(option.width.value),
        barcode_height(option.height.value),
        barcode_font(option.font),
        barcode_position(option.position),
        print_frame,
    ]
