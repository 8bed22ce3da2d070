"""
Text style commands for ESC/POS thermal printers.

Contains emphasis, underline, font, alignment, character size and print
direction commands. Every builder is pure: it validates its arguments and
returns the frame bytes, it never touches printer state.

Reference: Epson ESC/POS Command Reference, "Print characters"
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from thermopos.encoding import CharacterEncoder, PageCode
from thermopos.protocol.common import require_range
from thermopos.protocol.constants import ESC, GS

__all__ = [
    "Font",
    "UnderlineMode",
    "JustifyMode",
    "MIN_TEXT_SIZE",
    "MAX_TEXT_SIZE",
    "bold",
    "underline",
    "double_strike",
    "font",
    "flip",
    "justify",
    "reverse_colours",
    "smoothing",
    "upside_down",
    "text_size",
    "text",
]

MIN_TEXT_SIZE: Final[int] = 1
MAX_TEXT_SIZE: Final[int] = 8

# =============================================================================
# ENUMS
# =============================================================================


class Font(Enum):
    """Character fonts (ESC M n)."""

    A = 0
    """Font A, 12x24 dots on most 80 mm printers (default)."""

    B = 1
    """Font B, 9x17 dots."""

    C = 2
    """Font C, model dependent."""


class UnderlineMode(Enum):
    """Underline thickness (ESC - n)."""

    NONE = 0
    SINGLE = 1
    DOUBLE = 2


class JustifyMode(Enum):
    """Line alignment (ESC a n). Only applies at the start of a line."""

    LEFT = 0
    CENTER = 1
    RIGHT = 2


def _switch(prefix: bytes, enabled: bool) -> bytes:
    return prefix + (b"\x01" if enabled else b"\x00")


# =============================================================================
# EMPHASIS
# =============================================================================


def bold(enabled: bool) -> bytes:
    """
    Turn emphasized (bold) mode on or off.

    Command: ESC E n
    Hex: 1B 45 n

    Example:
        >>> bold(True)
        b'\\x1bE\\x01'
    """
    return _switch(ESC + b"E", enabled)


def underline(mode: UnderlineMode) -> bytes:
    """
    Select underline mode.

    Command: ESC - n
    Hex: 1B 2D n (0 none, 1 one dot, 2 two dots)
    """
    if not isinstance(mode, UnderlineMode):
        raise TypeError(f"mode must be UnderlineMode, got {type(mode).__name__}")
    return ESC + b"-" + bytes([mode.value])


def double_strike(enabled: bool) -> bytes:
    """Command: ESC G n (1B 47 n)."""
    return _switch(ESC + b"G", enabled)


def reverse_colours(enabled: bool) -> bytes:
    """
    White on black printing.

    Command: GS B n
    Hex: 1D 42 n
    """
    return _switch(GS + b"B", enabled)


def smoothing(enabled: bool) -> bytes:
    """Command: GS b n (1D 62 n). Smooths enlarged characters."""
    return _switch(GS + b"b", enabled)


# =============================================================================
# FONT AND LAYOUT
# =============================================================================


def font(value: Font) -> bytes:
    """
    Select character font.

    Command: ESC M n
    Hex: 1B 4D n
    """
    if not isinstance(value, Font):
        raise TypeError(f"font must be Font, got {type(value).__name__}")
    return ESC + b"M" + bytes([value.value])


def justify(mode: JustifyMode) -> bytes:
    """
    Select justification.

    Command: ESC a n
    Hex: 1B 61 n (0 left, 1 center, 2 right)

    Note:
        The printer applies it only when processing the first byte of a
        line, so switch alignment before writing the line.
    """
    if not isinstance(mode, JustifyMode):
        raise TypeError(f"mode must be JustifyMode, got {type(mode).__name__}")
    return ESC + b"a" + bytes([mode.value])


def flip(enabled: bool) -> bytes:
    """90 degree clockwise rotation. Command: ESC V n (1B 56 n)."""
    return _switch(ESC + b"V", enabled)


def upside_down(enabled: bool) -> bytes:
    """Command: ESC { n (1B 7B n)."""
    return _switch(ESC + b"{", enabled)


def text_size(width: int, height: int) -> bytes:
    """
    Select character size as width and height multipliers.

    Command: GS ! n
    Hex: 1D 21 n, n = ((width - 1) << 4) | (height - 1)

    Args:
        width: Horizontal magnification, 1-8.
        height: Vertical magnification, 1-8.

    Returns:
        Command bytes.

    Raises:
        ValidationError: If either multiplier is outside 1-8.

    Example:
        >>> text_size(2, 2)
        b'\\x1d!\\x11'
        >>> text_size(8, 8)
        b'\\x1d!w'
    """
    require_range("width", width, MIN_TEXT_SIZE, MAX_TEXT_SIZE)
    require_range("height", height, MIN_TEXT_SIZE, MAX_TEXT_SIZE)
    return GS + b"!" + bytes([((width - 1) << 4) | (height - 1)])


# =============================================================================
# TEXT PAYLOAD
# =============================================================================


def text(value: str, page_code: PageCode, encoder: CharacterEncoder) -> bytes:
    """Encode printable text for ``page_code``; see CharacterEncoder."""
    return encoder.encode(value, page_code)
