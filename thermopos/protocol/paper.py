"""
Printer control, paper movement and peripheral commands.

Covers initialization, reset, buffer cancel, line feeds, line spacing,
paper cutting, cash drawer pulses and motion units.

Reference: Epson ESC/POS Command Reference, "Mechanism control" and
"Print position"
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from thermopos.protocol.common import require_byte
from thermopos.protocol.constants import CAN, ESC, GS

__all__ = [
    "CashDrawer",
    "INIT",
    "RESET",
    "CANCEL",
    "RESET_LINE_SPACING",
    "init",
    "reset",
    "cancel",
    "feed",
    "line_spacing",
    "reset_line_spacing",
    "cut",
    "cash_drawer",
    "motion_units",
]

# =============================================================================
# FIXED COMMANDS
# =============================================================================

INIT: Final[bytes] = ESC + b"@"
"""
Initialize printer.

Command: ESC @
Hex: 1B 40
Effect: Clears the print buffer and restores default modes (font A,
size 1x1, left alignment, PC437). Downloaded data is kept.
"""

RESET: Final[bytes] = ESC + b"?\x0a\x00"
"""
Cancel user-defined characters and restore defaults.

Hex: 1B 3F 0A 00
"""

CANCEL: Final[bytes] = CAN
"""
Cancel print data in page mode.

Hex: 18
Note: Sent before raster images so stale page data is not printed with them.
"""

RESET_LINE_SPACING: Final[bytes] = ESC + b"2"
"""Default line spacing (about 1/6 inch). Hex: 1B 32"""


class CashDrawer(Enum):
    """Drawer kick-out connector pin (ESC p m)."""

    PIN2 = 0
    PIN5 = 1


def init() -> bytes:
    return INIT


def reset() -> bytes:
    return RESET


def cancel() -> bytes:
    return CANCEL


# =============================================================================
# PAPER MOVEMENT
# =============================================================================


def feed(lines: int = 1) -> bytes:
    """
    Print the buffer and feed ``lines`` lines.

    Command: ESC d n
    Hex: 1B 64 n (0-255)
    """
    return ESC + b"d" + bytes([require_byte("lines", lines)])


def line_spacing(value: int) -> bytes:
    """
    Set line spacing to ``value`` motion units.

    Command: ESC 3 n
    Hex: 1B 33 n (0-255)
    """
    return ESC + b"3" + bytes([require_byte("line_spacing", value)])


def reset_line_spacing() -> bytes:
    return RESET_LINE_SPACING


def cut(partial: bool = False) -> bytes:
    """
    Feed to the cutter and cut the paper.

    Command: GS V m n (function B, feed n motion units then cut)
    Hex: 1D 56 41 00 (full) / 1D 56 41 01 (partial)

    Example:
        >>> cut()
        b'\\x1dVA\\x00'
    """
    return GS + b"VA" + (b"\x01" if partial else b"\x00")


def motion_units(x: int, y: int) -> bytes:
    """
    Set horizontal and vertical motion units to 1/x and 1/y inch.

    Command: GS P x y
    Hex: 1D 50 x y
    """
    return GS + b"P" + bytes([require_byte("x", x), require_byte("y", y)])


# =============================================================================
# PERIPHERALS
# =============================================================================


def cash_drawer(pin: CashDrawer) -> bytes:
    """
    Pulse the drawer kick-out connector.

    Command: ESC p m
    Hex: 1B 70 00 (pin 2) / 1B 70 01 (pin 5)

    Note:
        Only the pin selector is sent, the printer uses its default pulse
        timing.
    """
    if not isinstance(pin, CashDrawer):
        raise TypeError(f"pin must be CashDrawer, got {type(pin).__name__}")
    return ESC + b"p" + bytes([pin.value])
