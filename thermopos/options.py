"""
Printer options and debug dump formatting.

PrinterOptions is fixed for the lifetime of a Printer. It can be built
directly or from the dictionary returned by ``thermopos.load_config()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Final, Mapping, Optional

from thermopos.encoding import DEFAULT_FALLBACK_BYTE, PageCode
from thermopos.errors import ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_CHARACTERS_PER_LINE",
    "DebugMode",
    "PrinterOptions",
    "format_frame",
]

DEFAULT_CHARACTERS_PER_LINE: Final[int] = 42


class DebugMode(Enum):
    """How instruction frames are rendered in debug logs."""

    HEX = "hex"
    """Two-digit hexadecimal bytes: ``1B 40``."""

    DEC = "dec"
    """Decimal bytes: ``27 64``."""

    CHAR = "char"
    """Printable ASCII as is, other bytes as ``\\xNN``."""

    @classmethod
    def parse(cls, value: Any) -> Optional["DebugMode"]:
        """Accept a member, its name or value (any case), or None."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
        raise ValidationError(f"Unknown debug mode {value!r}", context={"debug_mode": value})


def format_frame(frame: bytes, mode: DebugMode) -> str:
    """
    Render ``frame`` for a log line.

    Example:
        >>> format_frame(b"\\x1b@", DebugMode.HEX)
        '1B 40'
        >>> format_frame(b"\\x1b@", DebugMode.DEC)
        '27 64'
    """
    if mode is DebugMode.HEX:
        return " ".join(f"{b:02X}" for b in frame)
    if mode is DebugMode.DEC:
        return " ".join(str(b) for b in frame)
    return "".join(chr(b) if 0x20 <= b < 0x7F else f"\\x{b:02x}" for b in frame)


@dataclass(frozen=True)
class PrinterOptions:
    """
    Builder options.

    Attributes:
        page_code: Page code selected by ``init()`` and used to encode text.
            None keeps the printer's power-on table (PC437) and sends no ESC t.
        debug_mode: Log each instruction with a dump of its frame, or None.
        characters_per_line: Columns of font A at text size 1.
        fallback_byte: Byte substituted for characters missing from the page code.
    """

    page_code: Optional[PageCode] = None
    debug_mode: Optional[DebugMode] = None
    characters_per_line: int = DEFAULT_CHARACTERS_PER_LINE
    fallback_byte: int = DEFAULT_FALLBACK_BYTE

    def __post_init__(self) -> None:
        if self.page_code is not None and not isinstance(self.page_code, PageCode):
            raise ValidationError(
                "page_code must be a PageCode or None",
                context={"page_code": self.page_code},
            )
        if self.debug_mode is not None and not isinstance(self.debug_mode, DebugMode):
            raise ValidationError(
                "debug_mode must be a DebugMode or None",
                context={"debug_mode": self.debug_mode},
            )
        cpl = self.characters_per_line
        if isinstance(cpl, bool) or not isinstance(cpl, int) or cpl < 1:
            raise ValidationError(
                "characters_per_line must be a positive integer",
                context={"characters_per_line": self.characters_per_line},
            )
        fallback = self.fallback_byte
        if isinstance(fallback, bool) or not isinstance(fallback, int) or not 0 <= fallback <= 0xFF:
            raise ValidationError(
                "fallback_byte must be 0-255",
                context={"fallback_byte": self.fallback_byte},
            )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PrinterOptions":
        """
        Build options from a ``load_config()`` dictionary.

        Missing keys keep their defaults. Unknown keys are ignored.

        Raises:
            ValidationError: For an unknown page code or debug mode, or an
                out of range value.
        """
        kwargs: Dict[str, Any] = {}
        if config.get("page_code") is not None:
            name = config["page_code"]
            try:
                kwargs["page_code"] = name if isinstance(name, PageCode) else PageCode.from_name(str(name))
            except KeyError as e:
                raise ValidationError(f"Unknown page code {name!r}", context={"page_code": name}) from e
        if "debug_mode" in config:
            kwargs["debug_mode"] = DebugMode.parse(config["debug_mode"])
        if "characters_per_line" in config:
            kwargs["characters_per_line"] = config["characters_per_line"]
        if "fallback_byte" in config:
            kwargs["fallback_byte"] = config["fallback_byte"]

        options = cls(**kwargs)
        logger.debug("Printer options from config: %s", options)
        return options
