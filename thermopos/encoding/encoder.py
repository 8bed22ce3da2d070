"""
Unicode to page code encoder.

ASCII characters are emitted unchanged. Anything else is looked up in the
reverse map of the active page code's table. Characters the table cannot
represent are replaced by the fallback byte (``?`` unless configured
otherwise). The substitution loses information on purpose: a receipt with one
``?`` is better than no receipt. Each substitution is logged at DEBUG level.
"""

from __future__ import annotations

import logging
from typing import Final, List

from thermopos.encoding.page_codes import PageCode
from thermopos.encoding.tables import UPPER_HALF_START, PageCodeTable, get_table
from thermopos.errors import ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_FALLBACK_BYTE",
    "CharacterEncoder",
]

DEFAULT_FALLBACK_BYTE: Final[int] = 0x3F


class CharacterEncoder:
    """
    Encode text for a given page code.

    Args:
        fallback: Byte written in place of unmappable characters (0-255).

    Example:
        >>> encoder = CharacterEncoder()
        >>> encoder.encode("Total: 5€", PageCode.PC858)
        b'Total: 5\\xd5'
        >>> encoder.encode("5€", PageCode.PC437)
        b'5?'
    """

    def __init__(self, fallback: int = DEFAULT_FALLBACK_BYTE) -> None:
        if not isinstance(fallback, int) or not 0 <= fallback <= 0xFF:
            raise ValidationError(
                "Fallback byte must be an integer 0-255",
                context={"fallback": fallback},
            )
        self.fallback = fallback

    def encode(self, text: str, page_code: PageCode) -> bytes:
        """
        Encode ``text`` under ``page_code``.

        Raises:
            TypeError: If ``text`` is not a string.
            EncodingError: If the page code is unknown or has no table.
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")

        table = get_table(page_code)
        out = bytearray()
        missing: List[str] = []

        for char in text:
            code_point = ord(char)
            if code_point < UPPER_HALF_START:
                out.append(code_point)
                continue
            value = table.reverse.get(char)
            if value is None:
                missing.append(char)
                value = self.fallback
            out.append(value)

        if missing:
            logger.debug(
                "%d character(s) not in %s replaced by 0x%02X: %r",
                len(missing),
                page_code.name,
                self.fallback,
                "".join(missing),
            )
        return bytes(out)

    def can_encode(self, text: str, page_code: PageCode) -> bool:
        """True when every character of ``text`` exists in ``page_code``."""
        table = get_table(page_code)
        return all(ord(c) < UPPER_HALF_START or c in table.reverse for c in text)

    @staticmethod
    def is_supported(page_code: PageCode) -> bool:
        return isinstance(page_code, PageCode) and page_code.codec is not None

    @staticmethod
    def table(page_code: PageCode) -> PageCodeTable:
        """Shared read-only table for ``page_code``."""
        return get_table(page_code)
