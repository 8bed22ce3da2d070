"""
Static byte tables for the supported page codes.

Only the upper half (0x80-0xFF) varies between page codes; the lower half
is ASCII on every table and is never looked up. Each table is derived once
from the Python codec named by its PageCode member and then cached for the
life of the process. Tables are immutable and safe to share between
encoders and threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Final, Mapping, Optional, Tuple

from thermopos.encoding.page_codes import PageCode
from thermopos.errors import EncodingError

logger = logging.getLogger(__name__)

__all__ = [
    "UPPER_HALF_START",
    "PageCodeTable",
    "get_table",
    "supported_page_codes",
]

UPPER_HALF_START: Final[int] = 0x80


@dataclass(frozen=True)
class PageCodeTable:
    """
    Bidirectional mapping for one page code.

    Attributes:
        page_code: Table owner.
        chars: 128 entries, chars[i] is the character printed for byte
            0x80 + i, or None where the codec leaves the slot undefined.
        reverse: Character to byte lookup built from ``chars``. The first
            byte wins when a character appears twice.
    """

    page_code: PageCode
    chars: Tuple[Optional[str], ...]
    reverse: Mapping[str, int]

    def char_for(self, value: int) -> Optional[str]:
        """Character printed for byte ``value``."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value must be 0-255, got {value}")
        if value < UPPER_HALF_START:
            return chr(value)
        return self.chars[value - UPPER_HALF_START]

    def byte_for(self, char: str) -> Optional[int]:
        """Byte encoding ``char`` in this page code, None if unmapped."""
        if ord(char) < UPPER_HALF_START:
            return ord(char)
        return self.reverse.get(char)

    def __contains__(self, char: object) -> bool:
        return isinstance(char, str) and len(char) == 1 and self.byte_for(char) is not None


def _build_table(page_code: PageCode) -> PageCodeTable:
    chars = []
    reverse = {}
    for value in range(UPPER_HALF_START, 0x100):
        try:
            char = bytes([value]).decode(page_code.codec)
        except UnicodeDecodeError:
            char = None
        chars.append(char)
        if char is not None and char not in reverse:
            reverse[char] = value

    logger.debug(
        "Built %s table from codec %s (%d mapped slots)",
        page_code.name,
        page_code.codec,
        len(reverse),
    )
    return PageCodeTable(
        page_code=page_code,
        chars=tuple(chars),
        reverse=MappingProxyType(reverse),
    )


@lru_cache(maxsize=None)
def _cached_table(page_code: PageCode) -> PageCodeTable:
    return _build_table(page_code)


def get_table(page_code: PageCode) -> PageCodeTable:
    """
    Return the cached table for ``page_code``.

    Raises:
        EncodingError: If ``page_code`` is not a PageCode or the page code
            has no table (printer-resident Katakana, Hiragana, PC851, ...).
    """
    if not isinstance(page_code, PageCode):
        raise EncodingError(
            f"Unknown page code {page_code!r}",
            context={"page_code": page_code},
        )
    if page_code.codec is None:
        raise EncodingError(
            f"Page code {page_code.name} has no character table",
            context={"page_code": page_code.name},
        )
    return _cached_table(page_code)


def supported_page_codes() -> Tuple[PageCode, ...]:
    """Page codes that text can be encoded for."""
    return tuple(code for code in PageCode if code.codec is not None)
