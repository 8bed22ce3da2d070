"""
Character set selection commands.

Selecting a page code only changes how the printer interprets bytes
0x80-0xFF from now on; text already in the buffer is not re-encoded.

Reference: Epson ESC/POS Command Reference, ESC t / ESC R
"""

from __future__ import annotations

from thermopos.encoding.page_codes import CharacterSet, PageCode
from thermopos.protocol.constants import ESC

__all__ = [
    "CharacterSet",
    "PageCode",
    "page_code",
    "character_set",
]


def page_code(code: PageCode) -> bytes:
    """
    Select character code table.

    Command: ESC t n
    Hex: 1B 74 n

    Args:
        code: Page code to select (see PageCode for the n values).

    Example:
        >>> page_code(PageCode.PC858)
        b'\\x1bt\\x13'
    """
    if not isinstance(code, PageCode):
        raise TypeError(f"code must be PageCode, got {type(code).__name__}")
    return ESC + b"t" + bytes([code.index])


def character_set(charset: CharacterSet) -> bytes:
    """
    Select international character set.

    Command: ESC R n
    Hex: 1B 52 n
    """
    if not isinstance(charset, CharacterSet):
        raise TypeError(f"charset must be CharacterSet, got {type(charset).__name__}")
    return ESC + b"R" + bytes([charset.value])
