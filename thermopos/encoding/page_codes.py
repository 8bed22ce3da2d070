"""
Page codes and international character sets understood by ESC/POS printers.

A page code selects the glyphs printed for bytes 0x80-0xFF (ESC t n).
An international character set swaps a dozen ASCII positions such as
#, $, @ and [ (ESC R n).

Reference: Epson ESC/POS Command Reference, ESC t / ESC R
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "PageCode",
    "CharacterSet",
]

# =============================================================================
# PAGE CODES (ESC t n)
# =============================================================================


class PageCode(Enum):
    """
    Character code tables selectable with ESC t.

    Each member carries the ESC t index and the Python codec used to build
    its byte table. Members without a codec are printer-resident tables that
    have no Python equivalent; text cannot be encoded for them, but they can
    still be selected and fed raw bytes through Printer.custom().
    """

    PC437 = (0, "cp437")
    """USA, Standard Europe (printer default)."""

    KATAKANA = (1, None)
    PC850 = (2, "cp850")
    """Multilingual Latin 1."""

    PC860 = (3, "cp860")
    PC863 = (4, "cp863")
    PC865 = (5, "cp865")
    HIRAGANA = (6, None)
    PC851 = (11, None)
    PC853 = (12, None)
    PC857 = (13, "cp857")
    PC737 = (14, "cp737")
    ISO8859_7 = (15, "iso8859_7")
    WPC1252 = (16, "cp1252")
    PC866 = (17, "cp866")
    """Cyrillic #2."""

    PC852 = (18, "cp852")
    PC858 = (19, "cp858")
    """PC850 with the euro sign at 0xD5."""

    PC720 = (32, "cp720")
    WPC775 = (33, "cp775")
    PC855 = (34, "cp855")
    PC861 = (35, "cp861")
    PC862 = (36, "cp862")
    PC864 = (37, "cp864")
    PC869 = (38, "cp869")
    ISO8859_2 = (39, "iso8859_2")
    ISO8859_15 = (40, "iso8859_15")
    PC1098 = (41, None)
    PC1118 = (42, None)
    PC1119 = (43, None)
    PC1125 = (44, "cp1125")
    WPC1250 = (45, "cp1250")
    WPC1251 = (46, "cp1251")
    WPC1253 = (47, "cp1253")
    WPC1254 = (48, "cp1254")
    WPC1255 = (49, "cp1255")
    WPC1256 = (50, "cp1256")
    WPC1257 = (51, "cp1257")
    WPC1258 = (52, "cp1258")
    KZ1048 = (53, "kz1048")

    def __init__(self, index: int, codec: Optional[str]) -> None:
        self.index = index
        self.codec = codec

    @classmethod
    def default(cls) -> "PageCode":
        return cls.PC437

    @classmethod
    def from_name(cls, name: str) -> "PageCode":
        """
        Look a page code up by member name, case-insensitively.

        Raises:
            KeyError: If no member has that name.
        """
        return cls[name.strip().upper()]

    def __str__(self) -> str:
        return self.name


# =============================================================================
# INTERNATIONAL CHARACTER SETS (ESC R n)
# =============================================================================


class CharacterSet(Enum):
    """International character sets (replace ASCII 0x23-0x7E subsets)."""

    USA = 0
    FRANCE = 1
    GERMANY = 2
    UK = 3
    DENMARK_1 = 4
    SWEDEN = 5
    ITALY = 6
    SPAIN_1 = 7
    JAPAN = 8
    NORWAY = 9
    DENMARK_2 = 10
    SPAIN_2 = 11
    LATIN_AMERICA = 12
    KOREA = 13
    SLOVENIA_CROATIA = 14
    CHINA = 15
    VIETNAM = 16
    ARABIA = 17
    INDIA_DEVANAGARI = 66
    INDIA_BENGALI = 67
    INDIA_TAMIL = 68
    INDIA_TELUGU = 69
    INDIA_ASSAMESE = 70
    INDIA_ORIYA = 71
    INDIA_KANNADA = 72
    INDIA_MALAYALAM = 73
    INDIA_GUJARATI = 74
    INDIA_PUNJABI = 75
    INDIA_MARATHI = 82
