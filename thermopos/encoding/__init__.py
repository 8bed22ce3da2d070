"""
Character encoding layer: page codes, their byte tables and the encoder.

Module Structure:
    encoding/
    ├── __init__.py      # This file (public API exports)
    ├── page_codes.py    # PageCode (ESC t) and CharacterSet (ESC R) enums
    ├── tables.py        # Immutable per-page-code byte tables
    └── encoder.py       # CharacterEncoder with fallback substitution
"""

from thermopos.encoding.encoder import DEFAULT_FALLBACK_BYTE, CharacterEncoder
from thermopos.encoding.page_codes import CharacterSet, PageCode
from thermopos.encoding.tables import PageCodeTable, get_table, supported_page_codes

__all__ = [
    "DEFAULT_FALLBACK_BYTE",
    "CharacterEncoder",
    "CharacterSet",
    "PageCode",
    "PageCodeTable",
    "get_table",
    "supported_page_codes",
]
