"""
Control characters and command prefixes shared by the ESC/POS frames.

Reference: Epson ESC/POS Application Programming Guide
"""

from typing import Final

__all__ = [
    "NUL",
    "LF",
    "ESC",
    "FS",
    "GS",
    "DLE",
    "EOT",
    "CAN",
    "GS_2D",
    "QR_CN",
    "PDF417_CN",
    "MAXICODE_CN",
    "GS1_DATABAR_CN",
    "AZTEC_CN",
    "DATAMATRIX_CN",
    "FN_STORE",
    "FN_PRINT",
]

# =============================================================================
# CONTROL CHARACTERS
# =============================================================================

NUL: Final[bytes] = b"\x00"
LF: Final[bytes] = b"\x0a"
ESC: Final[bytes] = b"\x1b"
FS: Final[bytes] = b"\x1c"
GS: Final[bytes] = b"\x1d"
DLE: Final[bytes] = b"\x10"
EOT: Final[bytes] = b"\x04"
CAN: Final[bytes] = b"\x18"

# =============================================================================
# 2D SYMBOL FUNCTIONS (GS ( k)
# =============================================================================

GS_2D: Final[bytes] = GS + b"(k"
"""GS ( k pL pH cn fn [parameters]. pL/pH count the bytes after themselves."""

QR_CN: Final[int] = 0x31
PDF417_CN: Final[int] = 0x30
MAXICODE_CN: Final[int] = 0x32
GS1_DATABAR_CN: Final[int] = 0x33
AZTEC_CN: Final[int] = 0x35
DATAMATRIX_CN: Final[int] = 0x36

FN_STORE: Final[bytes] = b"\x50\x30"
"""fn 80, m 48: store symbol data in the symbol save area."""

FN_PRINT: Final[bytes] = b"\x51\x30"
"""fn 81, m 48: print the symbol held in the save area."""
