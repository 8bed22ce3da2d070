"""
Exception hierarchy for thermopos.

Every error raised by the library derives from PrinterError, so callers can
catch a single type around a whole printing session. Subclasses also derive
from the matching built-in exception (ValueError, OSError) so code written
against plain Python errors keeps working.

Hierarchy:
    PrinterError (base)
    ├── ValidationError   bad operation parameters, nothing was encoded
    ├── EncodingError     unknown or unsupported page code
    ├── PrinterIOError    transport failure (connect, write, read, timeout)
    └── ProtocolError     protocol/state misuse, invalid status responses

Example:
    >>> from thermopos.errors import PrinterError
    >>> try:
    ...     printer.ean13("123").print()
    ... except PrinterError as e:
    ...     logger.error("Printing failed: %s", e)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__: list[str] = [
    "PrinterError",
    "ValidationError",
    "EncodingError",
    "PrinterIOError",
    "ProtocolError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class PrinterError(Exception):
    """
    Base exception for all printer errors.

    Attributes:
        message: Human readable error message
        context: Extra key/value details (parameter names, limits, device ids)

    Example:
        >>> raise PrinterError("Operation failed", context={"operation": "bold"})
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """
        Render the message with its context.

        Example:
            >>> str(ValidationError("Width out of range", context={"width": 9}))
            'ValidationError: Width out of range (width=9)'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# CATEGORIES
# ==============================================================================


class ValidationError(PrinterError, ValueError):
    """
    Malformed operation parameters.

    Raised before any bytes are produced: out-of-range sizes, barcode payloads
    that break their symbology rules, data exceeding a command's length limit.
    The printer buffer and style state are left untouched.
    """

    pass


class EncodingError(PrinterError, ValueError):
    """
    Text cannot be encoded because the page code is unknown or has no table.

    Unmappable characters are not an error: they become the fallback byte.
    """

    pass


class PrinterIOError(PrinterError, OSError):
    """
    Transport level failure.

    Wraps the underlying library exception (socket.error, usb.core.USBError,
    serial.SerialException, ...) which stays available as __cause__.
    """

    pass


class ProtocolError(PrinterError):
    """
    Protocol or state misuse.

    Examples: a raster image with zero width, a status byte that does not
    match the fixed bit pattern, an unknown status request kind.
    """

    pass
