"""
Raster bit image command (GS v 0).

The payload comes from thermopos.graphics.rasterizer; this module only
frames it. Tall images can be split into bands so a single command does
not exceed the printer's receive buffer.

Reference: Epson ESC/POS Command Reference, GS v 0
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, List, Optional

from thermopos.errors import ProtocolError, ValidationError
from thermopos.graphics.rasterizer import (
    DEFAULT_MAX_SIZE,
    DEFAULT_THRESHOLD,
    RasterBitmap,
    RasterMode,
    split_rows,
)
from thermopos.protocol.common import u16_le
from thermopos.protocol.constants import GS

__all__ = [
    "BitImageSize",
    "BitImageOption",
    "DEFAULT_BAND_HEIGHT",
    "raster_image",
    "raster_image_chunks",
]

DEFAULT_BAND_HEIGHT: Final[int] = 256
"""Rows per GS v 0 command when an image is split."""


class BitImageSize(Enum):
    """Raster scaling, sent as the m parameter of GS v 0."""

    NORMAL = 0
    DOUBLE_WIDTH = 1
    DOUBLE_HEIGHT = 2
    DOUBLE_WIDTH_AND_HEIGHT = 3


@dataclass(frozen=True)
class BitImageOption:
    """
    Raster image settings.

    Attributes:
        max_width: Width limit in dots (multiple of 8) or None.
        max_height: Height limit in dots (multiple of 8) or None.
        size: Printer side scaling.
        mode: Gray to monochrome conversion.
        threshold: Cutoff for RasterMode.THRESHOLD.
        band_height: Rows per command; None sends one command.
    """

    max_width: Optional[int] = DEFAULT_MAX_SIZE
    max_height: Optional[int] = DEFAULT_MAX_SIZE
    size: BitImageSize = BitImageSize.NORMAL
    mode: RasterMode = RasterMode.THRESHOLD
    threshold: int = DEFAULT_THRESHOLD
    band_height: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("max_width", "max_height"):
            value = getattr(self, name)
            if value is not None and (value <= 0 or value % 8 != 0):
                raise ValidationError(
                    f"Bit image {name} must be a positive multiple of 8",
                    context={name: value},
                )
        if self.band_height is not None and self.band_height <= 0:
            raise ValidationError(
                "band_height must be positive",
                context={"band_height": self.band_height},
            )


def raster_image(bitmap: RasterBitmap, size: BitImageSize = BitImageSize.NORMAL) -> bytes:
    """
    Print raster bit image.

    Command: GS v 0 m xL xH yL yH d1...dk
    Hex: 1D 76 30 m xL xH yL yH data

    Args:
        bitmap: Packed bitmap; x is its width in bytes, y its height in dots.
        size: Scaling mode m.

    Returns:
        Command bytes.

    Raises:
        ProtocolError: If the bitmap is empty or its payload length does not
            match its dimensions.

    Example:
        >>> bitmap = RasterBitmap(10, 1, b"\\xff\\xc0")
        >>> raster_image(bitmap)
        b'\\x1dv0\\x00\\x02\\x00\\x01\\x00\\xff\\xc0'
    """
    if bitmap.is_empty:
        raise ProtocolError(
            "Cannot print a zero-sized image",
            context={"width": bitmap.width_px, "height": bitmap.height_px},
        )
    expected = bitmap.row_bytes * bitmap.height_px
    if len(bitmap.packed) != expected:
        raise ProtocolError(
            f"Raster payload has {len(bitmap.packed)} bytes, expected {expected}",
            context={"width": bitmap.width_px, "height": bitmap.height_px},
        )

    cmd = GS + b"v0"
    cmd += bytes([size.value])  # m
    cmd += u16_le(bitmap.row_bytes)  # xL xH
    cmd += u16_le(bitmap.height_px)  # yL yH
    cmd += bitmap.packed  # d1...dk
    return cmd


def raster_image_chunks(
    bitmap: RasterBitmap,
    size: BitImageSize = BitImageSize.NORMAL,
    max_height: int = DEFAULT_BAND_HEIGHT,
) -> List[bytes]:
    """One GS v 0 frame per band of at most ``max_height`` rows, top to bottom."""
    if bitmap.is_empty:
        raise ProtocolError(
            "Cannot print a zero-sized image",
            context={"width": bitmap.width_px, "height": bitmap.height_px},
        )
    return [raster_image(band, size) for band in split_rows(bitmap, max_height)]
