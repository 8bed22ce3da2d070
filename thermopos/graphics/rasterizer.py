"""
Raster image conversion for thermal printers.

Converts a grid of 8-bit luminance values into a packed monochrome bitmap
(one bit per dot, 1 = printed) for the GS v 0 raster command:

    - rows are packed MSB first, left to right
    - each row occupies ceil(width / 8) bytes
    - the last byte of a row is flushed even when partially filled; its
      unused low bits are zero

Two conversion modes are available:
    THRESHOLD  dot is printed when luminance <= threshold (default 128)
    DITHER     Floyd-Steinberg error diffusion through Pillow, better for
               photos and gradients

Decoding image files is not done here; use grid_from_image() to adapt an
already-opened Pillow image.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterator, Optional, Sequence, Union

from PIL import Image

from thermopos.errors import ProtocolError, ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_THRESHOLD",
    "DEFAULT_MAX_SIZE",
    "RasterMode",
    "PixelGrid",
    "RasterBitmap",
    "pack_bits",
    "rasterize",
    "grid_from_image",
    "split_rows",
]

DEFAULT_THRESHOLD: Final[int] = 128
DEFAULT_MAX_SIZE: Final[int] = 512
MAX_DIMENSION: Final[int] = 0xFFFF


class RasterMode(Enum):
    """Gray to monochrome conversion."""

    THRESHOLD = "threshold"
    DITHER = "dither"


@dataclass(frozen=True)
class PixelGrid:
    """
    Decoded image as 8-bit luminance values (0 black, 255 white).

    Attributes:
        width: Width in pixels.
        height: Height in pixels.
        pixels: width * height values, row major.
    """

    width: int
    height: int
    pixels: Union[bytes, Sequence[int]]

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValidationError(
                "Image dimensions cannot be negative",
                context={"width": self.width, "height": self.height},
            )
        if len(self.pixels) != self.width * self.height:
            raise ValidationError(
                f"Pixel count {len(self.pixels)} does not match "
                f"{self.width}x{self.height}",
                context={"width": self.width, "height": self.height},
            )
        if not isinstance(self.pixels, (bytes, bytearray)):
            for index, value in enumerate(self.pixels):
                if not 0 <= value <= 255:
                    raise ValidationError(
                        f"Pixel value {value} out of range 0-255",
                        context={"index": index, "value": value},
                    )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "PixelGrid":
        """Build a grid from a list of equally long rows."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        if any(len(row) != width for row in rows):
            raise ValidationError("All rows must have the same length")
        return cls(width, height, [v for row in rows for v in row])


@dataclass(frozen=True)
class RasterBitmap:
    """
    Packed monochrome bitmap.

    Attributes:
        width_px: Width in dots.
        height_px: Height in dots.
        packed: height_px * row_bytes bytes, MSB first, 1 = printed.
    """

    width_px: int
    height_px: int
    packed: bytes

    @property
    def row_bytes(self) -> int:
        return (self.width_px + 7) // 8

    def row(self, y: int) -> bytes:
        start = y * self.row_bytes
        return self.packed[start : start + self.row_bytes]

    @property
    def is_empty(self) -> bool:
        return self.width_px == 0 or self.height_px == 0


def pack_bits(dots: Sequence[bool], width: int, height: int) -> bytes:
    """
    Pack row-major dot flags into bytes, MSB first, one padded row at a time.

    Example:
        >>> pack_bits([True] * 10, 10, 1)
        b'\\xff\\xc0'
    """
    out = bytearray()
    for y in range(height):
        byte = 0
        filled = 0
        for x in range(y * width, (y + 1) * width):
            byte = (byte << 1) | (1 if dots[x] else 0)
            filled += 1
            if filled == 8:
                out.append(byte)
                byte = 0
                filled = 0
        # Trailing partial byte, left aligned.
        if filled:
            out.append(byte << (8 - filled))
    return bytes(out)


def _dither(grid: PixelGrid) -> Sequence[bool]:
    image = Image.frombytes("L", (grid.width, grid.height), bytes(grid.pixels))
    mono = image.convert("1", dither=Image.Dither.FLOYDSTEINBERG)
    return [value == 0 for value in mono.getdata()]


def rasterize(
    grid: PixelGrid,
    mode: RasterMode = RasterMode.THRESHOLD,
    threshold: int = DEFAULT_THRESHOLD,
) -> RasterBitmap:
    """
    Convert ``grid`` into a packed bitmap.

    Args:
        grid: Luminance values.
        mode: THRESHOLD or DITHER.
        threshold: Cutoff for THRESHOLD mode, a dot prints when its
            luminance is <= threshold.

    Raises:
        ProtocolError: For a zero-sized grid.
        ValidationError: For dimensions above 65535 or a threshold outside 0-255.

    Example:
        >>> rasterize(PixelGrid(8, 1, bytes(8))).packed
        b'\\xff'
    """
    if grid.width == 0 or grid.height == 0:
        raise ProtocolError(
            "Cannot rasterize an empty image",
            context={"width": grid.width, "height": grid.height},
        )
    if grid.width > MAX_DIMENSION or grid.height > MAX_DIMENSION:
        raise ValidationError(
            f"Image dimensions exceed {MAX_DIMENSION} dots",
            context={"width": grid.width, "height": grid.height},
        )
    if not 0 <= threshold <= 255:
        raise ValidationError("Threshold must be 0-255", context={"threshold": threshold})

    if mode is RasterMode.DITHER:
        dots = _dither(grid)
    else:
        dots = [value <= threshold for value in grid.pixels]

    packed = pack_bits(dots, grid.width, grid.height)
    logger.debug(
        "Rasterized %dx%d image (%s): %d bytes",
        grid.width,
        grid.height,
        mode.value,
        len(packed),
    )
    return RasterBitmap(grid.width, grid.height, packed)


def grid_from_image(
    image: Image.Image,
    max_width: Optional[int] = DEFAULT_MAX_SIZE,
    max_height: Optional[int] = DEFAULT_MAX_SIZE,
) -> PixelGrid:
    """
    Adapt a Pillow image to a PixelGrid.

    Transparent pixels are composited over white, the result is converted to
    grayscale and shrunk (aspect ratio kept, nearest neighbour) when it
    exceeds the limits.

    Args:
        image: Any Pillow image.
        max_width: Width limit in dots, a multiple of 8, or None.
        max_height: Height limit in dots, a multiple of 8, or None.

    Raises:
        ValidationError: If a limit is not a positive multiple of 8.
    """
    for name, limit in (("max_width", max_width), ("max_height", max_height)):
        if limit is not None and (limit <= 0 or limit % 8 != 0):
            raise ValidationError(
                f"{name} must be a positive multiple of 8",
                context={name: limit},
            )

    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        image = Image.alpha_composite(background, rgba)

    gray = image.convert("L")

    bound_w = max_width or gray.width
    bound_h = max_height or gray.height
    if gray.width > bound_w or gray.height > bound_h:
        gray = gray.copy()
        gray.thumbnail((bound_w, bound_h), Image.Resampling.NEAREST)
        logger.debug("Image resized to %dx%d", gray.width, gray.height)

    return PixelGrid(gray.width, gray.height, gray.tobytes())


def split_rows(bitmap: RasterBitmap, max_height: int) -> Iterator[RasterBitmap]:
    """
    Yield horizontal bands of at most ``max_height`` rows, top to bottom.

    Bands are cut on row boundaries of the packed data, so row padding is
    never recomputed.
    """
    if max_height <= 0:
        raise ValidationError("max_height must be positive", context={"max_height": max_height})
    row_bytes = bitmap.row_bytes
    for top in range(0, bitmap.height_px, max_height):
        rows = min(max_height, bitmap.height_px - top)
        start = top * row_bytes
        yield RasterBitmap(
            bitmap.width_px,
            rows,
            bitmap.packed[start : start + rows * row_bytes],
        )
