"""
Image handling: raster conversion and software-rendered symbols.

Module Structure:
    graphics/
    ├── __init__.py      # This file (public API exports)
    ├── rasterizer.py    # PixelGrid -> packed RasterBitmap
    └── symbols.py       # QR / 1D barcode images via qrcode and python-barcode
"""

from thermopos.graphics.rasterizer import (
    DEFAULT_MAX_SIZE,
    DEFAULT_THRESHOLD,
    PixelGrid,
    RasterBitmap,
    RasterMode,
    grid_from_image,
    pack_bits,
    rasterize,
    split_rows,
)

__all__ = [
    "DEFAULT_MAX_SIZE",
    "DEFAULT_THRESHOLD",
    "PixelGrid",
    "RasterBitmap",
    "RasterMode",
    "grid_from_image",
    "pack_bits",
    "rasterize",
    "split_rows",
]
