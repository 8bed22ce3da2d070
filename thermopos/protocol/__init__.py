"""
ESC/POS command frames.

Pure builders that turn one protocol operation into its exact byte encoding.
Nothing in this package performs I/O or keeps state: the Printer builder
decides when to call them and records the resulting style state.

Module Structure:
    protocol/
    ├── __init__.py      # This file (public API exports)
    ├── constants.py     # Control characters, GS ( k symbology selectors
    ├── common.py        # Range checks, little-endian helpers
    ├── text.py          # Emphasis, underline, font, justify, size
    ├── paper.py         # Init, feed, line spacing, cut, cash drawer
    ├── charset.py       # Page code (ESC t) and character set (ESC R)
    ├── barcode.py       # 1D barcodes (GS k function B) with validation
    ├── codes_2d.py      # QR, PDF417, MaxiCode, GS1 DataBar, Aztec, DataMatrix
    ├── graphics.py      # Raster bit image (GS v 0)
    └── status.py        # Real-time status request (DLE EOT)

Usage:
    >>> from thermopos import protocol
    >>> protocol.init() + protocol.bold(True) + b"Hello" + protocol.bold(False)
    b'\\x1b@\\x1bE\\x01Hello\\x1bE\\x00'

Every feature family (barcode, codes_2d, graphics) depends only on the
constants, the encoder and the rasterizer, never on a transport.
"""

from thermopos.protocol.barcode import (
    BarcodeFont,
    BarcodeHeight,
    BarcodeOption,
    BarcodePosition,
    BarcodeSystem,
    BarcodeWidth,
    barcode,
    barcode_font,
    barcode_height,
    barcode_position,
    barcode_print,
    barcode_width,
    validate_barcode,
)
from thermopos.protocol.charset import CharacterSet, PageCode, character_set, page_code
from thermopos.protocol.codes_2d import (
    AztecMode,
    AztecOption,
    DataMatrixOption,
    DataMatrixType,
    GS1DataBar2DOption,
    GS1DataBar2DType,
    GS1DataBar2DWidth,
    MaxiCodeMode,
    Pdf417CorrectionLevel,
    Pdf417Option,
    Pdf417Type,
    QRCodeCorrectionLevel,
    QRCodeModel,
    QRCodeOption,
    aztec,
    data_matrix,
    gs1_databar_2d,
    maxi_code,
    pdf417,
    qrcode,
)
from thermopos.protocol.graphics import (
    BitImageOption,
    BitImageSize,
    raster_image,
    raster_image_chunks,
)
from thermopos.protocol.paper import (
    CashDrawer,
    cancel,
    cash_drawer,
    cut,
    feed,
    init,
    line_spacing,
    motion_units,
    reset,
    reset_line_spacing,
)
from thermopos.protocol.status import RealTimeStatusRequest, real_time_status
from thermopos.protocol.text import (
    Font,
    JustifyMode,
    UnderlineMode,
    bold,
    double_strike,
    flip,
    font,
    justify,
    reverse_colours,
    smoothing,
    text,
    text_size,
    underline,
    upside_down,
)

__all__ = [
    # Text
    "Font",
    "JustifyMode",
    "UnderlineMode",
    "bold",
    "double_strike",
    "flip",
    "font",
    "justify",
    "reverse_colours",
    "smoothing",
    "text",
    "text_size",
    "underline",
    "upside_down",
    # Paper and peripherals
    "CashDrawer",
    "cancel",
    "cash_drawer",
    "cut",
    "feed",
    "init",
    "line_spacing",
    "motion_units",
    "reset",
    "reset_line_spacing",
    # Character sets
    "CharacterSet",
    "PageCode",
    "character_set",
    "page_code",
    # Barcodes
    "BarcodeFont",
    "BarcodeHeight",
    "BarcodeOption",
    "BarcodePosition",
    "BarcodeSystem",
    "BarcodeWidth",
    "barcode",
    "barcode_font",
    "barcode_height",
    "barcode_position",
    "barcode_print",
    "barcode_width",
    "validate_barcode",
    # 2D codes
    "AztecMode",
    "AztecOption",
    "DataMatrixOption",
    "DataMatrixType",
    "GS1DataBar2DOption",
    "GS1DataBar2DType",
    "GS1DataBar2DWidth",
    "MaxiCodeMode",
    "Pdf417CorrectionLevel",
    "Pdf417Option",
    "Pdf417Type",
    "QRCodeCorrectionLevel",
    "QRCodeModel",
    "QRCodeOption",
    "aztec",
    "data_matrix",
    "gs1_databar_2d",
    "maxi_code",
    "pdf417",
    "qrcode",
    # Graphics
    "BitImageOption",
    "BitImageSize",
    "raster_image",
    "raster_image_chunks",
    # Status
    "RealTimeStatusRequest",
    "real_time_status",
]
