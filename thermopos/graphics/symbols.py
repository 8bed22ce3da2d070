"""
Software rendering of QR codes and 1D barcodes.

Some receipt printers lack GS ( k or only support a few GS k symbologies.
For those, the symbol can be drawn on the host with qrcode or python-barcode
and printed as a raster image. The functions return Pillow images ready
for grid_from_image().
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, FrozenSet, Optional

import barcode as pybarcode
import qrcode
import qrcode.image.pil
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from thermopos.errors import ValidationError
from thermopos.protocol.barcode import BarcodeSystem, validate_barcode

logger = logging.getLogger(__name__)

__all__ = [
    "render_qr",
    "render_barcode",
    "supported_barcode_systems",
]

_QR_LEVELS: Final[Dict[str, int]] = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

_PYBARCODE_NAMES: Final[Dict[BarcodeSystem, str]] = {
    BarcodeSystem.UPCA: "upc",
    BarcodeSystem.EAN13: "ean13",
    BarcodeSystem.EAN8: "ean8",
    BarcodeSystem.CODE39: "code39",
    BarcodeSystem.ITF: "itf",
    BarcodeSystem.CODABAR: "codabar",
    BarcodeSystem.CODE128: "code128",
}


def supported_barcode_systems() -> FrozenSet[BarcodeSystem]:
    return frozenset(_PYBARCODE_NAMES)


def render_qr(
    data: str,
    box_size: int = 4,
    border: int = 2,
    level: str = "M",
) -> Image.Image:
    """
    Draw a QR Code.

    Args:
        data: Text to encode.
        box_size: Dots per module.
        border: Quiet zone in modules.
        level: Error correction, one of L, M, Q, H.

    Returns:
        Grayscale Pillow image, black modules on white.

    Raises:
        ValidationError: For empty data, bad sizes or an unknown level.
    """
    if not isinstance(data, str) or not data:
        raise ValidationError("QR Code data must be a non-empty string")
    if box_size < 1 or border < 0:
        raise ValidationError(
            "box_size must be >= 1 and border >= 0",
            context={"box_size": box_size, "border": border},
        )
    error_correction = _QR_LEVELS.get(level.upper())
    if error_correction is None:
        raise ValidationError(f"Unknown QR error correction level {level!r}", context={"level": level})

    qr = qrcode.QRCode(
        version=None,
        error_correction=error_correction,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        # qrcode 8 reports overflow as an invalid version 41
        raise ValidationError("QR Code data too long", context={"length": len(data)}) from e

    qr_img = qr.make_image(
        fill_color="black",
        back_color="white",
        image_factory=qrcode.image.pil.PilImage,
    )
    if hasattr(qr_img, "get_image"):
        qr_img = qr_img.get_image()
    logger.debug("Rendered QR Code version %s, %dx%d", qr.version, qr_img.width, qr_img.height)
    return qr_img.convert("L")


def render_barcode(
    system: BarcodeSystem,
    data: str,
    options: Optional[Dict[str, Any]] = None,
) -> Image.Image:
    """
    Draw a 1D barcode with python-barcode.

    Args:
        system: Symbology. UPCE and CODE93 have no python-barcode writer.
        data: Payload, validated with the same rules as GS k.
        options: python-barcode writer options overriding the defaults
            (module_width, module_height, font_size, quiet_zone, write_text, dpi).

    Returns:
        Grayscale Pillow image.

    Raises:
        ValidationError: For invalid data, unsupported symbologies or
            rendering failures.
    """
    payload = validate_barcode(system, data)
    name = _PYBARCODE_NAMES.get(system)
    if name is None:
        raise ValidationError(
            f"{system.name} cannot be rendered in software",
            context={"system": system.name},
        )
    if system is BarcodeSystem.CODE128:
        # python-barcode picks code sets itself.
        payload = payload[2:]

    writer_options: Dict[str, Any] = {
        "module_width": 0.25,
        "module_height": 10.0,
        "font_size": 8,
        "text_distance": 3,
        "quiet_zone": 2,
        "write_text": True,
        "dpi": 203,
    }
    writer_options.update(options or {})

    try:
        bclass = pybarcode.get_barcode_class(name)
        img = bclass(payload, writer=ImageWriter()).render(writer_options=writer_options)
    except BarcodeError as e:
        raise ValidationError(
            f"{system.name} rendering failed: {e}",
            context={"system": system.name},
        ) from e

    if not isinstance(img, Image.Image):
        raise ValidationError("Barcode output is not an image", context={"system": system.name})
    return img.convert("L")
