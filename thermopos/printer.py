"""
Stateful ESC/POS command builder.

Printer collects instructions in a buffer and ships them to its driver on
``print()``. Every builder method is all-or-nothing: parameters are
validated and frames encoded before anything is appended, so a failing call
leaves both the buffer and the style state exactly as they were.

Example:
    >>> from thermopos import ConsoleDriver, JustifyMode, Printer
    >>>
    >>> driver = ConsoleDriver.open(show_output=False)
    >>> (
    ...     Printer(driver)
    ...     .init()
    ...     .justify(JustifyMode.CENTER)
    ...     .bold(True)
    ...     .writeln("RECEIPT")
    ...     .bold(False)
    ...     .ean13("590123412345")
    ...     .print_cut()
    ... )
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from thermopos import protocol
from thermopos.drivers.base import Driver
from thermopos.encoding import CharacterEncoder, CharacterSet, PageCode
from thermopos.errors import ValidationError
from thermopos.graphics.rasterizer import PixelGrid, grid_from_image, rasterize
from thermopos.graphics.symbols import render_barcode, render_qr
from thermopos.options import PrinterOptions, format_frame
from thermopos.protocol import (
    AztecOption,
    BarcodeOption,
    BarcodeSystem,
    BitImageOption,
    CashDrawer,
    DataMatrixOption,
    Font,
    GS1DataBar2DOption,
    JustifyMode,
    MaxiCodeMode,
    Pdf417Option,
    QRCodeOption,
    RealTimeStatusRequest,
    UnderlineMode,
)
from thermopos.status import StatusResponse, decode

if TYPE_CHECKING:
    from thermopos.ui.line import Line

logger = logging.getLogger(__name__)

__all__ = [
    "Instruction",
    "PrinterStyleState",
    "Printer",
]

SymbolData = Union[str, bytes]


@dataclass(frozen=True)
class Instruction:
    """One buffered operation: a label for debugging and its bytes."""

    name: str
    frame: bytes


@dataclass(frozen=True)
class PrinterStyleState:
    """
    Formatting the printer is assumed to be in.

    Each field holds the value of the last successfully buffered command of
    its kind. ``line_spacing`` is None while the printer default applies.
    """

    page_code: PageCode = PageCode.PC437
    character_set: CharacterSet = CharacterSet.USA
    font: Font = Font.A
    bold: bool = False
    underline: UnderlineMode = UnderlineMode.NONE
    double_strike: bool = False
    reverse: bool = False
    upside_down: bool = False
    flip: bool = False
    text_size: Tuple[int, int] = (1, 1)
    justify: JustifyMode = JustifyMode.LEFT
    smoothing: bool = False
    line_spacing: Optional[int] = None


class Printer:
    """
    Chainable builder bound to one driver.

    Args:
        driver: Transport receiving the flushed bytes.
        options: Page code, debug dumps, line width and fallback byte.
            Defaults to ``PrinterOptions()``.

    Style state survives ``print()``: a bold run started before a flush is
    still considered bold afterwards. ``init()`` returns it to defaults.
    """

    def __init__(self, driver: Driver, options: Optional[PrinterOptions] = None) -> None:
        self._driver = driver
        self._options = options or PrinterOptions()
        self._encoder = CharacterEncoder(self._options.fallback_byte)
        self._instructions: List[Instruction] = []
        self._state = self._default_state()

    def __repr__(self) -> str:
        return f"<Printer driver={self._driver.name!r} pending={len(self._instructions)}>"

    # =========================================================================
    # STATE AND BUFFER
    # =========================================================================

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def options(self) -> PrinterOptions:
        return self._options

    @property
    def encoder(self) -> CharacterEncoder:
        return self._encoder

    @property
    def style_state(self) -> PrinterStyleState:
        """Snapshot of the style state (later calls do not change it)."""
        return replace(self._state)

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return tuple(self._instructions)

    @property
    def buffer(self) -> bytes:
        """Bytes that the next ``print()`` will send."""
        return b"".join(instruction.frame for instruction in self._instructions)

    def _default_state(self) -> PrinterStyleState:
        return PrinterStyleState(page_code=self._options.page_code or PageCode.PC437)

    def reset_style_state(self) -> "Printer":
        self._state = self._default_state()
        return self

    def clear(self) -> "Printer":
        """Drop pending instructions without sending them."""
        self._instructions.clear()
        return self

    def _emit(self, name: str, frames: Sequence[bytes], **changes: Any) -> "Printer":
        """Append already encoded frames as one instruction and apply state changes."""
        instruction = Instruction(name, b"".join(frames))
        self._instructions.append(instruction)
        if changes:
            self._state = replace(self._state, **changes)
        mode = self._options.debug_mode
        if mode is not None:
            logger.debug("[%s] %s", name, format_frame(instruction.frame, mode))
        return self

    def debug(self) -> "Printer":
        """Log every pending instruction when a debug mode is set."""
        mode = self._options.debug_mode
        if mode is not None:
            logger.debug("%d pending instruction(s)", len(self._instructions))
            for index, instruction in enumerate(self._instructions):
                logger.debug("  %3d %-28s %s", index, instruction.name, format_frame(instruction.frame, mode))
        return self

    # =========================================================================
    # SENDING
    # =========================================================================

    def print(self) -> "Printer":
        """
        Send the buffer to the driver, then empty it.

        Raises:
            PrinterIOError: The buffer is kept so the caller can retry or
                ``clear()``.
        """
        data = self.buffer
        self._driver.write(data)
        self._driver.flush()
        count = len(self._instructions)
        self._instructions.clear()
        logger.info("Sent %d instruction(s), %d bytes to %s", count, len(data), self._driver.name)
        return self

    def print_cut(self) -> "Printer":
        """Full cut, then ``print()``."""
        return self.cut().print()

    def real_time_status(self, request: RealTimeStatusRequest) -> "Printer":
        """Queue a DLE EOT query; the answer is left to the caller."""
        return self._emit(f"real-time status {request.name}", [protocol.real_time_status(request)])

    def send_status(self) -> "Printer":
        """Flush queued status queries (and anything before them)."""
        return self.print()

    def query_status(self, request: RealTimeStatusRequest, strict: bool = True) -> StatusResponse:
        """
        Ask the printer for one status byte and decode it.

        Pending instructions are flushed first so the query is not reordered
        behind them.

        Raises:
            PrinterIOError: On transport failure or when no byte arrives.
            ProtocolError: When the response does not decode.
        """
        query = protocol.real_time_status(request)
        self.print()
        self._driver.write(query)
        self._driver.flush()
        response = self._driver.read(1)
        return decode(request, response[0], strict=strict)

    # =========================================================================
    # HARDWARE AND PAPER
    # =========================================================================

    def init(self) -> "Printer":
        """
        ESC @, followed by ESC t when the options name a page code.

        The printer drops its modes, so does the style state.
        """
        self._emit("initialization", [protocol.init()])
        self._state = self._default_state()
        if self._options.page_code is not None:
            code = self._options.page_code
            self._emit(f"page code {code}", [protocol.page_code(code)])
        return self

    def reset(self) -> "Printer":
        return self._emit("reset", [protocol.reset()])

    def cancel(self) -> "Printer":
        return self._emit("cancel data", [protocol.cancel()])

    def cut(self) -> "Printer":
        return self._emit("full cut", [protocol.cut(partial=False)])

    def partial_cut(self) -> "Printer":
        return self._emit("partial cut", [protocol.cut(partial=True)])

    def feed(self) -> "Printer":
        return self._emit("line feed", [protocol.feed(1)])

    def feeds(self, lines: int) -> "Printer":
        return self._emit(f"feed {lines} lines", [protocol.feed(lines)])

    def line_spacing(self, value: int) -> "Printer":
        return self._emit("line spacing", [protocol.line_spacing(value)], line_spacing=value)

    def reset_line_spacing(self) -> "Printer":
        return self._emit("reset line spacing", [protocol.reset_line_spacing()], line_spacing=None)

    def motion_units(self, x: int, y: int) -> "Printer":
        return self._emit("motion units", [protocol.motion_units(x, y)])

    def cash_drawer(self, pin: CashDrawer) -> "Printer":
        return self._emit(f"cash drawer {pin.name}", [protocol.cash_drawer(pin)])

    # =========================================================================
    # CHARACTER SETS
    # =========================================================================

    def page_code(self, code: PageCode) -> "Printer":
        """
        Select a page code for the following text.

        Text already in the buffer keeps its encoding.
        """
        return self._emit(f"page code {code}", [protocol.page_code(code)], page_code=code)

    def character_set(self, charset: CharacterSet) -> "Printer":
        return self._emit(f"character set {charset.name}", [protocol.character_set(charset)], character_set=charset)

    # =========================================================================
    # TEXT STYLE
    # =========================================================================

    def bold(self, enabled: bool) -> "Printer":
        return self._emit("bold", [protocol.bold(enabled)], bold=bool(enabled))

    def underline(self, mode: UnderlineMode) -> "Printer":
        return self._emit("underline", [protocol.underline(mode)], underline=mode)

    def double_strike(self, enabled: bool) -> "Printer":
        return self._emit("double strike", [protocol.double_strike(enabled)], double_strike=bool(enabled))

    def font(self, value: Font) -> "Printer":
        return self._emit(f"font {value.name}", [protocol.font(value)], font=value)

    def flip(self, enabled: bool) -> "Printer":
        return self._emit("flip", [protocol.flip(enabled)], flip=bool(enabled))

    def justify(self, mode: JustifyMode) -> "Printer":
        return self._emit(f"justify {mode.name}", [protocol.justify(mode)], justify=mode)

    def reverse(self, enabled: bool) -> "Printer":
        return self._emit("reverse colours", [protocol.reverse_colours(enabled)], reverse=bool(enabled))

    def size(self, width: int, height: int) -> "Printer":
        """Character magnification, 1-8 in each direction."""
        return self._emit(f"text size {width}x{height}", [protocol.text_size(width, height)], text_size=(width, height))

    def reset_size(self) -> "Printer":
        return self.size(1, 1)

    def smoothing(self, enabled: bool) -> "Printer":
        return self._emit("smoothing", [protocol.smoothing(enabled)], smoothing=bool(enabled))

    def upside_down(self, enabled: bool) -> "Printer":
        return self._emit("upside down", [protocol.upside_down(enabled)], upside_down=bool(enabled))

    # =========================================================================
    # TEXT
    # =========================================================================

    def write(self, value: str) -> "Printer":
        """Encode ``value`` with the current page code and buffer it."""
        return self._emit("text", [protocol.text(value, self._state.page_code, self._encoder)])

    def writeln(self, value: str) -> "Printer":
        payload = protocol.text(value, self._state.page_code, self._encoder)
        self._emit("text", [payload])
        return self.feed()

    def custom(self, command: bytes) -> "Printer":
        """Raw bytes, sent as given."""
        if not isinstance(command, (bytes, bytearray, memoryview)):
            raise TypeError(f"command must be bytes, got {type(command).__name__}")
        return self._emit("custom command", [bytes(command)])

    def custom_with_page_code(self, command: bytes, code: PageCode) -> "Printer":
        """Switch to ``code``, then send raw bytes meant for it."""
        if not isinstance(command, (bytes, bytearray, memoryview)):
            raise TypeError(f"command must be bytes, got {type(command).__name__}")
        frame = protocol.page_code(code)
        self._emit(f"page code {code}", [frame], page_code=code)
        return self._emit(f"custom command with page code {code}", [bytes(command)])

    # =========================================================================
    # BARCODES
    # =========================================================================

    def barcode(self, system: BarcodeSystem, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        """
        Print a 1D barcode with the printer's own renderer.

        Raises:
            ValidationError: If ``data`` breaks the symbology's rules.
        """
        return self._emit(f"print {system.name} barcode", protocol.barcode(system, data, option))

    def ean13(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.EAN13, data, option)

    def ean8(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.EAN8, data, option)

    def upca(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.UPCA, data, option)

    def upce(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.UPCE, data, option)

    def code39(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.CODE39, data, option)

    def codabar(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.CODABAR, data, option)

    def itf(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.ITF, data, option)

    def code93(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.CODE93, data, option)

    def code128(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(BarcodeSystem.CODE128, data, option)

    # =========================================================================
    # 2D CODES
    # =========================================================================

    def qrcode(self, data: SymbolData, option: Optional[QRCodeOption] = None) -> "Printer":
        return self._emit("print QR Code", protocol.qrcode(data, option or QRCodeOption()))

    def pdf417(self, data: SymbolData, option: Optional[Pdf417Option] = None) -> "Printer":
        return self._emit("print PDF417", protocol.pdf417(data, option or Pdf417Option()))

    def maxi_code(self, data: SymbolData, mode: MaxiCodeMode = MaxiCodeMode.MODE2) -> "Printer":
        return self._emit("print MaxiCode", protocol.maxi_code(data, mode))

    def gs1_databar_2d(self, data: str, option: Optional[GS1DataBar2DOption] = None) -> "Printer":
        return self._emit("print GS1 DataBar 2D", protocol.gs1_databar_2d(data, option or GS1DataBar2DOption()))

    def data_matrix(self, data: SymbolData, option: Optional[DataMatrixOption] = None) -> "Printer":
        return self._emit("print DataMatrix", protocol.data_matrix(data, option or DataMatrixOption()))

    def aztec(self, data: SymbolData, option: Optional[AztecOption] = None) -> "Printer":
        return self._emit("print Aztec code", protocol.aztec(data, option or AztecOption()))

    # =========================================================================
    # IMAGES
    # =========================================================================

    def bit_image(self, grid: PixelGrid, option: Optional[BitImageOption] = None) -> "Printer":
        """
        Print a luminance grid as a raster image.

        A CAN byte precedes the image so half-received data in the printer
        buffer is discarded. With ``option.band_height`` the image is sent
        as several GS v 0 commands.

        Raises:
            ProtocolError: For an empty grid.
        """
        option = option or BitImageOption()
        bitmap = rasterize(grid, option.mode, option.threshold)
        if option.band_height:
            frames = protocol.raster_image_chunks(bitmap, option.size, option.band_height)
        else:
            frames = [protocol.raster_image(bitmap, option.size)]
        self._emit("cancel data", [protocol.cancel()])
        return self._emit(f"print bit image {bitmap.width_px}x{bitmap.height_px}", frames)

    def bit_image_from_image(self, image: Image.Image, option: Optional[BitImageOption] = None) -> "Printer":
        """Print a Pillow image, scaled down to the option's limits."""
        option = option or BitImageOption()
        grid = grid_from_image(image, option.max_width, option.max_height)
        return self.bit_image(grid, option)

    def bit_image_from_bytes(self, data: bytes, option: Optional[BitImageOption] = None) -> "Printer":
        """
        Print an encoded image (PNG, JPEG, BMP, ...).

        Raises:
            ValidationError: If Pillow cannot decode ``data``.
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return self.bit_image_from_image(image, option)
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(f"Cannot decode image: {e}", context={"size": len(data)}) from e

    def qrcode_image(
        self,
        data: str,
        box_size: int = 4,
        border: int = 2,
        level: str = "M",
        option: Optional[BitImageOption] = None,
    ) -> "Printer":
        """QR Code drawn by the qrcode library and sent as a raster image."""
        return self.bit_image_from_image(render_qr(data, box_size, border, level), option)

    def barcode_image(
        self,
        system: BarcodeSystem,
        data: str,
        writer_options: Optional[Dict[str, Any]] = None,
        option: Optional[BitImageOption] = None,
    ) -> "Printer":
        """1D barcode drawn by python-barcode and sent as a raster image."""
        return self.bit_image_from_image(render_barcode(system, data, writer_options), option)

    # =========================================================================
    # UI
    # =========================================================================

    def draw_line(self, line: "Line") -> "Printer":
        """Print a horizontal rule; the style state is unchanged afterwards."""
        return self._emit("draw line", line.frames(self._options, self._state, self._encoder))
