import io
import logging
from unittest.mock import Mock

import pytest
from PIL import Image

from thermopos import (
    BarcodeSystem,
    CashDrawer,
    CharacterSet,
    ConsoleDriver,
    DebugMode,
    Font,
    JustifyMode,
    PageCode,
    Printer,
    PrinterOptions,
    PrinterStyleState,
    RealTimeStatusFlag,
    RealTimeStatusRequest,
    UnderlineMode,
)
from thermopos.drivers.base import Driver
from thermopos.errors import PrinterIOError, ProtocolError, ValidationError
from thermopos.graphics import PixelGrid
from thermopos.protocol import BitImageOption, QRCodeOption
from thermopos.ui import Line, LineStyle


@pytest.fixture
def driver() -> ConsoleDriver:
    return ConsoleDriver.open(show_output=False)


@pytest.fixture
def printer(driver: ConsoleDriver) -> Printer:
    return Printer(driver)


class TestEndToEnd:
    def test_hello_receipt(self, printer: Printer, driver: ConsoleDriver) -> None:
        printer.init().bold(True).writeln("Hello").bold(False).print_cut()
        assert driver.written == b"\x1b@\x1bE\x01Hello\x1bd\x01\x1bE\x00\x1dVA\x00"

    def test_buffer_empty_after_print(self, printer: Printer, driver: ConsoleDriver) -> None:
        printer.write("abc").print()
        assert printer.buffer == b""
        assert printer.instructions == ()
        printer.print()
        assert driver.written == b"abc"

    def test_instruction_names(self, printer: Printer) -> None:
        printer.init().justify(JustifyMode.CENTER).ean8("1234567").cut()
        names = [instruction.name for instruction in printer.instructions]
        assert names == ["initialization", "justify CENTER", "print EAN8 barcode", "full cut"]

    def test_barcode_frames(self, printer: Printer) -> None:
        printer.ean8("1234567")
        assert printer.buffer == b"\x1dw\x03\x1dh\x66\x1df\x00\x1dH\x02\x1dkD\x071234567"

    @pytest.mark.parametrize(
        "method,system,data",
        [
            ("ean13", BarcodeSystem.EAN13, "123456789012"),
            ("upca", BarcodeSystem.UPCA, "12345678901"),
            ("upce", BarcodeSystem.UPCE, "123456"),
            ("code39", BarcodeSystem.CODE39, "ABC"),
            ("codabar", BarcodeSystem.CODABAR, "A12B"),
            ("itf", BarcodeSystem.ITF, "1234"),
            ("code93", BarcodeSystem.CODE93, "abc"),
            ("code128", BarcodeSystem.CODE128, "abc"),
        ],
    )
    def test_barcode_shortcuts(self, driver: ConsoleDriver, method: str, system: BarcodeSystem, data: str) -> None:
        via_shortcut = getattr(Printer(driver), method)(data).buffer
        via_generic = Printer(driver).barcode(system, data).buffer
        assert via_shortcut == via_generic
        assert bytes([system.value]) in via_shortcut

    def test_paper_and_hardware(self, printer: Printer) -> None:
        (
            printer.reset()
            .cancel()
            .feed()
            .feeds(3)
            .line_spacing(40)
            .reset_line_spacing()
            .motion_units(180, 180)
            .cash_drawer(CashDrawer.PIN5)
            .partial_cut()
        )
        assert printer.buffer == (
            b"\x1b?\x0a\x00" b"\x18" b"\x1bd\x01" b"\x1bd\x03" b"\x1b3\x28" b"\x1b2"
            b"\x1dP\xb4\xb4" b"\x1bp\x01" b"\x1dVA\x01"
        )

    def test_two_dimensional_codes(self, printer: Printer) -> None:
        printer.qrcode("hi", QRCodeOption(size=6))
        assert printer.buffer.endswith(b"\x1d(k\x03\x001Q0")
        assert b"\x1d(k\x03\x001C\x06" in printer.buffer
        printer.clear()

        printer.pdf417("p").maxi_code("m").gs1_databar_2d("0123456789012").data_matrix("d").aztec("a")
        names = [instruction.name for instruction in printer.instructions]
        assert names == [
            "print PDF417",
            "print MaxiCode",
            "print GS1 DataBar 2D",
            "print DataMatrix",
            "print Aztec code",
        ]

    def test_repr(self, printer: Printer) -> None:
        printer.write("x")
        assert repr(printer) == "<Printer driver='console' pending=1>"


class TestStyleState:
    def test_defaults(self, printer: Printer) -> None:
        assert printer.style_state == PrinterStyleState()

    def test_tracks_commands(self, printer: Printer) -> None:
        (
            printer.bold(True)
            .underline(UnderlineMode.DOUBLE)
            .double_strike(True)
            .font(Font.B)
            .flip(True)
            .justify(JustifyMode.RIGHT)
            .reverse(True)
            .size(2, 3)
            .smoothing(True)
            .upside_down(True)
            .line_spacing(50)
            .character_set(CharacterSet.GERMANY)
            .page_code(PageCode.PC858)
        )
        assert printer.style_state == PrinterStyleState(
            page_code=PageCode.PC858,
            character_set=CharacterSet.GERMANY,
            font=Font.B,
            bold=True,
            underline=UnderlineMode.DOUBLE,
            double_strike=True,
            reverse=True,
            upside_down=True,
            flip=True,
            text_size=(2, 3),
            justify=JustifyMode.RIGHT,
            smoothing=True,
            line_spacing=50,
        )

    def test_reset_size(self, printer: Printer) -> None:
        printer.size(4, 4).reset_size()
        assert printer.style_state.text_size == (1, 1)
        assert printer.buffer.endswith(b"\x1d!\x00")

    def test_survives_print(self, printer: Printer) -> None:
        printer.bold(True).print()
        assert printer.style_state.bold is True

    def test_init_restores_defaults(self, driver: ConsoleDriver) -> None:
        printer = Printer(driver, PrinterOptions(page_code=PageCode.PC858))
        printer.bold(True).page_code(PageCode.PC866).clear().init()
        assert printer.style_state == PrinterStyleState(page_code=PageCode.PC858)
        assert printer.buffer == b"\x1b@\x1bt\x13"

    def test_init_selects_configured_page_code(self, driver: ConsoleDriver) -> None:
        printer = Printer(driver, PrinterOptions(page_code=PageCode.PC858))
        printer.init().write("€").print()
        assert driver.written == b"\x1b@\x1bt\x13\xd5"

    def test_init_without_page_code_sends_only_esc_at(self, printer: Printer) -> None:
        printer.page_code(PageCode.PC866).clear().init()
        assert printer.buffer == b"\x1b@"
        assert printer.style_state.page_code is PageCode.PC437

    def test_reset_keeps_state(self, printer: Printer) -> None:
        printer.bold(True).reset()
        assert printer.style_state.bold is True

    def test_reset_style_state_sends_nothing(self, printer: Printer) -> None:
        printer.bold(True).reset_style_state()
        assert printer.style_state.bold is False
        assert printer.buffer == b"\x1bE\x01"

    def test_snapshot_is_detached(self, printer: Printer) -> None:
        before = printer.style_state
        printer.bold(True)
        assert before.bold is False

    def test_repeat_is_idempotent(self, printer: Printer) -> None:
        printer.bold(True)
        state = printer.style_state
        printer.bold(True)
        assert printer.style_state == state
        assert printer.buffer == b"\x1bE\x01\x1bE\x01"


class TestText:
    def test_uses_current_page_code(self, printer: Printer) -> None:
        printer.write("€").page_code(PageCode.PC858).write("€")
        assert printer.buffer == b"?\x1bt\x13\xd5"

    def test_options_page_code(self, driver: ConsoleDriver) -> None:
        printer = Printer(driver, PrinterOptions(page_code=PageCode.PC866))
        assert printer.write("Да").buffer == b"\x84\xa0"

    def test_fallback_byte_from_options(self, driver: ConsoleDriver) -> None:
        printer = Printer(driver, PrinterOptions(fallback_byte=0x2A))
        assert printer.write("☃").buffer == b"*"

    def test_writeln(self, printer: Printer) -> None:
        assert printer.writeln("ok").buffer == b"ok\x1bd\x01"

    def test_custom(self, printer: Printer) -> None:
        printer.custom(bytearray(b"\x1b\x21\x00"))
        assert printer.buffer == b"\x1b\x21\x00"

    def test_custom_rejects_text(self, printer: Printer) -> None:
        with pytest.raises(TypeError):
            printer.custom("\x1b@")  # type: ignore[arg-type]
        assert printer.buffer == b""

    def test_custom_with_page_code(self, printer: Printer) -> None:
        printer.custom_with_page_code(b"\xd5", PageCode.PC858)
        assert printer.buffer == b"\x1bt\x13\xd5"
        assert printer.style_state.page_code is PageCode.PC858

    def test_custom_with_page_code_rejects_bad_input(self, printer: Printer) -> None:
        with pytest.raises(TypeError):
            printer.custom_with_page_code(b"x", 19)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            printer.custom_with_page_code("x", PageCode.PC858)  # type: ignore[arg-type]
        assert printer.buffer == b""
        assert printer.style_state.page_code is PageCode.PC437


class TestAtomicity:
    """A rejected call leaves buffer and state untouched."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda p: p.size(9, 1),
            lambda p: p.feeds(256),
            lambda p: p.line_spacing(-1),
            lambda p: p.ean13("123"),
            lambda p: p.qrcode(""),
            lambda p: p.maxi_code("x" * 139),
            lambda p: p.gs1_databar_2d("123"),
            lambda p: p.bit_image(PixelGrid(0, 0, b"")),
        ],
    )
    def test_rejected_call(self, printer: Printer, call: object) -> None:
        printer.bold(True)
        buffer, state = printer.buffer, printer.style_state
        with pytest.raises((ValidationError, ProtocolError)):
            call(printer)  # type: ignore[operator]
        assert printer.buffer == buffer
        assert printer.style_state == state

    def test_wrong_enum(self, printer: Printer) -> None:
        with pytest.raises(TypeError):
            printer.underline(True)  # type: ignore[arg-type]
        assert printer.style_state.underline is UnderlineMode.NONE

    def test_io_failure_keeps_buffer(self) -> None:
        failing = Mock(spec=Driver)
        failing.name = "broken"
        failing.write.side_effect = PrinterIOError("write failed")
        printer = Printer(failing).write("keep me")

        with pytest.raises(PrinterIOError):
            printer.print()
        assert printer.buffer == b"keep me"

        failing.write.side_effect = None
        printer.print()
        assert printer.buffer == b""
        failing.flush.assert_called_once_with()


class TestStatus:
    def test_query_status(self, printer: Printer, driver: ConsoleDriver) -> None:
        driver.queue_response(0b00010010)
        status = printer.writeln("x").query_status(RealTimeStatusRequest.PRINTER)
        assert status[RealTimeStatusFlag.ONLINE] is True
        assert driver.written == b"x\x1bd\x01\x10\x04\x01"
        assert printer.buffer == b""

    def test_query_status_strict(self, printer: Printer, driver: ConsoleDriver) -> None:
        driver.queue_response(0x00)
        with pytest.raises(ProtocolError):
            printer.query_status(RealTimeStatusRequest.ERROR_CAUSE)

    def test_query_status_lenient(self, printer: Printer, driver: ConsoleDriver) -> None:
        driver.queue_response(0x00)
        status = printer.query_status(RealTimeStatusRequest.PRINTER, strict=False)
        assert status[RealTimeStatusFlag.ONLINE] is True

    def test_query_status_no_answer(self, printer: Printer) -> None:
        with pytest.raises(PrinterIOError, match="No data received"):
            printer.query_status(RealTimeStatusRequest.PRINTER)

    def test_real_time_status_is_buffered(self, printer: Printer, driver: ConsoleDriver) -> None:
        printer.real_time_status(RealTimeStatusRequest.INK_A)
        assert driver.written == b""
        printer.send_status()
        assert driver.written == b"\x10\x04\x07\x01"


class TestImages:
    def test_bit_image(self, printer: Printer) -> None:
        printer.bit_image(PixelGrid(8, 1, bytes(8)))
        assert printer.buffer == b"\x18\x1dv0\x00\x01\x00\x01\x00\xff"
        assert [i.name for i in printer.instructions] == ["cancel data", "print bit image 8x1"]

    def test_bit_image_bands(self, printer: Printer) -> None:
        printer.bit_image(PixelGrid(8, 3, bytes(24)), BitImageOption(band_height=2))
        assert printer.buffer == (
            b"\x18" b"\x1dv0\x00\x01\x00\x02\x00\xff\xff" b"\x1dv0\x00\x01\x00\x01\x00\xff"
        )

    def test_bit_image_from_image_scales(self, printer: Printer) -> None:
        image = Image.new("L", (64, 16), 0)
        printer.bit_image_from_image(image, BitImageOption(max_width=32))
        assert printer.instructions[-1].name == "print bit image 32x8"

    def test_bit_image_from_png(self, printer: Printer) -> None:
        png = io.BytesIO()
        Image.new("RGB", (10, 1), (0, 0, 0)).save(png, format="PNG")
        printer.bit_image_from_bytes(png.getvalue())
        assert printer.buffer.endswith(b"\x02\x00\x01\x00\xff\xc0")

    def test_undecodable_bytes(self, printer: Printer) -> None:
        with pytest.raises(ValidationError, match="Cannot decode image"):
            printer.bit_image_from_bytes(b"not an image")
        assert printer.buffer == b""

    def test_qrcode_image(self, printer: Printer) -> None:
        printer.qrcode_image("https://example.com", box_size=2)
        assert printer.buffer.startswith(b"\x18\x1dv0")

    def test_barcode_image(self, printer: Printer) -> None:
        printer.barcode_image(BarcodeSystem.EAN8, "1234567", {"write_text": False})
        assert printer.buffer.startswith(b"\x18\x1dv0")


class TestDrawLine:
    def test_full_width_rule(self, printer: Printer) -> None:
        printer.draw_line(Line())
        assert printer.buffer == b"-" * 42 + b"\x1bd\x01"

    def test_overrides_are_restored(self, printer: Printer) -> None:
        printer.size(2, 2)
        printer.clear()
        printer.draw_line(Line(LineStyle.DOUBLE, size=(1, 1), justify=JustifyMode.CENTER, width=10))
        assert printer.buffer == (
            b"\x1d!\x00" b"\x1ba\x01" + b"=" * 10 + b"\x1bd\x01" + b"\x1d!\x11" b"\x1ba\x00"
        )
        assert printer.style_state.text_size == (2, 2)
        assert printer.style_state.justify is JustifyMode.LEFT

    def test_columns_from_options(self, driver: ConsoleDriver) -> None:
        printer = Printer(driver, PrinterOptions(characters_per_line=32))
        printer.draw_line(Line(LineStyle.DOTTED))
        assert printer.buffer == b"." * 32 + b"\x1bd\x01"

    def test_render_shortcut(self, printer: Printer) -> None:
        assert Line("*", width=3).render(printer) is printer
        assert printer.buffer == b"***\x1bd\x01"


class TestDebug:
    def test_each_instruction_logged(self, driver: ConsoleDriver, caplog: pytest.LogCaptureFixture) -> None:
        printer = Printer(driver, PrinterOptions(debug_mode=DebugMode.HEX))
        with caplog.at_level(logging.DEBUG, logger="thermopos.printer"):
            printer.bold(True)
        assert "[bold] 1B 45 01" in caplog.text

    def test_debug_lists_pending(self, driver: ConsoleDriver, caplog: pytest.LogCaptureFixture) -> None:
        printer = Printer(driver, PrinterOptions(debug_mode=DebugMode.DEC)).init().feed()
        with caplog.at_level(logging.DEBUG, logger="thermopos.printer"):
            printer.debug()
        assert "2 pending instruction(s)" in caplog.text
        assert "27 64" in caplog.text

    def test_silent_without_debug_mode(self, printer: Printer, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="thermopos.printer"):
            printer.bold(True).debug()
        assert "1B 45" not in caplog.text

    def test_print_logged_at_info(self, printer: Printer, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="thermopos.printer"):
            printer.write("abc").print()
        assert "Sent 1 instruction(s), 3 bytes to console" in caplog.text
