import pytest

from thermopos.encoding import CharacterSet, PageCode
from thermopos.errors import ValidationError
from thermopos.protocol.charset import character_set, page_code
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


class TestHardware:
    def test_init(self) -> None:
        assert init() == b"\x1b\x40"

    def test_reset(self) -> None:
        assert reset() == b"\x1b\x3f\x0a\x00"

    def test_cancel(self) -> None:
        assert cancel() == b"\x18"


class TestPaper:
    @pytest.mark.parametrize("lines", [0, 1, 5, 255])
    def test_feed(self, lines: int) -> None:
        assert feed(lines) == b"\x1bd" + bytes([lines])

    def test_feed_default_is_one_line(self) -> None:
        assert feed() == b"\x1bd\x01"

    @pytest.mark.parametrize("lines", [-1, 256])
    def test_feed_out_of_range(self, lines: int) -> None:
        with pytest.raises(ValidationError):
            feed(lines)

    def test_line_spacing(self) -> None:
        assert line_spacing(30) == b"\x1b3\x1e"
        assert reset_line_spacing() == b"\x1b2"

    def test_line_spacing_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            line_spacing(300)

    def test_cut(self) -> None:
        assert cut() == b"\x1d\x56\x41\x00"
        assert cut(partial=True) == b"\x1d\x56\x41\x01"

    def test_motion_units(self) -> None:
        assert motion_units(180, 360 // 2) == b"\x1dP\xb4\xb4"

    def test_motion_units_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            motion_units(256, 0)


class TestCashDrawer:
    def test_pins(self) -> None:
        assert cash_drawer(CashDrawer.PIN2) == b"\x1bp\x00"
        assert cash_drawer(CashDrawer.PIN5) == b"\x1bp\x01"

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError):
            cash_drawer(2)  # type: ignore[arg-type]


class TestCharacterTables:
    def test_page_code(self) -> None:
        assert page_code(PageCode.PC437) == b"\x1bt\x00"
        assert page_code(PageCode.PC858) == b"\x1bt\x13"
        assert page_code(PageCode.KZ1048) == b"\x1bt\x35"

    def test_page_code_needs_enum(self) -> None:
        with pytest.raises(TypeError):
            page_code(19)  # type: ignore[arg-type]

    def test_character_set(self) -> None:
        assert character_set(CharacterSet.FRANCE) == b"\x1bR\x01"
        assert character_set(CharacterSet.INDIA_MARATHI) == b"\x1bR\x52"


class TestRealTimeStatusRequest:
    @pytest.mark.parametrize(
        "request_kind,expected",
        [
            (RealTimeStatusRequest.PRINTER, b"\x10\x04\x01"),
            (RealTimeStatusRequest.OFFLINE_CAUSE, b"\x10\x04\x02"),
            (RealTimeStatusRequest.ERROR_CAUSE, b"\x10\x04\x03"),
            (RealTimeStatusRequest.ROLL_PAPER_SENSOR, b"\x10\x04\x04"),
            (RealTimeStatusRequest.INK_A, b"\x10\x04\x07\x01"),
            (RealTimeStatusRequest.INK_B, b"\x10\x04\x07\x02"),
            (RealTimeStatusRequest.PEELER, b"\x10\x04\x08\x03"),
            (RealTimeStatusRequest.INTERFACE, b"\x10\x04\x12\x01"),
            (RealTimeStatusRequest.DMD, b"\x10\x04\x12\x02"),
        ],
    )
    def test_frames(self, request_kind: RealTimeStatusRequest, expected: bytes) -> None:
        assert real_time_status(request_kind) == expected

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError):
            real_time_status(1)  # type: ignore[arg-type]
