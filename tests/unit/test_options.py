import pytest

from thermopos.encoding import PageCode
from thermopos.errors import ValidationError
from thermopos.options import (
    DEFAULT_CHARACTERS_PER_LINE,
    DebugMode,
    PrinterOptions,
    format_frame,
)


class TestDebugMode:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            (DebugMode.DEC, DebugMode.DEC),
            ("hex", DebugMode.HEX),
            (" Char ", DebugMode.CHAR),
        ],
    )
    def test_parse(self, value: object, expected: object) -> None:
        assert DebugMode.parse(value) is expected

    @pytest.mark.parametrize("value", ["binary", 1, ""])
    def test_parse_unknown(self, value: object) -> None:
        with pytest.raises(ValidationError, match="Unknown debug mode"):
            DebugMode.parse(value)


class TestFormatFrame:
    def test_hex(self) -> None:
        assert format_frame(b"\x1b@", DebugMode.HEX) == "1B 40"

    def test_dec(self) -> None:
        assert format_frame(b"\x1bd\x01", DebugMode.DEC) == "27 100 1"

    def test_char(self) -> None:
        assert format_frame(b"\x1bE\x01Hi", DebugMode.CHAR) == "\\x1bE\\x01Hi"

    def test_empty(self) -> None:
        assert format_frame(b"", DebugMode.HEX) == ""


class TestPrinterOptions:
    def test_defaults(self) -> None:
        options = PrinterOptions()
        assert options.page_code is None
        assert options.debug_mode is None
        assert options.characters_per_line == DEFAULT_CHARACTERS_PER_LINE == 42
        assert options.fallback_byte == 0x3F

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page_code": "PC437"},
            {"debug_mode": "hex"},
            {"characters_per_line": 0},
            {"characters_per_line": True},
            {"fallback_byte": 256},
            {"fallback_byte": -1},
        ],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            PrinterOptions(**kwargs)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            PrinterOptions().page_code = PageCode.PC858  # type: ignore[misc]


class TestFromConfig:
    def test_full_config(self) -> None:
        options = PrinterOptions.from_config(
            {
                "page_code": "pc858",
                "debug_mode": "DEC",
                "characters_per_line": 48,
                "fallback_byte": 0x20,
                "network_port": 9100,
            }
        )
        assert options == PrinterOptions(
            page_code=PageCode.PC858,
            debug_mode=DebugMode.DEC,
            characters_per_line=48,
            fallback_byte=0x20,
        )

    def test_empty_config_keeps_defaults(self) -> None:
        assert PrinterOptions.from_config({}) == PrinterOptions()

    def test_null_values(self) -> None:
        options = PrinterOptions.from_config({"page_code": None, "debug_mode": None})
        assert options == PrinterOptions()

    def test_page_code_member_accepted(self) -> None:
        assert PrinterOptions.from_config({"page_code": PageCode.WPC1252}).page_code is PageCode.WPC1252

    def test_unknown_page_code(self) -> None:
        with pytest.raises(ValidationError, match="Unknown page code"):
            PrinterOptions.from_config({"page_code": "CP9999"})

    def test_bad_columns(self) -> None:
        with pytest.raises(ValidationError):
            PrinterOptions.from_config({"characters_per_line": -4})
