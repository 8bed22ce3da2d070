"""
Two-dimensional symbol commands (GS ( k) for ESC/POS printers.

Every symbology follows the same sequence: a few setting functions, a
store function that loads the data into the symbol save area, then a print
function. The generic frame is:

    GS ( k pL pH cn fn [parameters]

where pL + pH * 256 counts the bytes after pH and cn selects the symbology:

    0x30 PDF417, 0x31 QR Code, 0x32 MaxiCode, 0x33 GS1 DataBar 2D,
    0x35 Aztec Code, 0x36 DataMatrix

Symbol data given as str is sent UTF-8 encoded; bytes are sent unchanged.
The printer renders the symbol, so nothing here knows about modules or
error correction codewords.

Reference: Epson ESC/POS Command Reference, GS ( k
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, FrozenSet, List, Tuple, Union

from thermopos.errors import ValidationError
from thermopos.protocol.common import param_length, require_range
from thermopos.protocol.constants import (
    AZTEC_CN,
    DATAMATRIX_CN,
    FN_PRINT,
    FN_STORE,
    GS1_DATABAR_CN,
    GS_2D,
    MAXICODE_CN,
    PDF417_CN,
    QR_CN,
)

__all__ = [
    # QR Code
    "QRCodeModel",
    "QRCodeCorrectionLevel",
    "QRCodeOption",
    "QRCODE_MAX_DATA",
    "QRCODE_DEFAULT_SIZE",
    "qrcode",
    # PDF417
    "Pdf417CorrectionLevel",
    "Pdf417Type",
    "Pdf417Option",
    "pdf417",
    # MaxiCode
    "MaxiCodeMode",
    "maxi_code",
    # GS1 DataBar 2D
    "GS1DataBar2DType",
    "GS1DataBar2DWidth",
    "GS1DataBar2DOption",
    "gs1_databar_2d",
    # Aztec
    "AztecMode",
    "AztecOption",
    "aztec",
    # DataMatrix
    "DataMatrixType",
    "DataMatrixOption",
    "data_matrix",
]

SymbolData = Union[str, bytes]

QRCODE_MAX_DATA: Final[int] = 7089
QRCODE_DEFAULT_SIZE: Final[int] = 4
MAXICODE_MAX_DATA: Final[int] = 138
GS1_EXPANDED_MAX_DATA: Final[int] = 255


def _payload(data: SymbolData, symbology: str) -> bytes:
    if isinstance(data, str):
        payload = data.encode("utf-8")
    elif isinstance(data, (bytes, bytearray)):
        payload = bytes(data)
    else:
        raise TypeError(f"{symbology} data must be str or bytes, got {type(data).__name__}")
    if not payload:
        raise ValidationError(f"{symbology} data must not be empty", context={"symbology": symbology})
    return payload


def _function(cn: int, fn: int, *params: int) -> bytes:
    """Fixed-size setting function: GS ( k pL pH cn fn params."""
    length = 2 + len(params)
    return GS_2D + bytes([length & 0xFF, length >> 8, cn, fn, *params])


def _store(cn: int, payload: bytes, prefix: bytes = b"") -> bytes:
    """Store function: GS ( k pL pH cn 50 30 [prefix] data."""
    pl, ph = param_length(len(payload), 3 + len(prefix))
    return GS_2D + bytes([pl, ph, cn]) + FN_STORE + prefix + payload


def _print(cn: int) -> bytes:
    return GS_2D + bytes([3, 0, cn]) + FN_PRINT


# =============================================================================
# QR CODE (cn = 49)
# =============================================================================


class QRCodeModel(Enum):
    MODEL1 = 49
    MODEL2 = 50
    MICRO = 51


class QRCodeCorrectionLevel(Enum):
    """Error correction: L 7%, M 15%, Q 25%, H 30% recovery."""

    L = 48
    M = 49
    Q = 50
    H = 51


@dataclass(frozen=True)
class QRCodeOption:
    """
    QR Code settings.

    Attributes:
        model: Symbol model.
        size: Module size in dots; 0 means the default (4), values above
            15 are clamped to 15.
        correction_level: Error correction level.
    """

    model: QRCodeModel = QRCodeModel.MODEL1
    size: int = 4
    correction_level: QRCodeCorrectionLevel = QRCodeCorrectionLevel.H


def qrcode(data: SymbolData, option: QRCodeOption = QRCodeOption()) -> List[bytes]:
    """
    Frames printing a QR Code: model, size, correction level, store, print.

    Hex:
        1D 28 6B 04 00 31 41 n 00       model (49, 50, 51)
        1D 28 6B 03 00 31 43 n          module size
        1D 28 6B 03 00 31 45 n          correction level (48-51)
        1D 28 6B pL pH 31 50 30 data    store, pL/pH = len + 3
        1D 28 6B 03 00 31 51 30         print

    Raises:
        ValidationError: For empty data, data over 7089 bytes or a size
            outside 0-255.

    Example:
        >>> frames = qrcode("https://example.com")
        >>> frames[-1]
        b'\\x1d(k\\x03\\x001Q0'
    """
    payload = _payload(data, "QR Code")
    if len(payload) > QRCODE_MAX_DATA:
        raise ValidationError(
            f"QR Code data too long ({len(payload)} > {QRCODE_MAX_DATA} bytes)",
            context={"length": len(payload)},
        )
    size = require_range("size", option.size, 0, 255) or QRCODE_DEFAULT_SIZE
    return [
        _function(QR_CN, 0x41, option.model.value, 0),
        _function(QR_CN, 0x43, min(size, 15)),
        _function(QR_CN, 0x45, option.correction_level.value),
        _store(QR_CN, payload),
        _print(QR_CN),
    ]


# =============================================================================
# PDF417 (cn = 48)
# =============================================================================


@dataclass(frozen=True)
class Pdf417CorrectionLevel:
    """
    PDF417 error correction: either a fixed level 0-8 or a ratio 1-40
    (ratio * 10% of the data codewords).
    """

    level: int = -1
    ratio: int = 1

    @classmethod
    def fixed(cls, level: int) -> "Pdf417CorrectionLevel":
        return cls(level=require_range("level", level, 0, 8), ratio=0)

    @classmethod
    def by_ratio(cls, ratio: int) -> "Pdf417CorrectionLevel":
        return cls(level=-1, ratio=require_range("ratio", ratio, 1, 40))

    def params(self) -> Tuple[int, int]:
        """(m, n) pair of function 069."""
        if self.level >= 0:
            return 48, 48 + self.level
        return 49, self.ratio


class Pdf417Type(Enum):
    STANDARD = 0
    TRUNCATED = 1


@dataclass(frozen=True)
class Pdf417Option:
    """
    PDF417 settings.

    Attributes:
        columns: Data columns, 0 (automatic) or 1-30.
        rows: Rows, 0 (automatic) or 3-90.
        width: Module width in dots, 2-8.
        row_height: Row height as a multiple of the module width, 2-8.
        code_type: Standard or truncated symbol.
        correction_level: Error correction level or ratio.
    """

    columns: int = 0
    rows: int = 0
    width: int = 3
    row_height: int = 3
    code_type: Pdf417Type = Pdf417Type.STANDARD
    correction_level: Pdf417CorrectionLevel = field(default_factory=Pdf417CorrectionLevel)

    def __post_init__(self) -> None:
        require_range("columns", self.columns, 0, 30)
        if self.rows != 0:
            require_range("rows", self.rows, 3, 90)
        require_range("width", self.width, 2, 8)
        require_range("row_height", self.row_height, 2, 8)


def pdf417(data: SymbolData, option: Pdf417Option = Pdf417Option()) -> List[bytes]:
    """Frames printing a PDF417 symbol (functions 065-070, 080, 081)."""
    payload = _payload(data, "PDF417")
    m, n = option.correction_level.params()
    return [
        _function(PDF417_CN, 0x41, option.columns),
        _function(PDF417_CN, 0x42, option.rows),
        _function(PDF417_CN, 0x43, option.width),
        _function(PDF417_CN, 0x44, option.row_height),
        _function(PDF417_CN, 0x45, m, n),
        _function(PDF417_CN, 0x46, option.code_type.value),
        _store(PDF417_CN, payload),
        _print(PDF417_CN),
    ]


# =============================================================================
# MAXICODE (cn = 50)
# =============================================================================


class MaxiCodeMode(Enum):
    MODE2 = 50
    MODE3 = 51
    MODE4 = 52
    MODE5 = 53
    MODE6 = 54


def maxi_code(data: SymbolData, mode: MaxiCodeMode = MaxiCodeMode.MODE2) -> List[bytes]:
    """Frames printing a MaxiCode symbol: mode, store, print."""
    payload = _payload(data, "MaxiCode")
    if len(payload) > MAXICODE_MAX_DATA:
        raise ValidationError(
            f"MaxiCode data too long ({len(payload)} > {MAXICODE_MAX_DATA} bytes)",
            context={"length": len(payload)},
        )
    return [
        _function(MAXICODE_CN, 0x41, mode.value),
        _store(MAXICODE_CN, payload),
        _print(MAXICODE_CN),
    ]


# =============================================================================
# GS1 DATABAR 2D (cn = 51)
# =============================================================================


class GS1DataBar2DType(Enum):
    STACKED = 72
    STACKED_OMNIDIRECTIONAL = 73
    EXPANDED_STACKED = 76


class GS1DataBar2DWidth(Enum):
    """Module width selector sent with function 067."""

    S = 2
    M = 1
    L = 4


_GS1_EXPANDED_CHARS: Final[FrozenSet[str]] = frozenset("0123456789ABCD !\"%$'()*+,-./:;<=>?_{")


@dataclass(frozen=True)
class GS1DataBar2DOption:
    width: GS1DataBar2DWidth = GS1DataBar2DWidth.M
    code_type: GS1DataBar2DType = GS1DataBar2DType.STACKED


def _check_gs1_databar(data: str, code_type: GS1DataBar2DType) -> None:
    if code_type is GS1DataBar2DType.EXPANDED_STACKED:
        if len(data) > GS1_EXPANDED_MAX_DATA or not set(data) <= _GS1_EXPANDED_CHARS:
            raise ValidationError(
                "GS1 DataBar Expanded Stacked allows up to 255 characters of "
                "0-9, A-D, space and !\"%$'()*+,-./:;<=>?_{",
                context={"data": data},
            )
    elif not (data.isascii() and data.isdigit() and len(data) == 13):
        raise ValidationError(
            f"GS1 DataBar {code_type.name.replace('_', ' ').title()} requires exactly 13 digits",
            context={"data": data},
        )


def gs1_databar_2d(data: str, option: GS1DataBar2DOption = GS1DataBar2DOption()) -> List[bytes]:
    """
    Frames printing a GS1 DataBar stacked symbol.

    Hex:
        1D 28 6B 03 00 33 43 n                 module width
        1D 28 6B pL pH 33 50 30 type data      store, pL/pH = len + 4
        1D 28 6B 03 00 33 51 30                print
    """
    if not isinstance(data, str):
        raise TypeError(f"GS1 DataBar data must be str, got {type(data).__name__}")
    _check_gs1_databar(data, option.code_type)
    payload = _payload(data, "GS1 DataBar")
    return [
        _function(GS1_DATABAR_CN, 0x43, option.width.value),
        _store(GS1_DATABAR_CN, payload, prefix=bytes([option.code_type.value])),
        _print(GS1_DATABAR_CN),
    ]


# =============================================================================
# AZTEC CODE (cn = 53)
# =============================================================================


@dataclass(frozen=True)
class AztecMode:
    """
    Aztec symbol type and number of data layers.

    Full-range symbols take 0 (automatic) or 4-32 layers, compact symbols
    0 (automatic) or 1-4.
    """

    compact: bool = False
    layers: int = 0

    def __post_init__(self) -> None:
        if self.compact:
            require_range("layers", self.layers, 0, 4)
        elif self.layers != 0:
            require_range("layers", self.layers, 4, 32)

    @classmethod
    def full_range(cls, layers: int = 0) -> "AztecMode":
        return cls(compact=False, layers=layers)

    @classmethod
    def compact_mode(cls, layers: int = 0) -> "AztecMode":
        return cls(compact=True, layers=layers)


@dataclass(frozen=True)
class AztecOption:
    """
    Attributes:
        mode: Symbol type and layers.
        size: Module size in dots, 2-16.
        correction_level: Error correction percentage, 5-95.
    """

    mode: AztecMode = field(default_factory=AztecMode)
    size: int = 3
    correction_level: int = 23

    def __post_init__(self) -> None:
        require_range("size", self.size, 2, 16)
        require_range("correction_level", self.correction_level, 5, 95)


def aztec(data: SymbolData, option: AztecOption = AztecOption()) -> List[bytes]:
    """Frames printing an Aztec symbol: mode, module size, correction, store, print."""
    payload = _payload(data, "Aztec")
    return [
        _function(AZTEC_CN, 0x42, int(option.mode.compact), option.mode.layers),
        _function(AZTEC_CN, 0x43, option.size),
        _function(AZTEC_CN, 0x45, option.correction_level),
        _store(AZTEC_CN, payload),
        _print(AZTEC_CN),
    ]


# =============================================================================
# DATAMATRIX (cn = 54)
# =============================================================================

_DATAMATRIX_SQUARE: Final[FrozenSet[int]] = frozenset(
    {0, 10, 12, 14, 16, 18, 20, 22, 24, 26, 32, 36, 40, 44, 48, 52, 64, 72, 80, 88, 96, 104, 120, 132, 144}
)
_DATAMATRIX_RECTANGLE: Final[FrozenSet[Tuple[int, int]]] = frozenset(
    {(8, 0), (8, 18), (8, 32), (12, 0), (12, 26), (12, 36), (16, 0), (16, 36), (16, 48)}
)


@dataclass(frozen=True)
class DataMatrixType:
    """
    Square (rows = columns) or rectangle symbol. 0 means automatic.
    """

    rectangle: bool = False
    rows: int = 0
    columns: int = 0

    def __post_init__(self) -> None:
        if self.rectangle:
            if (self.rows, self.columns) not in _DATAMATRIX_RECTANGLE:
                raise ValidationError(
                    f"Invalid DataMatrix rectangle size ({self.rows}, {self.columns})",
                    context={"rows": self.rows, "columns": self.columns},
                )
        elif self.rows not in _DATAMATRIX_SQUARE or self.columns != self.rows:
            raise ValidationError(
                f"Invalid DataMatrix square size {self.rows}",
                context={"rows": self.rows, "columns": self.columns},
            )

    @classmethod
    def square(cls, size: int = 0) -> "DataMatrixType":
        return cls(rectangle=False, rows=size, columns=size)

    @classmethod
    def rectangle_of(cls, rows: int, columns: int) -> "DataMatrixType":
        return cls(rectangle=True, rows=rows, columns=columns)


@dataclass(frozen=True)
class DataMatrixOption:
    code_type: DataMatrixType = field(default_factory=DataMatrixType)
    size: int = 3

    def __post_init__(self) -> None:
        require_range("size", self.size, 2, 16)


def data_matrix(data: SymbolData, option: DataMatrixOption = DataMatrixOption()) -> List[bytes]:
    """Frames printing a DataMatrix symbol: type, module size, store, print."""
    payload = _payload(data, "DataMatrix")
    code_type = option.code_type
    return [
        _function(DATAMATRIX_CN, 0x42, int(code_type.rectangle), code_type.rows, code_type.columns),
        _function(DATAMATRIX_CN, 0x43, option.size),
        _store(DATAMATRIX_CN, payload),
        _print(DATAMATRIX_CN),
    ]
