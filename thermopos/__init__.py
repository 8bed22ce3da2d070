"""
thermopos
=========

ESC/POS client library for thermal receipt printers.

This package provides:
    - A stateful, chainable Printer builder for text, barcodes, 2D codes,
      raster images, cash drawer pulses and real-time status queries
    - Byte-exact ESC/POS command frames (thermopos.protocol)
    - Unicode to code page encoding with a configurable fallback byte
    - Raster image conversion (threshold or Floyd-Steinberg dithering)
    - Transport drivers: TCP/IP, USB, native async USB, HID, serial,
      plain file/device node and a console dry-run sink
    - Decoding of real-time status responses into named flags

Basic usage:
    >>> from thermopos import ConsoleDriver, Printer
    >>>
    >>> driver = ConsoleDriver.open(show_output=False)
    >>> printer = Printer(driver)
    >>> printer.init().bold(True).writeln("Hello").bold(False).print_cut()
    >>> driver.written
    b'\\x1b@\\x1bE\\x01Hello\\x1bd\\x01\\x1bE\\x00\\x1dVA\\x00'

Network printer:
    >>> from thermopos import NetworkDriver, Printer
    >>>
    >>> with NetworkDriver.open("192.168.1.50", 9100, timeout=5.0) as driver:
    ...     Printer(driver).init().writeln("Receipt #42").print_cut()

Configuration:
    >>> import os
    >>> os.environ["THERMOPOS_LOG_LEVEL"] = "DEBUG"
    >>>
    >>> from thermopos import PrinterOptions, load_config
    >>>
    >>> options = PrinterOptions.from_config(load_config())
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# VERSION METADATA
# =============================================================================

__version__ = "0.3.0"
__author__ = "thermopos developers"
__description__ = "ESC/POS client library for thermal receipt printers"
__license__ = "MIT"
__python_requires__ = ">=3.10"

VERSION_MAJOR = 0
VERSION_MINOR = 3
VERSION_PATCH = 0

if sys.version_info < (3, 10):
    raise RuntimeError(
        f"thermopos requires Python 3.10 or newer. "
        f"Current version: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# LOGGING
# =============================================================================

_LOGGER_NAME = "thermopos"


def _setup_logging() -> None:
    """
    Configure the package logger.

    - stderr handler for WARNING and above
    - rotating file handler (logs/thermopos.log) for every enabled level,
      only when THERMOPOS_LOG_FILE is set to a true value
    - level taken from THERMOPOS_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR,
      CRITICAL), INFO by default

    Called once at import time. Repeated calls are no-ops.
    """
    log_level_str = os.environ.get("THERMOPOS_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger(_LOGGER_NAME)
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if os.environ.get("THERMOPOS_LOG_FILE", "").lower() in ("1", "true", "yes", "on"):
        try:
            log_dir = Path("logs")
            log_dir.mkdir(exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / "thermopos.log",
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                f"File logging could not be initialised: {e}. Using stderr only."
            )

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Return a logger namespaced under ``thermopos``.

    Args:
        module_name: Usually ``__name__``. Names outside the package are
            prefixed with ``thermopos.``; ``__main__`` becomes
            ``thermopos.main``.

    Returns:
        Logger inheriting the package handlers.

    Example:
        >>> logger = get_logger("my_receipts")
        >>> logger.name
        'thermopos.my_receipts'
    """
    if not module_name.startswith(_LOGGER_NAME):
        if module_name == "__main__":
            full_name = f"{_LOGGER_NAME}.main"
        else:
            clean_name = module_name.lstrip(".")
            full_name = f"{_LOGGER_NAME}.{clean_name}"
    else:
        full_name = module_name

    return logging.getLogger(full_name)


# =============================================================================
# CONFIGURATION
# =============================================================================

_DEFAULT_CONFIG: Dict[str, Any] = {
    "page_code": None,
    "characters_per_line": 42,
    "fallback_byte": 0x3F,
    "debug_mode": None,
    "network_timeout_seconds": 5.0,
    "network_port": 9100,
    "serial_baudrate": 9600,
    "image_max_width": 512,
    "image_max_height": 512,
    "log_level": "INFO",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from a JSON file merged over the defaults.

    Keys:
        - page_code: str | None - PageCode member name (PC437, PC858, WPC1252, ...)
        - characters_per_line: int - Columns of font A at size 1
        - fallback_byte: int - Byte substituted for unmappable characters
        - debug_mode: str | None - HEX, DEC or CHAR instruction dumps
        - network_timeout_seconds: float - Socket connect/read timeout
        - network_port: int - Raw printing port
        - serial_baudrate: int - Default serial speed
        - image_max_width / image_max_height: int - Raster limits (dots)
        - log_level: str - Logging level

    Args:
        config_path: Path to the file. Defaults to ``thermopos.json`` in the
            current directory.

    Returns:
        Dictionary with every default key present. Unreadable or malformed
        files are reported as warnings and the defaults are returned.
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("thermopos.json")

    config = _DEFAULT_CONFIG.copy()

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                raise ValueError(
                    f"Configuration file must contain a JSON object, "
                    f"got {type(user_config).__name__}"
                )

            config.update(user_config)

            logger.info(f"Configuration loaded from {config_path}")
            logger.debug(f"Configuration: {config}")

        except json.JSONDecodeError as e:
            logger.warning(
                f"Could not parse {config_path}: invalid JSON "
                f"at line {e.lineno}, column {e.colno}. "
                f"Using default configuration."
            )
        except OSError as e:
            logger.warning(
                f"Could not read {config_path}: {e}. Using default configuration."
            )
        except ValueError as e:
            logger.warning(
                f"Invalid configuration format: {e}. Using default configuration."
            )
    else:
        logger.info(
            f"Configuration file {config_path} not found. "
            f"Using default configuration."
        )

    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Report which third-party libraries can be imported.

    Pillow is required. The transport libraries are only needed for the
    drivers that use them; symbol rendering needs qrcode and python-barcode.

    Returns:
        Mapping of distribution name to availability.

    Example:
        >>> deps = check_dependencies()
        >>> if not deps["pyusb"]:
        ...     print("UsbDriver unavailable")
    """
    dependencies: Dict[str, bool] = {}

    modules = {
        "pillow": "PIL",
        "pyserial": "serial",
        "pyusb": "usb.core",
        "libusb1": "usb1",
        "hidapi": "hid",
        "qrcode": "qrcode",
        "python-barcode": "barcode",
    }
    for dist_name, module_name in modules.items():
        try:
            __import__(module_name)
            dependencies[dist_name] = True
        except ImportError:
            dependencies[dist_name] = False

    return dependencies


_setup_logging()

# =============================================================================
# PUBLIC API
# =============================================================================

# Placed after the helpers so logging is configured before submodules load.
from thermopos.drivers import (  # noqa: E402
    ConsoleDriver,
    Driver,
    FileDriver,
    HidApiDriver,
    NativeUsbDriver,
    NetworkDriver,
    SerialPortDriver,
    UsbDriver,
)
from thermopos.encoding import CharacterEncoder  # noqa: E402
from thermopos.errors import (  # noqa: E402
    EncodingError,
    PrinterError,
    PrinterIOError,
    ProtocolError,
    ValidationError,
)
from thermopos.options import DebugMode, PrinterOptions  # noqa: E402
from thermopos.printer import Printer, PrinterStyleState  # noqa: E402
from thermopos.protocol import (  # noqa: E402
    BarcodeSystem,
    CashDrawer,
    CharacterSet,
    Font,
    JustifyMode,
    PageCode,
    RealTimeStatusRequest,
    UnderlineMode,
)
from thermopos.status import RealTimeStatusFlag, StatusResponse  # noqa: E402

__all__ = [
    # Metadata
    "__version__",
    "__author__",
    "__description__",
    "__license__",
    "VERSION_MAJOR",
    "VERSION_MINOR",
    "VERSION_PATCH",
    # Utilities
    "get_logger",
    "load_config",
    "check_dependencies",
    # Builder
    "Printer",
    "PrinterStyleState",
    "PrinterOptions",
    "DebugMode",
    "CharacterEncoder",
    # Protocol enums
    "BarcodeSystem",
    "CashDrawer",
    "CharacterSet",
    "Font",
    "JustifyMode",
    "PageCode",
    "RealTimeStatusRequest",
    "UnderlineMode",
    # Status
    "RealTimeStatusFlag",
    "StatusResponse",
    # Drivers
    "Driver",
    "ConsoleDriver",
    "FileDriver",
    "HidApiDriver",
    "NativeUsbDriver",
    "NetworkDriver",
    "SerialPortDriver",
    "UsbDriver",
    # Errors
    "PrinterError",
    "ValidationError",
    "EncodingError",
    "PrinterIOError",
    "ProtocolError",
]

get_logger(__name__).debug(f"thermopos {__version__} initialised")
