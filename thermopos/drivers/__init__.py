"""
Transport drivers.

Module Structure:
    drivers/
    ├── __init__.py      # This file (public API exports)
    ├── base.py          # Driver ABC, SharedHandle reference counting
    ├── console.py       # In-memory dry run sink
    ├── network.py       # TCP socket (port 9100)
    ├── usb.py           # pyusb bulk endpoints
    ├── native_usb.py    # libusb1 asynchronous transfers
    ├── hid.py           # hidapi
    ├── serial_port.py   # pyserial
    └── file.py          # Device node or file

hidapi and libusb1 wrap native libraries and are imported when their driver
is opened, so the package imports on machines that lack them.
"""

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.drivers.console import ConsoleDriver
from thermopos.drivers.file import FileDriver
from thermopos.drivers.hid import HidApiDriver
from thermopos.drivers.native_usb import NativeUsbDriver
from thermopos.drivers.network import NetworkDriver
from thermopos.drivers.serial_port import SerialPortDriver
from thermopos.drivers.usb import UsbDriver

__all__ = [
    "Driver",
    "SharedHandle",
    "ConsoleDriver",
    "FileDriver",
    "HidApiDriver",
    "NativeUsbDriver",
    "NetworkDriver",
    "SerialPortDriver",
    "UsbDriver",
]
