"""HID driver on hidapi, for printers exposing a vendor HID interface."""

from __future__ import annotations

import logging
from operator import methodcaller
from typing import Final

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError

logger = logging.getLogger(__name__)

__all__ = ["HID_REPORT_SIZE", "HidApiDriver"]

HID_REPORT_SIZE: Final[int] = 64
"""Bytes per output report, report ID included."""

_REPORT_ID: Final[int] = 0x00


class HidApiDriver(Driver):
    """
    hidapi transport.

    Data goes out in reports of HID_REPORT_SIZE bytes whose first byte is
    the report ID (0), so each report carries 63 payload bytes.
    """

    @classmethod
    def open(cls, vendor_id: int, product_id: int) -> "HidApiDriver":
        """
        Open the first HID device matching the ids.

        Raises:
            PrinterIOError: If hidapi is not installed or the device cannot
                be opened.
        """
        name = f"hid {vendor_id:04x}:{product_id:04x}"
        context = {"vendor_id": f"0x{vendor_id:04X}", "product_id": f"0x{product_id:04X}"}
        try:
            import hid
        except ImportError as e:
            raise PrinterIOError("hidapi is not available", context=context) from e

        device = hid.device()
        try:
            device.open(vendor_id, product_id)
        except (OSError, ValueError) as e:
            raise PrinterIOError(f"Cannot open HID printer: {e}", context=context) from e
        logger.info("Opened %s", name)
        return cls(SharedHandle(device, methodcaller("close"), label=name), name)

    def _write_chunk(self, data: memoryview) -> int:
        payload = bytes(data[: HID_REPORT_SIZE - 1])
        sent = self._handle.resource.write(bytes([_REPORT_ID]) + payload)
        if sent < 0:
            raise PrinterIOError(f"{self.name}: HID write failed", context={"driver": self.name})
        return min(len(payload), max(0, sent - 1))

    def _read(self, size: int) -> bytes:
        return bytes(self._handle.resource.read(size))
