"""USB printer class driver on pyusb bulk endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import usb.core
import usb.util

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError

logger = logging.getLogger(__name__)

__all__ = ["UsbDriver"]


@dataclass
class _UsbDevice:
    device: Any
    interface: int
    out_endpoint: int
    in_endpoint: Optional[int]
    timeout_ms: Optional[int]

    def release(self) -> None:
        try:
            usb.util.release_interface(self.device, self.interface)
        finally:
            usb.util.dispose_resources(self.device)


def _timeout_ms(timeout: Optional[float]) -> Optional[int]:
    return None if timeout is None else max(1, int(timeout * 1000))


def _find_endpoint(interface: Any, direction: int) -> Optional[int]:
    endpoint = usb.util.find_descriptor(
        interface,
        custom_match=lambda e: (
            usb.util.endpoint_direction(e.bEndpointAddress) == direction
            and usb.util.endpoint_type(e.bmAttributes) == usb.util.ENDPOINT_TYPE_BULK
        ),
    )
    return None if endpoint is None else endpoint.bEndpointAddress


class UsbDriver(Driver):
    """
    pyusb transport.

    Endpoints are discovered from the interface descriptor when not given:
    the first bulk OUT endpoint for writes and the first bulk IN endpoint
    for status reads.

    Example:
        >>> driver = UsbDriver.open(0x0416, 0x5011, timeout=2.0)
    """

    io_errors = (usb.core.USBError, OSError)

    @classmethod
    def open(
        cls,
        vendor_id: int,
        product_id: int,
        timeout: Optional[float] = None,
        interface: int = 0,
        out_endpoint: Optional[int] = None,
        in_endpoint: Optional[int] = None,
    ) -> "UsbDriver":
        """
        Find, configure and claim the printer.

        Raises:
            PrinterIOError: Device not found, no bulk OUT endpoint, or a USB
                error while configuring.
        """
        name = f"usb {vendor_id:04x}:{product_id:04x}"
        context = {"vendor_id": f"0x{vendor_id:04X}", "product_id": f"0x{product_id:04X}"}

        device = usb.core.find(idVendor=vendor_id, idProduct=product_id)
        if device is None:
            raise PrinterIOError("USB printer not found", context=context)

        try:
            try:
                if device.is_kernel_driver_active(interface):
                    device.detach_kernel_driver(interface)
            except NotImplementedError:
                # Not available on Windows / macOS backends.
                pass
            if device.get_active_configuration() is None:
                device.set_configuration()
            config = device.get_active_configuration()
            intf = config[(interface, 0)]
            if out_endpoint is None:
                out_endpoint = _find_endpoint(intf, usb.util.ENDPOINT_OUT)
            if in_endpoint is None:
                in_endpoint = _find_endpoint(intf, usb.util.ENDPOINT_IN)
            usb.util.claim_interface(device, interface)
        except usb.core.USBError as e:
            raise PrinterIOError(f"Cannot configure USB printer: {e}", context=context) from e

        if out_endpoint is None:
            raise PrinterIOError("USB printer has no bulk OUT endpoint", context=context)

        session = _UsbDevice(device, interface, out_endpoint, in_endpoint, _timeout_ms(timeout))
        logger.info("Opened %s (out 0x%02X, in %s)", name, out_endpoint, in_endpoint)
        return cls(SharedHandle(session, _UsbDevice.release, label=name), name)

    @property
    def _session(self) -> _UsbDevice:
        return self._handle.resource

    def _write_chunk(self, data: memoryview) -> int:
        session = self._session
        return session.device.write(session.out_endpoint, data, session.timeout_ms)

    def _read(self, size: int) -> bytes:
        session = self._session
        if session.in_endpoint is None:
            raise PrinterIOError(f"{self.name} has no bulk IN endpoint", context={"driver": self.name})
        return bytes(session.device.read(session.in_endpoint, size, session.timeout_ms))
