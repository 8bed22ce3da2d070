"""
USB driver on libusb1 asynchronous transfers.

Each write or read submits one bulk transfer and then pumps the libusb event
loop until the transfer completes, so the public API stays synchronous.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Final, Optional, Tuple

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError

logger = logging.getLogger(__name__)

__all__ = ["NativeUsbDriver"]

_ENDPOINT_IN: Final[int] = 0x80
_TRANSFER_TYPE_MASK: Final[int] = 0x03
_TRANSFER_TYPE_BULK: Final[int] = 0x02
_EVENT_POLL_SECONDS: Final[float] = 0.1


@dataclass
class _NativeSession:
    usb1: Any
    context: Any
    handle: Any
    interface: int
    out_endpoint: int
    in_endpoint: Optional[int]
    timeout_ms: int

    def release(self) -> None:
        try:
            self.handle.releaseInterface(self.interface)
            self.handle.close()
        finally:
            self.context.close()


def _bulk_endpoints(device: Any, interface: int) -> Tuple[Optional[int], Optional[int]]:
    out_ep: Optional[int] = None
    in_ep: Optional[int] = None
    for setting in device.iterSettings():
        if setting.getNumber() != interface:
            continue
        for endpoint in setting:
            if endpoint.getAttributes() & _TRANSFER_TYPE_MASK != _TRANSFER_TYPE_BULK:
                continue
            address = endpoint.getAddress()
            if address & _ENDPOINT_IN:
                in_ep = address if in_ep is None else in_ep
            else:
                out_ep = address if out_ep is None else out_ep
        break
    return out_ep, in_ep


class NativeUsbDriver(Driver):
    """
    libusb1 transport.

    Example:
        >>> driver = NativeUsbDriver.open(0x0416, 0x5011, timeout=2.0)
    """

    @classmethod
    def open(
        cls,
        vendor_id: int,
        product_id: int,
        timeout: Optional[float] = None,
        interface: int = 0,
    ) -> "NativeUsbDriver":
        """
        Open and claim the printer.

        Args:
            vendor_id: USB vendor id.
            product_id: USB product id.
            timeout: Per transfer timeout in seconds; None waits forever.
            interface: Interface number to claim.

        Raises:
            PrinterIOError: libusb1 missing, device not found, no bulk OUT
                endpoint or a libusb error.
        """
        name = f"native-usb {vendor_id:04x}:{product_id:04x}"
        context = {"vendor_id": f"0x{vendor_id:04X}", "product_id": f"0x{product_id:04X}"}
        try:
            import usb1
        except ImportError as e:
            raise PrinterIOError("libusb1 is not available", context=context) from e

        usb_context = usb1.USBContext()
        try:
            handle = usb_context.openByVendorIDAndProductID(vendor_id, product_id, skip_on_error=True)
            if handle is None:
                raise PrinterIOError("USB printer not found", context=context)
            try:
                if handle.kernelDriverActive(interface):
                    handle.detachKernelDriver(interface)
            except usb1.USBErrorNotSupported:
                pass
            handle.claimInterface(interface)
            out_ep, in_ep = _bulk_endpoints(handle.getDevice(), interface)
            if out_ep is None:
                handle.close()
                raise PrinterIOError("USB printer has no bulk OUT endpoint", context=context)
        except usb1.USBError as e:
            usb_context.close()
            raise PrinterIOError(f"Cannot open USB printer: {e}", context=context) from e
        except PrinterIOError:
            usb_context.close()
            raise

        timeout_ms = 0 if timeout is None else max(1, int(timeout * 1000))
        session = _NativeSession(usb1, usb_context, handle, interface, out_ep, in_ep, timeout_ms)
        driver = cls(SharedHandle(session, _NativeSession.release, label=name), name)
        driver.io_errors = (usb1.USBError, OSError)
        logger.info("Opened %s (out 0x%02X, in %s)", name, out_ep, in_ep)
        return driver

    @property
    def _session(self) -> _NativeSession:
        return self._handle.resource

    def _transfer(self, endpoint: int, buffer: Any) -> Any:
        """Submit one bulk transfer and pump events until it finishes."""
        session = self._session
        transfer = session.handle.getTransfer()
        try:
            transfer.setBulk(endpoint, buffer, timeout=session.timeout_ms)
            transfer.submit()
            while transfer.isSubmitted():
                session.context.handleEventsTimeout(tv=_EVENT_POLL_SECONDS)
            status = transfer.getStatus()
            if status != session.usb1.TRANSFER_COMPLETED:
                raise PrinterIOError(
                    f"{self.name}: transfer ended with status {status}",
                    context={"driver": self.name, "endpoint": f"0x{endpoint:02X}"},
                )
            length = transfer.getActualLength()
            if endpoint & _ENDPOINT_IN:
                return bytes(transfer.getBuffer()[:length])
            return length
        finally:
            transfer.close()

    def _write_chunk(self, data: memoryview) -> int:
        return self._transfer(self._session.out_endpoint, bytearray(data))

    def _read(self, size: int) -> bytes:
        in_endpoint = self._session.in_endpoint
        if in_endpoint is None:
            raise PrinterIOError(f"{self.name} has no bulk IN endpoint", context={"driver": self.name})
        return self._transfer(in_endpoint, size)
