"""Serial (RS-232 / USB CDC) driver on pyserial."""

from __future__ import annotations

import logging
from operator import methodcaller
from typing import Optional

import serial

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError

logger = logging.getLogger(__name__)

__all__ = ["SerialPortDriver"]


class SerialPortDriver(Driver):
    """
    pyserial transport.

    Example:
        >>> driver = SerialPortDriver.open("/dev/ttyUSB0", baudrate=19200, timeout=2.0)
    """

    io_errors = (serial.SerialException, OSError)

    @classmethod
    def open(
        cls,
        port: str,
        baudrate: int = 9600,
        timeout: Optional[float] = None,
        bytesize: int = serial.EIGHTBITS,
        parity: str = serial.PARITY_NONE,
        stopbits: float = serial.STOPBITS_ONE,
    ) -> "SerialPortDriver":
        """
        Open ``port``.

        Args:
            port: Device name (``/dev/ttyUSB0``, ``COM3``).
            baudrate: Line speed.
            timeout: Read and write timeout in seconds; None blocks.
            bytesize: Data bits (5-8).
            parity: ``N``, ``E``, ``O``, ``M`` or ``S``.
            stopbits: 1, 1.5 or 2.

        Raises:
            PrinterIOError: If the port cannot be opened or a setting is rejected.
        """
        name = f"serial {port}"
        try:
            ser = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=bytesize,
                parity=parity,
                stopbits=stopbits,
                timeout=timeout,
                write_timeout=timeout,
            )
        except (serial.SerialException, ValueError) as e:
            raise PrinterIOError(
                f"Cannot open serial port {port}: {e}",
                context={"port": port, "baudrate": baudrate},
            ) from e
        logger.info("Opened %s at %d baud", port, baudrate)
        return cls(SharedHandle(ser, methodcaller("close"), label=name), name)

    def _write_chunk(self, data: memoryview) -> int:
        return self._handle.resource.write(data) or 0

    def _read(self, size: int) -> bytes:
        return self._handle.resource.read(size)

    def _flush(self) -> None:
        self._handle.resource.flush()
