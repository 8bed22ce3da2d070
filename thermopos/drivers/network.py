"""TCP/IP driver for printers listening on a raw port (9100 by default)."""

from __future__ import annotations

import logging
import socket
from operator import methodcaller
from typing import Final, Optional

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_PORT", "NetworkDriver"]

DEFAULT_PORT: Final[int] = 9100


class NetworkDriver(Driver):
    """
    Socket transport.

    Example:
        >>> with NetworkDriver.open("192.168.1.50", timeout=5.0) as driver:
        ...     driver.write(b"\\x1b@")
    """

    @classmethod
    def open(cls, host: str, port: int = DEFAULT_PORT, timeout: Optional[float] = None) -> "NetworkDriver":
        """
        Connect to ``host:port``.

        Args:
            host: Printer address.
            port: Raw printing port.
            timeout: Seconds for connect, send and receive; None blocks.

        Raises:
            PrinterIOError: If the connection cannot be established.
        """
        name = f"network {host}:{port}"
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise PrinterIOError(
                f"Cannot connect to {host}:{port}: {e}",
                context={"host": host, "port": port, "timeout": timeout},
            ) from e
        logger.info("Connected to printer at %s:%d", host, port)
        return cls(SharedHandle(sock, methodcaller("close"), label=name), name)

    def _write_chunk(self, data: memoryview) -> int:
        return self._handle.resource.send(data)

    def _read(self, size: int) -> bytes:
        data = self._handle.resource.recv(size)
        if not data:
            raise PrinterIOError(
                f"{self.name}: connection closed by printer",
                context={"driver": self.name},
            )
        return data
