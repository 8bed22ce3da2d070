"""
Driver interface and reference-counted device handles.

A Driver owns one SharedHandle. ``clone()`` returns a second Driver on the
same handle and bumps its reference count; the device is released when the
last clone is closed. Clones are not serialised against each other: two
threads writing through clones of one handle may interleave their bytes.

Library specific exceptions raised while talking to the device are converted
to PrinterIOError (chained with ``raise ... from``) by ``_translate_errors``.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Tuple, Type

from thermopos.errors import PrinterError, PrinterIOError

logger = logging.getLogger(__name__)

__all__ = [
    "SharedHandle",
    "Driver",
]


class SharedHandle:
    """
    Device object plus the callable that releases it.

    Args:
        resource: Socket, pyusb device, serial port, ...
        release: Called once with ``resource`` when the count drops to zero.
        label: Name used in log messages.
    """

    def __init__(
        self,
        resource: Any,
        release: Optional[Callable[[Any], None]] = None,
        label: str = "device",
    ) -> None:
        self._resource = resource
        self._release = release
        self._label = label
        self._refcount = 1

    @property
    def refcount(self) -> int:
        return self._refcount

    @property
    def closed(self) -> bool:
        return self._refcount == 0

    @property
    def resource(self) -> Any:
        if self.closed:
            raise PrinterIOError(f"{self._label} is closed", context={"device": self._label})
        return self._resource

    def acquire(self) -> "SharedHandle":
        if self.closed:
            raise PrinterIOError(
                f"Cannot share {self._label}: already released",
                context={"device": self._label},
            )
        self._refcount += 1
        return self

    def release(self) -> None:
        if self.closed:
            return
        self._refcount -= 1
        if self._refcount == 0:
            logger.debug("Releasing %s", self._label)
            if self._release is not None:
                self._release(self._resource)


class Driver(ABC):
    """
    Byte transport to one printer.

    Subclasses implement ``_write_chunk``, ``_read`` and optionally
    ``_flush``; the public methods add closed checks, the partial write
    loop and error translation.
    """

    io_errors: Tuple[Type[BaseException], ...] = (OSError,)
    """Exceptions converted to PrinterIOError."""

    def __init__(self, handle: SharedHandle, name: str) -> None:
        self._handle = handle
        self._name = name
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self._name!r} {state}>"

    # -- hooks ----------------------------------------------------------------

    @abstractmethod
    def _write_chunk(self, data: memoryview) -> int:
        """Write some of ``data`` and return how many bytes were accepted."""

    @abstractmethod
    def _read(self, size: int) -> bytes:
        """Read up to ``size`` bytes."""

    def _flush(self) -> None:
        return None

    # -- public API -----------------------------------------------------------

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except PrinterError:
            raise
        except self.io_errors as e:
            raise PrinterIOError(
                f"{action} failed on {self._name}: {e}",
                context={"driver": self._name},
            ) from e

    def _ensure_open(self) -> None:
        if self._closed:
            raise PrinterIOError(f"{self._name} is closed", context={"driver": self._name})

    def write(self, data: bytes) -> None:
        """
        Write all of ``data``.

        Partial writes are retried from the first unsent byte.

        Raises:
            PrinterIOError: On any transport failure or when the device
                stops accepting data.
        """
        self._ensure_open()
        view = memoryview(bytes(data))
        total = len(view)
        offset = 0
        while offset < total:
            with self._translate_errors("write"):
                written = self._write_chunk(view[offset:])
            if not written:
                raise PrinterIOError(
                    f"{self._name} accepted no data",
                    context={"driver": self._name, "sent": offset, "total": total},
                )
            offset += written
        logger.debug("%s: wrote %d bytes", self._name, total)

    def read(self, size: int = 1) -> bytes:
        """
        Read up to ``size`` bytes.

        Raises:
            PrinterIOError: On transport failure or when nothing arrives
                before the timeout.
        """
        self._ensure_open()
        if size < 1:
            raise ValueError("size must be >= 1")
        with self._translate_errors("read"):
            data = self._read(size)
        if not data:
            raise PrinterIOError(
                f"No data received from {self._name}",
                context={"driver": self._name, "size": size},
            )
        logger.debug("%s: read %d bytes", self._name, len(data))
        return bytes(data)

    def flush(self) -> None:
        self._ensure_open()
        with self._translate_errors("flush"):
            self._flush()

    def clone(self) -> "Driver":
        """Second driver on the same device handle."""
        self._ensure_open()
        twin = copy.copy(self)
        twin._handle = self._handle.acquire()
        twin._closed = False
        return twin

    def close(self) -> None:
        """Release this reference; the device closes with the last clone."""
        if self._closed:
            return
        self._closed = True
        with self._translate_errors("close"):
            self._handle.release()

    def __enter__(self) -> "Driver":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
