"""Driver for device nodes (``/dev/usb/lp0``) and plain files."""

from __future__ import annotations

import logging
from operator import methodcaller
from pathlib import Path
from typing import Union

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError

logger = logging.getLogger(__name__)

__all__ = ["FileDriver"]


class FileDriver(Driver):
    """
    Unbuffered append-mode file transport.

    Writing to a regular file captures the job for later replay, e.g.
    ``cat receipt.bin > /dev/usb/lp0``.
    """

    @classmethod
    def open(cls, path: Union[str, Path]) -> "FileDriver":
        path = Path(path)
        name = f"file {path}"
        try:
            f = open(path, "a+b", buffering=0)
        except OSError as e:
            raise PrinterIOError(f"Cannot open {path}: {e}", context={"path": str(path)}) from e
        logger.info("Opened %s", path)
        return cls(SharedHandle(f, methodcaller("close"), label=name), name)

    def _write_chunk(self, data: memoryview) -> int:
        return self._handle.resource.write(data) or 0

    def _read(self, size: int) -> bytes:
        return self._handle.resource.read(size) or b""

    def _flush(self) -> None:
        self._handle.resource.flush()
