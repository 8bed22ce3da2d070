"""Dry-run driver: records bytes in memory instead of printing them."""

from __future__ import annotations

import logging
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional, TextIO, Union

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.options import DebugMode, format_frame

logger = logging.getLogger(__name__)

__all__ = ["ConsoleDriver"]


@dataclass
class _ConsoleSink:
    written: bytearray = field(default_factory=bytearray)
    responses: Deque[bytes] = field(default_factory=deque)


class ConsoleDriver(Driver):
    """
    In-memory sink.

    Every write is appended to ``written``. With ``show_output`` each write
    is also dumped to ``stream`` (stdout by default) and logged at DEBUG. Reads are answered
    from responses queued with ``queue_response``, which makes the driver
    usable for status query round trips in tests.

    Example:
        >>> driver = ConsoleDriver.open(show_output=False)
        >>> driver.write(b"\\x1b@")
        >>> driver.written
        b'\\x1b@'
    """

    def __init__(
        self,
        handle: SharedHandle,
        show_output: bool,
        dump_mode: DebugMode,
        stream: Optional[TextIO],
    ) -> None:
        super().__init__(handle, "console")
        self.show_output = show_output
        self.dump_mode = dump_mode
        self._stream = stream

    @classmethod
    def open(
        cls,
        show_output: bool = True,
        dump_mode: DebugMode = DebugMode.HEX,
        stream: Optional[TextIO] = None,
    ) -> "ConsoleDriver":
        handle = SharedHandle(_ConsoleSink(), label="console")
        return cls(handle, show_output, dump_mode, stream)

    @property
    def _sink(self) -> _ConsoleSink:
        return self._handle.resource

    @property
    def written(self) -> bytes:
        """Everything written so far, by this driver and its clones."""
        return bytes(self._sink.written)

    def clear(self) -> None:
        self._sink.written.clear()

    def queue_response(self, data: Union[bytes, int]) -> None:
        """Queue bytes returned by the next ``read``."""
        if isinstance(data, int):
            data = bytes([data])
        self._sink.responses.append(bytes(data))

    def _write_chunk(self, data: memoryview) -> int:
        chunk = bytes(data)
        self._sink.written.extend(chunk)
        if self.show_output:
            dump = format_frame(chunk, self.dump_mode)
            logger.debug("%s wrote %d bytes: %s", self.name, len(chunk), dump)
            print(dump, file=self._stream or sys.stdout)
        return len(chunk)

    def _read(self, size: int) -> bytes:
        responses = self._sink.responses
        if not responses:
            return b""
        head = responses.popleft()
        if len(head) > size:
            responses.appendleft(head[size:])
            head = head[:size]
        return head
