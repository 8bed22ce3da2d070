import logging
from typing import List
from unittest.mock import Mock

import pytest

from thermopos.drivers.base import Driver, SharedHandle
from thermopos.errors import PrinterIOError, ValidationError


class ChunkedDriver(Driver):
    """Accepts at most ``chunk`` bytes per write."""

    def __init__(self, handle: SharedHandle, chunk: int = 3) -> None:
        super().__init__(handle, "chunked")
        self.chunk = chunk
        self.calls: List[bytes] = []
        self.incoming = b""

    def _write_chunk(self, data: memoryview) -> int:
        piece = bytes(data[: self.chunk])
        self.calls.append(piece)
        return len(piece)

    def _read(self, size: int) -> bytes:
        data, self.incoming = self.incoming[:size], self.incoming[size:]
        return data


class FailingDriver(ChunkedDriver):
    def __init__(self, handle: SharedHandle, error: BaseException) -> None:
        super().__init__(handle)
        self.error = error

    def _write_chunk(self, data: memoryview) -> int:
        raise self.error

    def _read(self, size: int) -> bytes:
        raise self.error

    def _flush(self) -> None:
        raise self.error


class TestSharedHandle:
    def test_release_at_zero(self) -> None:
        release = Mock()
        handle = SharedHandle("dev", release, label="test device")
        handle.acquire()
        assert handle.refcount == 2

        handle.release()
        release.assert_not_called()
        handle.release()
        release.assert_called_once_with("dev")
        assert handle.closed

    def test_release_is_idempotent(self) -> None:
        release = Mock()
        handle = SharedHandle("dev", release)
        handle.release()
        handle.release()
        release.assert_called_once()

    def test_resource_after_close(self) -> None:
        handle = SharedHandle("dev")
        handle.release()
        with pytest.raises(PrinterIOError, match="closed"):
            handle.resource

    def test_acquire_after_close(self) -> None:
        handle = SharedHandle("dev")
        handle.release()
        with pytest.raises(PrinterIOError):
            handle.acquire()


class TestWrite:
    def test_partial_writes_are_retried(self) -> None:
        driver = ChunkedDriver(SharedHandle(None), chunk=3)
        driver.write(b"abcdefgh")
        assert driver.calls == [b"abc", b"def", b"gh"]

    def test_empty_write(self) -> None:
        driver = ChunkedDriver(SharedHandle(None))
        driver.write(b"")
        assert driver.calls == []

    def test_zero_bytes_accepted(self) -> None:
        driver = ChunkedDriver(SharedHandle(None), chunk=0)
        with pytest.raises(PrinterIOError, match="accepted no data"):
            driver.write(b"abc")

    def test_os_error_wrapped(self) -> None:
        error = BrokenPipeError("pipe")
        driver = FailingDriver(SharedHandle(None), error)
        with pytest.raises(PrinterIOError, match="write failed on chunked") as exc_info:
            driver.write(b"x")
        assert exc_info.value.__cause__ is error

    def test_printer_errors_pass_through(self) -> None:
        driver = FailingDriver(SharedHandle(None), ValidationError("bad"))
        with pytest.raises(ValidationError):
            driver.write(b"x")

    def test_other_errors_not_wrapped(self) -> None:
        driver = FailingDriver(SharedHandle(None), KeyError("k"))
        with pytest.raises(KeyError):
            driver.write(b"x")

    def test_write_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        driver = ChunkedDriver(SharedHandle(None))
        with caplog.at_level(logging.DEBUG, logger="thermopos.drivers.base"):
            driver.write(b"abcd")
        assert "wrote 4 bytes" in caplog.text


class TestRead:
    def test_read(self) -> None:
        driver = ChunkedDriver(SharedHandle(None))
        driver.incoming = b"\x12\x16"
        assert driver.read() == b"\x12"
        assert driver.read(5) == b"\x16"

    def test_nothing_received(self) -> None:
        driver = ChunkedDriver(SharedHandle(None))
        with pytest.raises(PrinterIOError, match="No data received"):
            driver.read()

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            ChunkedDriver(SharedHandle(None)).read(0)

    def test_error_wrapped(self) -> None:
        driver = FailingDriver(SharedHandle(None), TimeoutError("timed out"))
        with pytest.raises(PrinterIOError, match="read failed"):
            driver.read()

    def test_flush_error_wrapped(self) -> None:
        driver = FailingDriver(SharedHandle(None), OSError("gone"))
        with pytest.raises(PrinterIOError, match="flush failed"):
            driver.flush()


class TestLifecycle:
    def test_clone_shares_handle(self) -> None:
        release = Mock()
        driver = ChunkedDriver(SharedHandle("dev", release))
        twin = driver.clone()
        assert twin is not driver
        assert twin._handle is driver._handle
        assert driver._handle.refcount == 2

        driver.close()
        release.assert_not_called()
        twin.write(b"ok")

        twin.close()
        release.assert_called_once_with("dev")

    def test_close_is_idempotent(self) -> None:
        release = Mock()
        driver = ChunkedDriver(SharedHandle("dev", release))
        driver.close()
        driver.close()
        release.assert_called_once()
        assert driver.closed

    def test_closed_driver_rejects_io(self) -> None:
        driver = ChunkedDriver(SharedHandle(None))
        driver.close()
        with pytest.raises(PrinterIOError, match="closed"):
            driver.write(b"x")
        with pytest.raises(PrinterIOError):
            driver.read()
        with pytest.raises(PrinterIOError):
            driver.flush()
        with pytest.raises(PrinterIOError):
            driver.clone()

    def test_release_error_wrapped(self) -> None:
        driver = ChunkedDriver(SharedHandle("dev", Mock(side_effect=OSError("busy"))))
        with pytest.raises(PrinterIOError, match="close failed"):
            driver.close()

    def test_context_manager(self) -> None:
        release = Mock()
        with ChunkedDriver(SharedHandle("dev", release)) as driver:
            driver.write(b"x")
        release.assert_called_once()

    def test_repr(self) -> None:
        driver = ChunkedDriver(SharedHandle(None))
        assert repr(driver) == "<ChunkedDriver 'chunked' open>"
        driver.close()
        assert "closed" in repr(driver)
