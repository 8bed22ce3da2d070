import sys
import types
from typing import Iterator, List
from unittest.mock import MagicMock, Mock, patch

import pytest

from thermopos.drivers import NativeUsbDriver
from thermopos.errors import PrinterIOError

TRANSFER_COMPLETED = 0
TRANSFER_TIMED_OUT = 2


class FakeUSBError(Exception):
    pass


class FakeUSBErrorNotSupported(FakeUSBError):
    pass


class FakeTransfer:
    """Completes after one event loop iteration."""

    def __init__(self, status: int = TRANSFER_COMPLETED, response: bytes = b"") -> None:
        self.status = status
        self.response = response
        self.submitted = False
        self.closed = False
        self.endpoint = None
        self.buffer: object = None
        self.timeout = None

    def setBulk(self, endpoint: int, buffer: object, timeout: int = 0) -> None:
        self.endpoint = endpoint
        self.buffer = buffer
        self.timeout = timeout

    def submit(self) -> None:
        self.submitted = True

    def isSubmitted(self) -> bool:
        return self.submitted

    def getStatus(self) -> int:
        return self.status

    def getActualLength(self) -> int:
        if isinstance(self.buffer, int):
            return len(self.response)
        return len(self.buffer)  # type: ignore[arg-type]

    def getBuffer(self) -> bytearray:
        return bytearray(self.response)

    def close(self) -> None:
        self.closed = True


def _endpoint(address: int, attributes: int = 0x02) -> Mock:
    return Mock(getAddress=Mock(return_value=address), getAttributes=Mock(return_value=attributes))


def _setting(number: int, endpoints: List[Mock]) -> MagicMock:
    setting = MagicMock()
    setting.getNumber.return_value = number
    setting.__iter__.return_value = iter(endpoints)
    return setting


@pytest.fixture
def queued() -> List[FakeTransfer]:
    """Transfers handed out before default ones are created."""
    return []


@pytest.fixture
def transfers() -> List[FakeTransfer]:
    """Every transfer the driver obtained, in order."""
    return []


@pytest.fixture
def usb_handle(queued: List[FakeTransfer], transfers: List[FakeTransfer]) -> MagicMock:
    handle = MagicMock()
    handle.kernelDriverActive.return_value = False
    handle.getDevice.return_value.iterSettings.return_value = [
        _setting(0, [_endpoint(0x81, 0x03), _endpoint(0x82), _endpoint(0x01)]),
    ]

    def get_transfer() -> FakeTransfer:
        transfer = queued.pop(0) if queued else FakeTransfer()
        transfers.append(transfer)
        return transfer

    handle.getTransfer.side_effect = get_transfer
    return handle


@pytest.fixture
def usb_context(usb_handle: MagicMock, transfers: List[FakeTransfer]) -> MagicMock:
    context = MagicMock()
    context.openByVendorIDAndProductID.return_value = usb_handle

    def pump(tv: float = 0) -> None:
        for transfer in transfers:
            transfer.submitted = False

    context.handleEventsTimeout.side_effect = pump
    return context


@pytest.fixture
def usb1_module(usb_context: MagicMock) -> Iterator[types.ModuleType]:
    module = types.ModuleType("usb1")
    module.USBContext = MagicMock(return_value=usb_context)  # type: ignore[attr-defined]
    module.USBError = FakeUSBError  # type: ignore[attr-defined]
    module.USBErrorNotSupported = FakeUSBErrorNotSupported  # type: ignore[attr-defined]
    module.TRANSFER_COMPLETED = TRANSFER_COMPLETED  # type: ignore[attr-defined]
    with patch.dict(sys.modules, {"usb1": module}):
        yield module


class TestOpen:
    def test_open_claims_interface(self, usb1_module: types.ModuleType, usb_handle: MagicMock) -> None:
        driver = NativeUsbDriver.open(0x04B8, 0x0202)
        usb_handle.claimInterface.assert_called_once_with(0)
        assert driver.name == "native-usb 04b8:0202"

    def test_not_found(self, usb1_module: types.ModuleType, usb_context: MagicMock) -> None:
        usb_context.openByVendorIDAndProductID.return_value = None
        with pytest.raises(PrinterIOError, match="USB printer not found"):
            NativeUsbDriver.open(0x04B8, 0x0202)
        usb_context.close.assert_called_once_with()

    def test_libusb_error(self, usb1_module: types.ModuleType, usb_handle: MagicMock, usb_context: MagicMock) -> None:
        usb_handle.claimInterface.side_effect = FakeUSBError("LIBUSB_ERROR_BUSY")
        with pytest.raises(PrinterIOError, match="Cannot open USB printer"):
            NativeUsbDriver.open(0x04B8, 0x0202)
        usb_context.close.assert_called_once_with()

    def test_detach_not_supported(self, usb1_module: types.ModuleType, usb_handle: MagicMock) -> None:
        usb_handle.kernelDriverActive.side_effect = FakeUSBErrorNotSupported()
        NativeUsbDriver.open(0x04B8, 0x0202)
        usb_handle.claimInterface.assert_called_once()

    def test_no_out_endpoint(self, usb1_module: types.ModuleType, usb_handle: MagicMock) -> None:
        usb_handle.getDevice.return_value.iterSettings.return_value = [_setting(0, [_endpoint(0x82)])]
        with pytest.raises(PrinterIOError, match="no bulk OUT endpoint"):
            NativeUsbDriver.open(0x04B8, 0x0202)

    def test_library_missing(self) -> None:
        with patch.dict(sys.modules, {"usb1": None}):
            with pytest.raises(PrinterIOError, match="libusb1 is not available"):
                NativeUsbDriver.open(0x04B8, 0x0202)


class TestTransfers:
    @pytest.fixture
    def driver(self, usb1_module: types.ModuleType) -> NativeUsbDriver:
        return NativeUsbDriver.open(0x04B8, 0x0202, timeout=1.0)

    def test_write_uses_bulk_out(self, driver: NativeUsbDriver, transfers: List[FakeTransfer]) -> None:
        driver.write(b"\x1b@")
        (transfer,) = transfers
        assert transfer.endpoint == 0x01
        assert bytes(transfer.buffer) == b"\x1b@"  # type: ignore[arg-type]
        assert transfer.timeout == 1000
        assert transfer.closed

    def test_read_uses_bulk_in(
        self, driver: NativeUsbDriver, queued: List[FakeTransfer], transfers: List[FakeTransfer]
    ) -> None:
        queued.append(FakeTransfer(response=b"\x12"))
        assert driver.read() == b"\x12"
        assert transfers[0].endpoint == 0x82

    def test_failed_transfer(
        self, driver: NativeUsbDriver, queued: List[FakeTransfer], transfers: List[FakeTransfer]
    ) -> None:
        queued.append(FakeTransfer(status=TRANSFER_TIMED_OUT))
        with pytest.raises(PrinterIOError, match="transfer ended with status 2"):
            driver.write(b"x")
        assert transfers[0].closed

    def test_close_releases_everything(
        self, driver: NativeUsbDriver, usb_handle: MagicMock, usb_context: MagicMock
    ) -> None:
        driver.close()
        usb_handle.releaseInterface.assert_called_once_with(0)
        usb_handle.close.assert_called_once_with()
        usb_context.close.assert_called_once_with()
