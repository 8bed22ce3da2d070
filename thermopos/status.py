"""
Real-time status response decoding.

A DLE EOT response is a single byte whose meaning depends on the request
that produced it, so a byte is always decoded together with its
RealTimeStatusRequest. Bits are numbered from the least significant (bit 0).

Every valid response has the fixed pattern 0xx1xx10: bit 0 = 0, bit 1 = 1,
bit 4 = 1, bit 7 = 0. Strict decoding (the default) rejects bytes that do not
match; ``strict=False`` skips the check.

Flag tables (flag is True when every listed bit has the listed value):

    PRINTER             DRAWER_KICK_OUT_CONNECTOR_PIN3_LOW     bit2 = 0
                        ONLINE                                 bit3 = 0
                        WAITING_FOR_ONLINE_RECOVERY            bit5 = 1
                        PAPER_FEED_BUTTON_PRESSED              bit6 = 1
    OFFLINE_CAUSE       COVER_CLOSED                           bit2 = 0
                        PAPER_FED_BY_PAPER_FEED_BUTTON         bit3 = 1
                        PRINTING_STOPS_DUE_TO_PAPER_END        bit5 = 1
                        ERROR_OCCURRED                         bit6 = 1
    ERROR_CAUSE         RECOVERABLE_ERROR_OCCURRED             bit2 = 1
                        AUTOCUTTER_ERROR_OCCURRED              bit3 = 1
                        UNRECOVERABLE_ERROR_OCCURRED           bit5 = 1
                        AUTO_RECOVERABLE_ERROR_OCCURRED        bit6 = 1
    ROLL_PAPER_SENSOR   ROLL_PAPER_NEAR_END_SENSOR_PAPER_ADEQUATE  bit2 = bit3 = 0
                        ROLL_PAPER_END_SENSOR_PAPER_PRESENT        bit5 = bit6 = 0
    INK_A               INK_NEAR_END_DETECTED                  bit2 = 1
                        INK_END_DETECTED                       bit3 = 1
                        INK_CARTRIDGE_DETECTED                 bit5 = 0
                        CLEANING_PERFORMED                     bit6 = 1
    INK_B               same as INK_A without CLEANING_PERFORMED
    PEELER              WAITING_FOR_LABEL_TO_BE_REMOVED        bit2 = 1
                        PAPER_PRESENT_IN_LABEL_PEELING_DETECTOR  bit5 = 0
    INTERFACE           PRINTING_MULTIPLE_INTERFACES_ENABLED   bit2 = 1
    DMD                 DMD_TRANSMISSION_STATUS_READY          bit2 = 0

Reference: Epson ESC/POS Command Reference, DLE EOT
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Final, Iterator, Tuple

from thermopos.errors import ProtocolError
from thermopos.protocol.status import RealTimeStatusRequest

logger = logging.getLogger(__name__)

__all__ = [
    "RealTimeStatusFlag",
    "StatusResponse",
    "is_pattern_valid",
    "decode",
]


class RealTimeStatusFlag(Enum):
    # Printer status
    DRAWER_KICK_OUT_CONNECTOR_PIN3_LOW = "drawer_kick_out_connector_pin3_low"
    ONLINE = "online"
    WAITING_FOR_ONLINE_RECOVERY = "waiting_for_online_recovery"
    PAPER_FEED_BUTTON_PRESSED = "paper_feed_button_pressed"
    # Offline cause
    COVER_CLOSED = "cover_closed"
    PAPER_FED_BY_PAPER_FEED_BUTTON = "paper_fed_by_paper_feed_button"
    PRINTING_STOPS_DUE_TO_PAPER_END = "printing_stops_due_to_paper_end"
    ERROR_OCCURRED = "error_occurred"
    # Error cause
    RECOVERABLE_ERROR_OCCURRED = "recoverable_error_occurred"
    AUTOCUTTER_ERROR_OCCURRED = "autocutter_error_occurred"
    UNRECOVERABLE_ERROR_OCCURRED = "unrecoverable_error_occurred"
    AUTO_RECOVERABLE_ERROR_OCCURRED = "auto_recoverable_error_occurred"
    # Roll paper sensor
    ROLL_PAPER_NEAR_END_SENSOR_PAPER_ADEQUATE = "roll_paper_near_end_sensor_paper_adequate"
    ROLL_PAPER_END_SENSOR_PAPER_PRESENT = "roll_paper_end_sensor_paper_present"
    # Ink A / B
    INK_NEAR_END_DETECTED = "ink_near_end_detected"
    INK_END_DETECTED = "ink_end_detected"
    INK_CARTRIDGE_DETECTED = "ink_cartridge_detected"
    CLEANING_PERFORMED = "cleaning_performed"
    # Peeler
    WAITING_FOR_LABEL_TO_BE_REMOVED = "waiting_for_label_to_be_removed"
    PAPER_PRESENT_IN_LABEL_PEELING_DETECTOR = "paper_present_in_label_peeling_detector"
    # Interface
    PRINTING_MULTIPLE_INTERFACES_ENABLED = "printing_multiple_interfaces_enabled"
    # DM-D
    DMD_TRANSMISSION_STATUS_READY = "dmd_transmission_status_ready"


# (flag, bit positions, required bit value)
_Rule = Tuple[RealTimeStatusFlag, Tuple[int, ...], int]

_F = RealTimeStatusFlag
_INK_RULES: Final[Tuple[_Rule, ...]] = (
    (_F.INK_NEAR_END_DETECTED, (2,), 1),
    (_F.INK_END_DETECTED, (3,), 1),
    (_F.INK_CARTRIDGE_DETECTED, (5,), 0),
)

_BIT_TABLE: Final[Dict[RealTimeStatusRequest, Tuple[_Rule, ...]]] = {
    RealTimeStatusRequest.PRINTER: (
        (_F.DRAWER_KICK_OUT_CONNECTOR_PIN3_LOW, (2,), 0),
        (_F.ONLINE, (3,), 0),
        (_F.WAITING_FOR_ONLINE_RECOVERY, (5,), 1),
        (_F.PAPER_FEED_BUTTON_PRESSED, (6,), 1),
    ),
    RealTimeStatusRequest.OFFLINE_CAUSE: (
        (_F.COVER_CLOSED, (2,), 0),
        (_F.PAPER_FED_BY_PAPER_FEED_BUTTON, (3,), 1),
        (_F.PRINTING_STOPS_DUE_TO_PAPER_END, (5,), 1),
        (_F.ERROR_OCCURRED, (6,), 1),
    ),
    RealTimeStatusRequest.ERROR_CAUSE: (
        (_F.RECOVERABLE_ERROR_OCCURRED, (2,), 1),
        (_F.AUTOCUTTER_ERROR_OCCURRED, (3,), 1),
        (_F.UNRECOVERABLE_ERROR_OCCURRED, (5,), 1),
        (_F.AUTO_RECOVERABLE_ERROR_OCCURRED, (6,), 1),
    ),
    RealTimeStatusRequest.ROLL_PAPER_SENSOR: (
        (_F.ROLL_PAPER_NEAR_END_SENSOR_PAPER_ADEQUATE, (2, 3), 0),
        (_F.ROLL_PAPER_END_SENSOR_PAPER_PRESENT, (5, 6), 0),
    ),
    RealTimeStatusRequest.INK_A: _INK_RULES + ((_F.CLEANING_PERFORMED, (6,), 1),),
    RealTimeStatusRequest.INK_B: _INK_RULES,
    RealTimeStatusRequest.PEELER: (
        (_F.WAITING_FOR_LABEL_TO_BE_REMOVED, (2,), 1),
        (_F.PAPER_PRESENT_IN_LABEL_PEELING_DETECTOR, (5,), 0),
    ),
    RealTimeStatusRequest.INTERFACE: ((_F.PRINTING_MULTIPLE_INTERFACES_ENABLED, (2,), 1),),
    RealTimeStatusRequest.DMD: ((_F.DMD_TRANSMISSION_STATUS_READY, (2,), 0),),
}


def _bit(value: int, position: int) -> int:
    return (value >> position) & 1


def is_pattern_valid(value: int) -> bool:
    """True when ``value`` matches 0xx1xx10."""
    return (value & 0b10010011) == 0b00010010


@dataclass(frozen=True)
class StatusResponse(Mapping):
    """
    Decoded status: a read-only mapping of RealTimeStatusFlag to bool.

    Attributes:
        request: Request kind the byte answered.
        raw: Response byte.
    """

    request: RealTimeStatusRequest
    raw: int
    flags: Dict[RealTimeStatusFlag, bool] = field(default_factory=dict)

    def __getitem__(self, flag: RealTimeStatusFlag) -> bool:
        return self.flags[flag]

    def __iter__(self) -> Iterator[RealTimeStatusFlag]:
        return iter(self.flags)

    def __len__(self) -> int:
        return len(self.flags)

    def as_dict(self) -> Dict[str, bool]:
        """Flags keyed by their snake_case names."""
        return {flag.value: state for flag, state in self.flags.items()}

    def __str__(self) -> str:
        active = ", ".join(flag.value for flag, state in self.flags.items() if state) or "none"
        return f"{self.request.name} status 0b{self.raw:08b} (true: {active})"


def decode(request: RealTimeStatusRequest, response: int, strict: bool = True) -> StatusResponse:
    """
    Decode one response byte for ``request``.

    Args:
        request: Request kind that produced ``response``.
        response: Status byte, 0-255 (a one-byte bytes object is accepted).
        strict: Validate the fixed 0xx1xx10 bits.

    Returns:
        StatusResponse with every flag defined for ``request``.

    Raises:
        ProtocolError: Unknown request kind, value outside 0-255, or (strict)
            a byte that breaks the fixed pattern.

    Example:
        >>> status = decode(RealTimeStatusRequest.PRINTER, 0b00011010)
        >>> status[RealTimeStatusFlag.ONLINE]
        False
    """
    rules = _BIT_TABLE.get(request) if isinstance(request, RealTimeStatusRequest) else None
    if rules is None:
        raise ProtocolError(
            f"Unknown real-time status request {request!r}",
            context={"request": request},
        )

    if isinstance(response, (bytes, bytearray)):
        if len(response) != 1:
            raise ProtocolError(
                f"Status response must be exactly one byte, got {len(response)}",
                context={"request": request.name},
            )
        response = response[0]
    if not isinstance(response, int) or not 0 <= response <= 0xFF:
        raise ProtocolError(
            f"Status response must be a byte value, got {response!r}",
            context={"request": request.name},
        )

    if strict and not is_pattern_valid(response):
        raise ProtocolError(
            f"Invalid response pattern: {response:08b} (0xx1xx10 expected)",
            context={"request": request.name, "response": f"0x{response:02X}"},
        )

    flags = {
        flag: all(_bit(response, position) == expected for position in positions)
        for flag, positions, expected in rules
    }
    result = StatusResponse(request=request, raw=response, flags=flags)
    logger.debug("Decoded %s", result)
    return result
