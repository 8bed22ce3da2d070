"""
Real-time status request command (DLE EOT).

The printer answers DLE EOT immediately, even while busy or offline, with
one status byte. Which bits mean what depends on the request kind, see
thermopos.status.

Reference: Epson ESC/POS Command Reference, DLE EOT
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from thermopos.protocol.constants import DLE, EOT

__all__ = [
    "RealTimeStatusRequest",
    "real_time_status",
]


class RealTimeStatusRequest(Enum):
    """
    Status kinds as (n, a) pairs of DLE EOT n [a]. ``a`` is None for the
    single parameter forms.
    """

    PRINTER = (1, None)
    OFFLINE_CAUSE = (2, None)
    ERROR_CAUSE = (3, None)
    ROLL_PAPER_SENSOR = (4, None)
    INK_A = (7, 1)
    INK_B = (7, 2)
    PEELER = (8, 3)
    INTERFACE = (18, 1)
    DMD = (18, 2)

    def __init__(self, n: int, a: Optional[int]) -> None:
        self.n = n
        self.a = a


def real_time_status(request: RealTimeStatusRequest) -> bytes:
    """
    Transmit real-time status.

    Command: DLE EOT n [a]
    Hex: 10 04 n [a]

    Example:
        >>> real_time_status(RealTimeStatusRequest.PRINTER)
        b'\\x10\\x04\\x01'
        >>> real_time_status(RealTimeStatusRequest.INK_B)
        b'\\x10\\x04\\x07\\x02'
    """
    if not isinstance(request, RealTimeStatusRequest):
        raise TypeError(f"request must be RealTimeStatusRequest, got {type(request).__name__}")
    cmd = DLE + EOT + bytes([request.n])
    if request.a is not None:
        cmd += bytes([request.a])
    return cmd
