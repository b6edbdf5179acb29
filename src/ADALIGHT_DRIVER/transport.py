# src/ADALIGHT_DRIVER/transport.py
"""
Serial transport for the Adalight driver.

Every operation returns a TransportResult instead of raising, so the
ConnectionManager can decide state transitions from the result alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import serial

from ADALIGHT_DRIVER.adalight_protocol import send_packet
from ADALIGHT_DRIVER.defaults import DEFAULT_WRITE_TIMEOUT_SECONDS

log = logging.getLogger(__name__)

# everything pyserial raises for a missing, busy or misconfigured port
TRANSPORT_ERRORS = (serial.SerialException, OSError, ValueError)


@dataclass(frozen=True)
class TransportResult:
    ok: bool
    error: Optional[BaseException] = None

    @classmethod
    def success(cls) -> "TransportResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException) -> "TransportResult":
        return cls(ok=False, error=error)


class Transport(Protocol):
    def open(self, port: str, baud_rate: int) -> TransportResult: ...
    def close(self) -> TransportResult: ...
    def write(self, data: bytes) -> TransportResult: ...


class SerialTransport:
    """
    pyserial-backed Transport.

    Writes are bounded by write_timeout; a timeout surfaces as a failed
    write (serial.SerialTimeoutException) rather than a stalled frame loop.
    """

    def __init__(self, write_timeout: float = DEFAULT_WRITE_TIMEOUT_SECONDS):
        self.write_timeout = write_timeout
        self._serial: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self, port: str, baud_rate: int) -> TransportResult:
        if self._serial is not None:
            # never hold two handles
            self.close()
        try:
            self._serial = serial.Serial(port, baudrate=baud_rate, timeout=0, write_timeout=self.write_timeout)
        except TRANSPORT_ERRORS as open_error:
            self._serial = None
            return TransportResult.failure(open_error)
        log.debug("Opened %s at %d baud", port, baud_rate)
        return TransportResult.success()

    def close(self) -> TransportResult:
        handle, self._serial = self._serial, None
        if handle is None:
            return TransportResult.success()
        try:
            handle.close()
        except TRANSPORT_ERRORS as close_error:
            return TransportResult.failure(close_error)
        return TransportResult.success()

    def write(self, data: bytes) -> TransportResult:
        if self._serial is None:
            return TransportResult.failure(serial.PortNotOpenError())
        try:
            send_packet(self._serial, data)
        except TRANSPORT_ERRORS as write_error:
            return TransportResult.failure(write_error)
        return TransportResult.success()
