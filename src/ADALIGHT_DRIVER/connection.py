# src/ADALIGHT_DRIVER/connection.py
"""
Connection manager for one Adalight device.

Owns the DeviceConfig, the ConnectionState and the transport handle.
The host frame loop calls, in order and never concurrently:

  initialize(settings)   once, on attach
  sync_config(settings)  every frame
  render_frame(source)   every frame
  shutdown()             once, on detach

No transport failure ever propagates out of these calls; a missing or
unplugged device only ever shows up as is_open == False and a log line.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ADALIGHT_DRIVER.adalight_protocol import encode_blackout, encode_frame
from ADALIGHT_DRIVER.color import ColorSource
from ADALIGHT_DRIVER.defaults import (
    RECONNECT_INITIAL_DELAY_SECONDS,
    RECONNECT_MAX_DELAY_SECONDS,
    RECONNECT_MULTIPLIER,
)
from ADALIGHT_DRIVER.geometry import VERTICAL_STRIP, DeviceVariant
from ADALIGHT_DRIVER.settings import DeviceConfig
from ADALIGHT_DRIVER.transport import Transport, TransportResult

log = logging.getLogger(__name__)

OPEN, WRITE, CLOSE = "open", "write", "close"


@dataclass(frozen=True)
class ConnectionState:
    is_open: bool = False


def next_state(state: ConnectionState, operation: str, result: TransportResult) -> ConnectionState:
    """
    Closed --open ok--> Open; any failure or a close --> Closed.
    A close always ends Closed, even when the transport reported an error.
    """
    if operation == OPEN:
        return ConnectionState(is_open=result.ok)
    if operation == WRITE:
        return ConnectionState(is_open=state.is_open and result.ok)
    if operation == CLOSE:
        return ConnectionState(is_open=False)
    raise ValueError(f"unknown transport operation {operation!r}")


class ReconnectPolicy:
    """
    Exponential backoff for the silent reconnect in render_frame.

    After each failed open the next attempt waits initial_delay, then
    doubles (multiplier) up to max_delay. Any successful open resets it.
    """

    def __init__(
        self,
        initial_delay: float = RECONNECT_INITIAL_DELAY_SECONDS,
        max_delay: float = RECONNECT_MAX_DELAY_SECONDS,
        multiplier: float = RECONNECT_MULTIPLIER,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.clock = clock
        self.reset()

    def reset(self) -> None:
        self.current_delay = self.initial_delay
        self.next_attempt_time = None

    def should_attempt(self) -> bool:
        return self.next_attempt_time is None or self.clock() >= self.next_attempt_time

    def record_failure(self) -> None:
        self.next_attempt_time = self.clock() + self.current_delay
        self.current_delay = min(self.max_delay, self.current_delay * self.multiplier)


class ConnectionManager:
    def __init__(self, transport: Transport, variant: DeviceVariant = VERTICAL_STRIP, reconnect_policy: ReconnectPolicy = None):
        self.transport = transport
        self.variant = variant
        self.reconnect_policy = reconnect_policy or ReconnectPolicy()
        self.config = DeviceConfig(led_count=variant.default_led_count)
        self.state = ConnectionState()
        self.is_shut_down = False
        self.last_packet = None

    @property
    def is_open(self) -> bool:
        return self.state.is_open

    # ---------- transport wrappers ----------
    def _open(self, *, quiet: bool = False) -> bool:
        result = self.transport.open(self.config.port, self.config.baud_rate)
        self.state = next_state(self.state, OPEN, result)
        if result.ok:
            self.reconnect_policy.reset()
            log.info("Serial port %s opened at %d baud", self.config.port, self.config.baud_rate)
        else:
            self.reconnect_policy.record_failure()
            level = logging.DEBUG if quiet else logging.WARNING
            log.log(level, "Failed to open serial port %s: %s", self.config.port, result.error)
        return result.ok

    def _close(self) -> None:
        result = self.transport.close()
        self.state = next_state(self.state, CLOSE, result)
        if not result.ok:
            log.warning("Error closing serial port %s: %s", self.config.port, result.error)

    def _write(self, packet: bytes) -> TransportResult:
        result = self.transport.write(packet)
        self.state = next_state(self.state, WRITE, result)
        if result.ok:
            self.last_packet = packet
        return result

    def _reopen(self, reason: str) -> None:
        self._close()
        if self._open():
            log.info("Serial port reopened with new %s", reason)

    # ---------- lifecycle ----------
    def initialize(self, settings: Mapping[str, Any]) -> bool:
        self.is_shut_down = False
        self.config = DeviceConfig.from_settings(settings, self.variant.default_led_count)
        log.info("Initializing Adalight on %s at %d baud", self.config.port, self.config.baud_rate)
        log.info("LED count: %d", self.config.led_count)
        return self._open()

    def sync_config(self, settings: Mapping[str, Any]) -> None:
        """
        Reconcile with the host's latest settings.

        LED count is payload only. Baud rate and port identify the
        connection, so changing either reopens an open port; a port
        change while closed tries a fresh open.
        """
        latest = DeviceConfig.from_settings(settings, self.variant.default_led_count)

        if latest.led_count != self.config.led_count:
            self.config.led_count = latest.led_count
            log.info("LED count changed to: %d", self.config.led_count)

        if latest.baud_rate != self.config.baud_rate:
            self.config.baud_rate = latest.baud_rate
            log.info("Baud rate changed to: %d", self.config.baud_rate)
            if self.is_open:
                self._reopen("baud rate")

        if latest.port != self.config.port:
            self.config.port = latest.port
            log.info("Serial port changed to: %s", self.config.port)
            if self.is_open:
                self._reopen("port")
            else:
                self._open()

    def render_frame(self, color_source: ColorSource) -> bool:
        """Send one frame. Returns True when a packet went out."""
        if not self.is_open:
            if self.is_shut_down or not self.reconnect_policy.should_attempt():
                return False
            if not self._open(quiet=True):
                return False

        packet = encode_frame(self.config.led_count, color_source, self.variant.geometry.map_index)
        result = self._write(packet)
        if not result.ok:
            log.error("Error sending Adalight data to %s: %s", self.config.port, result.error)
        return result.ok

    def shutdown(self) -> None:
        """Blackout, then close. Ends Closed whatever the transport says."""
        self.is_shut_down = True
        if not self.is_open:
            return

        result = self._write(encode_blackout(self.config.led_count))
        if not result.ok:
            log.error("Error in blackout on %s: %s", self.config.port, result.error)

        self._close()
