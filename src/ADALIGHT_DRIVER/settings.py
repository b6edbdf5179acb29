# src/ADALIGHT_DRIVER/settings.py
"""
Host-supplied settings: LED count, baud rate and serial port.

The host hands these over every frame as a plain mapping
({'led_count': ..., 'baud_rate': ..., 'port': ...}). Values are
untrusted: they are clamped or defaulted here before the
ConnectionManager ever sees them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from ADALIGHT_DRIVER.defaults import DEFAULT_BAUD_RATE, DEFAULT_PORT, MAX_LEDS, MIN_LEDS

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    tomllib = None

log = logging.getLogger(__name__)


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, float):
            # nan and inf are legal TOML floats
            return int(value) if math.isfinite(value) else None
        return int(str(value).strip())
    except (TypeError, ValueError, OverflowError):
        return None


def parse_led_count(value: Any, default: int) -> int:
    led_count = _parse_int(value)
    if led_count is None:
        led_count = default
    return max(MIN_LEDS, min(MAX_LEDS, led_count))


def parse_baud_rate(value: Any) -> int:
    # 0 is as unusable as garbage
    return _parse_int(value) or DEFAULT_BAUD_RATE


def parse_port(value: Any) -> str:
    if value is None:
        return DEFAULT_PORT
    return str(value).strip() or DEFAULT_PORT


@dataclass
class DeviceConfig:
    port: str = DEFAULT_PORT
    baud_rate: int = DEFAULT_BAUD_RATE
    led_count: int = MAX_LEDS

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any], default_led_count: int) -> "DeviceConfig":
        return cls(
            port=parse_port(settings.get("port")),
            baud_rate=parse_baud_rate(settings.get("baud_rate")),
            led_count=parse_led_count(settings.get("led_count"), default_led_count),
        )


class SettingsFile:
    """
    Live settings backed by a TOML file.

    read() re-parses only when the file's mtime moves; a malformed or
    vanished file keeps the last good settings. Keys missing from the
    file fall back to the initial mapping.
    """

    def __init__(self, path, initial: Optional[Mapping[str, Any]] = None):
        self.path = Path(path)
        self.initial = dict(initial or {})
        self.settings = dict(self.initial)
        self.last_mtime = None

    def read(self) -> dict:
        if tomllib is None:
            return dict(self.settings)

        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return dict(self.settings)
        if mtime == self.last_mtime:
            return dict(self.settings)
        self.last_mtime = mtime

        try:
            parsed = tomllib.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as read_error:
            log.warning("Keeping previous settings, could not read %s: %s", self.path, read_error)
            return dict(self.settings)

        # a key removed from the file falls back to its initial value
        self.settings = dict(self.initial)
        self.settings.update({key: parsed[key] for key in ("port", "baud_rate", "led_count") if key in parsed})
        return dict(self.settings)
