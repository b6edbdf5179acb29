# adalight_protocol.py
from __future__ import annotations

from typing import List, Protocol, Tuple

from ADALIGHT_DRIVER.color import ColorSource
from ADALIGHT_DRIVER.defaults import MAX_LEDS, MIN_LEDS
from ADALIGHT_DRIVER.geometry import CoordinateMapper

# ---------- Protocol constants ----------
MAGIC         = b"Ada"
CHECKSUM_SEED = 0x55
HEADER_SIZE   = 6
BYTES_PER_LED = 3


class AdalightProtocolError(ValueError):
    pass


def compute_checksum(hi: int, lo: int) -> int:
    return hi ^ lo ^ CHECKSUM_SEED


def _check_led_count(led_count: int) -> None:
    if not MIN_LEDS <= led_count <= MAX_LEDS:
        raise ValueError(f"led_count must be in [{MIN_LEDS}, {MAX_LEDS}], got {led_count}")


def build_header(led_count: int) -> bytes:
    """
    Ada + hi/lo of (led_count - 1) + checksum.
    """
    _check_led_count(led_count)
    hi = (led_count - 1) >> 8
    lo = (led_count - 1) & 0xFF
    return MAGIC + bytes([hi, lo, compute_checksum(hi, lo)])


def encode_frame(led_count: int, color_source: ColorSource, coordinate_mapper: CoordinateMapper) -> bytes:
    """
    One packet: header followed by an RGB triple per LED in logical order.
    Each LED samples the color source at coordinate_mapper(i, led_count).
    """
    packet = bytearray(build_header(led_count))
    for led_index in range(led_count):
        x, y = coordinate_mapper(led_index, led_count)
        packet.extend(color_source.sample(x, y).to_rgb8())
    return bytes(packet)


def encode_blackout(led_count: int) -> bytes:
    return build_header(led_count) + bytes(BYTES_PER_LED * led_count)


def decode_header(data: bytes) -> int:
    """Validate the 6-byte header and return the LED count it announces."""
    if len(data) < HEADER_SIZE:
        raise AdalightProtocolError(f"short header: {len(data)} bytes")
    if bytes(data[:3]) != MAGIC:
        raise AdalightProtocolError(f"bad magic: {bytes(data[:3])!r}")
    hi, lo, checksum = data[3], data[4], data[5]
    if compute_checksum(hi, lo) != checksum:
        raise AdalightProtocolError(f"bad checksum: 0x{checksum:02X} != 0x{compute_checksum(hi, lo):02X}")
    return ((hi << 8) | lo) + 1


def decode_packet(data: bytes) -> Tuple[int, List[Tuple[int, int, int]]]:
    led_count = decode_header(data)
    body = data[HEADER_SIZE:]
    if len(body) != BYTES_PER_LED * led_count:
        raise AdalightProtocolError(
            f"body is {len(body)} bytes, header announces {led_count} LEDs ({BYTES_PER_LED * led_count} bytes)"
        )
    leds = [tuple(body[i:i + BYTES_PER_LED]) for i in range(0, len(body), BYTES_PER_LED)]
    return led_count, leds


# Provide a tiny typing Protocol so we can unit-test by injecting an object
# with a .write(bytes) method (e.g., io.BytesIO or a stub).
class _ByteWriter(Protocol):
    def write(self, data: bytes) -> int: ...


def send_packet(port: _ByteWriter, packet: bytes) -> None:
    port.write(packet)
