#!/usr/bin/env python3
"""
adalight_cli.py  (host frame loop for one Adalight device)

Drives an Adalight LED strip over serial:
  header: 'A' 'd' 'a' [hi][lo][hi ^ lo ^ 0x55]   (hi/lo = LED count - 1)
  body:   [R][G][B] per LED, in strip order

Every frame the host settings are re-read and reconciled (port, baud,
LED count) before one frame is rendered from the color source. Quitting
sends a blackout frame so the strip does not freeze on its last colors.

Usage:
  pip install pyserial Pillow
  python3 -m ADALIGHT_DRIVER.adalight_cli --port /dev/ttyUSB0 --color 255,80,0
  python3 -m ADALIGHT_DRIVER.adalight_cli --port COM5 --variant horizontal-reversed --image sunset.png

Live settings:
  Pass --settings path/to/settings.toml containing any of
    port = "/dev/ttyUSB0"
    baud_rate = 460800
    led_count = 60
  Edits are picked up on the next frame; port/baud changes reopen the port.

Repo-local defaults:
  <repo_root>/config/defaults.toml (port, baud_rate, led_count, variant).
  Resolution order: CLI arg -> repo config -> hard default.
"""

# in src/ADALIGHT_DRIVER/adalight_cli.py
from ADALIGHT_DRIVER.color import Color, ImageColorSource, SolidColorSource
from ADALIGHT_DRIVER.connection import ConnectionManager
from ADALIGHT_DRIVER.discovery import DiscoveryService, InMemoryRegistry
from ADALIGHT_DRIVER.geometry import VARIANTS, get_variant
from ADALIGHT_DRIVER.settings import SettingsFile
from ADALIGHT_DRIVER.transport import SerialTransport
from ADALIGHT_DRIVER.ui import draw_ui
from ADALIGHT_DRIVER.defaults import (
    DEFAULT_BAUD_RATE,
    DEFAULT_FPS,
    DEFAULT_PORT,
    DEFAULT_VARIANT,
    SUPPORTED_BAUD_RATES,
    load_repo_overrides,
)

import argparse
import curses
import logging
import sys
import time
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "adalight_driver.log"


def first_given(*values):
    """First value that was actually supplied; 0 counts, None does not."""
    for value in values:
        if value is not None:
            return value
    return None


def parse_color(text: str) -> Color:
    """'R,G,B' with 8-bit channels -> normalized Color."""
    parts = text.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected R,G,B, got {text!r}")
    try:
        channels = [int(part) for part in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"channels must be integers, got {text!r}") from None
    if any(not 0 <= channel <= 255 for channel in channels):
        raise argparse.ArgumentTypeError(f"channels must be 0-255, got {text!r}")
    return Color.from_rgb8(*channels)


class ColorSourceCache:
    """
    Rebuilds the color source only when the geometry's canvas size changes
    (the horizontal strip is as wide as the LED count).
    """

    def __init__(self, build, geometry):
        self.build = build
        self.geometry = geometry
        self.size = None
        self.source = None

    def __call__(self, led_count: int):
        size = self.geometry.size(led_count)
        if size != self.size:
            self.source = self.build(*size)
            self.size = size
        return self.source


def run_frames(manager, read_settings, source_for, fps, max_frames=None, on_frame=None):
    """
    The per-frame cycle: sync settings, render, pace to fps.
    on_frame(frames_sent) returning True stops the loop.
    Returns the number of frames actually written.
    """
    frame_interval = 1.0 / max(1, fps)
    next_frame_time = time.monotonic()
    frames_sent = 0
    frame_index = 0

    while max_frames is None or frame_index < max_frames:
        manager.sync_config(read_settings())
        if manager.render_frame(source_for(manager.config.led_count)):
            frames_sent += 1
        frame_index += 1

        if on_frame is not None and on_frame(frames_sent):
            break

        next_frame_time += frame_interval
        time.sleep(max(0.0, next_frame_time - time.monotonic()))

    return frames_sent


#================================================
# ---------- Curses loop ----------
def run_ui(screen, manager, read_settings, source_for, fps, max_frames, settings_path):
    curses.curs_set(0)
    screen.nodelay(True)
    screen.keypad(True)

    def on_frame(frames_sent):
        draw_ui(
            screen,
            manager=manager,
            ui_refresh_fps=fps,
            frames_sent=frames_sent,
            settings_path=settings_path,
        )
        return screen.getch() in (ord("q"), ord("Q"))

    return run_frames(manager, read_settings, source_for, fps, max_frames=max_frames, on_frame=on_frame)


def configure_logging(verbose: bool, use_ui: bool, log_file: str) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    log_format = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if use_ui:
        # curses owns the terminal
        logging.basicConfig(level=level, format=log_format, filename=log_file)
    else:
        logging.basicConfig(level=level, format=log_format, stream=sys.stderr)


def build_argument_parser(defaults: dict) -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(
        description="Host frame loop for an Adalight serial LED strip."
    )
    argument_parser.add_argument("--port", help=f"Serial port (e.g., /dev/ttyUSB0, COM4). Defaults to repo config or {DEFAULT_PORT}.")
    argument_parser.add_argument("--baud", type=int, choices=SUPPORTED_BAUD_RATES, help=f"Baud rate (default {DEFAULT_BAUD_RATE}).")
    argument_parser.add_argument("--num-leds", type=int, help="Number of LEDs, clamped to 1-120. Defaults to the variant's LED count.")
    argument_parser.add_argument("--variant", choices=sorted(VARIANTS), default=defaults.get("variant") or DEFAULT_VARIANT, help="Strip geometry.")
    argument_parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second.")
    source_group = argument_parser.add_mutually_exclusive_group()
    source_group.add_argument("--color", type=parse_color, default=Color(1.0, 1.0, 1.0), help="Solid color as R,G,B (0-255).")
    source_group.add_argument("--image", help="Image file scaled onto the strip.")
    argument_parser.add_argument("--settings", help="TOML file with port/baud_rate/led_count, re-read every frame.")
    argument_parser.add_argument("--frames", type=int, help="Stop after this many frames.")
    argument_parser.add_argument("--no-ui", action="store_true", help="Plain loop without the curses status panel.")
    argument_parser.add_argument("--log-file", default=DEFAULT_LOG_FILE, help="Log destination while the curses panel is up.")
    argument_parser.add_argument("--verbose", action="store_true", help="Debug logging (shows silent reconnect attempts).")
    return argument_parser


def main(argv=None):
    # Load repo-local defaults first
    defaults = load_repo_overrides()
    args = build_argument_parser(defaults).parse_args(argv)

    use_ui = not args.no_ui and sys.stdout.isatty()
    configure_logging(args.verbose, use_ui, args.log_file)

    variant = get_variant(args.variant)

    # Resolve using: CLI arg -> repo config -> hard default (clamping happens in settings)
    initial_settings = {
        "port": args.port or defaults.get("port") or DEFAULT_PORT,
        "baud_rate": first_given(args.baud, defaults.get("baud_rate"), DEFAULT_BAUD_RATE),
        "led_count": first_given(args.num_leds, defaults.get("led_count"), variant.default_led_count),
    }

    if args.settings:
        settings_file = SettingsFile(args.settings, initial_settings)
        read_settings = settings_file.read
    else:
        read_settings = lambda: initial_settings

    if args.image:
        image_path = Path(args.image)
        if not image_path.is_file():
            print(f"Image not found: {image_path}", file=sys.stderr)
            sys.exit(1)
        build_source = lambda width, height: ImageColorSource(image_path, width, height)
    else:
        build_source = lambda width, height: SolidColorSource(args.color)
    source_for = ColorSourceCache(build_source, variant.geometry)

    registry = InMemoryRegistry()
    discovery = DiscoveryService(registry)
    discovery.initialize()
    discovery.update()
    for controller in registry.controllers:
        controller.update_with_value({"port": initial_settings["port"]})

    manager = ConnectionManager(SerialTransport(), variant)
    manager.initialize(read_settings())
    if not manager.is_open:
        print(f"Could not open {manager.config.port}; will keep retrying in the background.", file=sys.stderr)

    frames_sent = 0
    try:
        if use_ui:
            frames_sent = curses.wrapper(
                run_ui,
                manager,
                read_settings,
                source_for,
                args.fps,
                args.frames,
                args.settings,
            )
        else:
            frames_sent = run_frames(manager, read_settings, source_for, args.fps, max_frames=args.frames)
    except KeyboardInterrupt:
        pass
    finally:
        manager.shutdown()

    log.info("Sent %d frames", frames_sent)


if __name__ == "__main__":
    main()
