# this defaults file is for intra-source definitions, this is not meant to be user facing.
# `config/defaults.toml` holds the user facing overrides for the command line host.

# src/ADALIGHT_DRIVER/defaults.py
from pathlib import Path
import logging

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    tomllib = None

log = logging.getLogger(__name__)

# ---- Hard defaults (single source of truth) ----
MAX_LEDS = 120
MIN_LEDS = 1
SUPPORTED_BAUD_RATES = (115_200, 460_800, 500_000)
DEFAULT_BAUD_RATE = 115_200
DEFAULT_PORT = "COM4"
DEFAULT_VARIANT = "vertical"
DEFAULT_FPS = 30

# pyserial write timeout; keeps a stalled device from blocking the frame loop
DEFAULT_WRITE_TIMEOUT_SECONDS = 0.25

# silent reconnect backoff used by ConnectionManager.render_frame
RECONNECT_INITIAL_DELAY_SECONDS = 0.5
RECONNECT_MAX_DELAY_SECONDS = 8.0
RECONNECT_MULTIPLIER = 2.0

DEVICE_NAME = "Adalight"
DEVICE_IMAGE_URL = "https://assets.signalrgb.com/devices/brands/adalight/misc/led-strip.png"
DISCOVERY_ICON_URL = "https://assets.signalrgb.com/brands/adalight/logo.png"

# Path to repo-local overrides
# src/ADALIGHT_DRIVER/defaults.py -> parents[2] == repo root
REPO_CFG = Path(__file__).resolve().parents[2] / "config" / "defaults.toml"

_OVERRIDE_KEYS = ("port", "baud_rate", "led_count", "variant")


def load_repo_overrides(path: Path = REPO_CFG) -> dict:
    """
    Returns dict with potential overrides from config/defaults.toml.
    Keys: 'port', 'baud_rate', 'led_count', 'variant'; missing keys map to None.
    A missing or malformed file yields all None so the hard defaults apply.
    """
    overrides = dict.fromkeys(_OVERRIDE_KEYS)

    if tomllib is None or not path.is_file():
        return overrides

    try:
        cfg = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as read_error:
        log.warning("Ignoring malformed %s: %s", path, read_error)
        return overrides

    for key in _OVERRIDE_KEYS:
        value = cfg.get(key)
        if isinstance(value, str):
            value = value.strip() or None
        overrides[key] = value
    return overrides
