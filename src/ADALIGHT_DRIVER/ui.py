# src/ADALIGHT_DRIVER/ui.py
import curses

from ADALIGHT_DRIVER.adalight_protocol import AdalightProtocolError, decode_packet

# ---------- UI help ----------
HELP_LINES = [
    "Keys:",
    "  q          : quit (blackout + close)",
    "  edit the settings file to change port / baud / LED count live",
]


def _ruler(packet, ruler_width):
    """One cell per LED bucket: '#' lit, '·' dark, '?' no frame sent yet."""
    if packet is None:
        return "?" * ruler_width
    try:
        led_count, leds = decode_packet(packet)
    except AdalightProtocolError:
        return "?" * ruler_width
    cells = []
    for cell_index in range(ruler_width):
        r, g, b = leds[int(cell_index * led_count / ruler_width)]
        cells.append("#" if (r or g or b) else "·")
    return "".join(cells)


def draw_ui(screen, *, manager, ui_refresh_fps, frames_sent, settings_path):
    screen.clear()
    screen.addstr(0, 0, "Adalight driver (serial; Ada header + RGB frames)")
    config = manager.config
    state_label = "OPEN" if manager.is_open else "CLOSED"
    header_text = (
        f"Port: {config.port} | Baud: {config.baud_rate} | LEDs: {config.led_count} | "
        f"Variant: {manager.variant.name} | FPS: {ui_refresh_fps} | State: {state_label}"
    )
    if curses.LINES > 2:
        screen.addstr(1, 0, header_text[: max(1, curses.COLS - 1)])
        screen.addstr(2, 0, f"Frames sent: {frames_sent:>8} | Settings: {settings_path or '-'}"[: max(1, curses.COLS - 1)])

    ruler_width = min(config.led_count, curses.COLS - 2)
    # the last line stays free, same as the help rows
    if ruler_width > 0 and 5 < curses.LINES - 1:
        screen.addstr(4, 0, "Last frame:")
        screen.addstr(5, 0, _ruler(manager.last_packet, ruler_width))

    help_row_index = 7
    for help_line in HELP_LINES:
        if help_row_index >= curses.LINES - 1:
            break
        screen.addstr(help_row_index, 0, help_line)
        help_row_index += 1

    screen.refresh()
