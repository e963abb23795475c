"""
Terminal adapters - ANSI dashboard and non-blocking keyboard input.

All process-wide terminal state (cursor position, raw mode) is confined
to this module so the simulation core never touches the terminal.
"""

from typing import Optional, TextIO
import os
import sys

from sixstroke.interface.ports import CONTROLS_HELP, Frame

# ANSI escape codes
RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"
CLEAR_SCREEN = "\033[2J\033[H"

TITLE = "Advanced Six-Stroke Engine Simulation"


def move_cursor(row: int, col: int) -> str:
    """Escape sequence placing the cursor at a 1-based row/column."""
    return f"\033[{row};{col}H"


def temperature_color(temperature_c: float) -> str:
    """Colour band for the coolant temperature readout."""
    if temperature_c > 100:
        return RED
    if temperature_c < 80:
        return BLUE
    return GREEN


class TerminalDashboard:
    """Fixed-layout dashboard redrawn in place every frame.

    The title is drawn once; afterwards only the value cells are
    overwritten, which keeps the terminal from flickering.
    """

    LABEL_WIDTH = 22
    VALUE_WIDTH = 15
    LEFT_LABEL, LEFT_VALUE = 2, 25
    RIGHT_LABEL, RIGHT_VALUE = 42, 65
    NOTIFICATION_ROW = 17
    CONTROLS_ROW = 16

    def __init__(self, stream: TextIO | None = None):
        """Initialize dashboard.

        Args:
            stream: Output stream. Uses stdout if None.
        """
        self.stream = stream or sys.stdout
        self._first_frame = True

    def render(self, frame: Frame) -> None:
        state = frame.state
        metrics = state.metrics
        out = []

        if self._first_frame:
            out.append(CLEAR_SCREEN)
            out.append(f"{BOLD}{BLUE}{TITLE}\n{RESET}")
            out.append(f"{WHITE}{'=' * 50}{RESET}\n\n")
            self._first_frame = False

        left = (self.LEFT_LABEL, self.LEFT_VALUE)
        right = (self.RIGHT_LABEL, self.RIGHT_VALUE)

        # Engine performance
        self._cell(out, 3, left, "Displacement:", f"{int(metrics.displacement * 1_000_000)} cc", YELLOW)
        self._cell(out, 4, left, "Power Output:", f"{int(metrics.power_output)} kW", GREEN)
        self._cell(out, 5, left, "Torque:", f"{int(metrics.torque)} Nm", MAGENTA)
        self._cell(out, 6, left, "Thermal Efficiency:", f"{int(metrics.thermal_efficiency * 100)}%", BLUE)

        # Engine state
        self._cell(out, 8, left, "RPM:", f"{int(state.rpm)}", RED)
        self._cell(
            out, 9, left, "Engine Temperature:",
            f"{int(state.engine_temperature)} °C", temperature_color(state.engine_temperature),
        )
        injection = "Active" if state.water_injection_active else "Inactive"
        self._cell(out, 10, left, "Water Injection:", injection,
                   GREEN if state.water_injection_active else YELLOW)

        # Vehicle dynamics
        self._cell(out, 12, left, "Vehicle Speed:", f"{int(state.speed_kph)} km/h", YELLOW)
        self._cell(out, 13, left, "Current Gear:", f"{state.gear}", MAGENTA)
        self._cell(out, 14, left, "Acceleration:", f"{state.acceleration:.2f} m/s²", BLUE)
        mode = state.transmission_mode.value
        self._cell(out, 15, left, "Transmission Mode:", mode, GREEN if mode == "Automatic" else YELLOW)

        # Emissions and efficiency
        self._cell(out, 3, right, "NOx Emissions:", f"{metrics.nox_emissions:.3f} g/kWh", RED)
        self._cell(out, 4, right, "CO2 Emissions:", f"{int(metrics.co2_emissions)} g/km", YELLOW)
        self._cell(out, 5, right, "BSFC:", f"{metrics.brake_specific_fuel_consumption:.2f} g/kWh", MAGENTA)
        self._cell(out, 6, right, "Volumetric Efficiency:", f"{int(metrics.volumetric_efficiency * 100)}%", GREEN)

        # Simulation stats
        self._cell(out, 8, right, "FPS:", f"{int(frame.fps)}", CYAN)
        self._cell(out, 9, right, "Jerk:", f"{state.jerk:.2f} m/s³", BLUE)

        out.append(f"{move_cursor(self.CONTROLS_ROW, 2)}{WHITE}{BOLD}Controls: {RESET}{CONTROLS_HELP}")

        if state.notification.active:
            self._cell(out, self.NOTIFICATION_ROW, left, "Gear Shift:", state.notification.message, WHITE)
        else:
            out.append(f"{move_cursor(self.NOTIFICATION_ROW, 2)}{' ' * 60}")

        out.append(move_cursor(self.NOTIFICATION_ROW + 1, 1))
        self.stream.write("".join(out))
        self.stream.flush()

    def _cell(self, out: list, row: int, columns: tuple, label: str, value: str, color: str) -> None:
        label_col, value_col = columns
        out.append(f"{move_cursor(row, label_col)}{BOLD}{CYAN}{label:<{self.LABEL_WIDTH}}{RESET}")
        out.append(f"{move_cursor(row, value_col)}{color}{value:>{self.VALUE_WIDTH}}{RESET}")


class KeyboardInput:
    """Zero-timeout single key poller.

    On POSIX the terminal is switched to cbreak mode (no line buffering,
    no echo) for the lifetime of the context and restored on exit. On
    Windows ``msvcrt`` is used. When stdin is not a terminal every poll
    returns None.

    Usage:
        with KeyboardInput() as keyboard:
            key = keyboard.poll()
    """

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdin
        self._saved_attrs = None
        self._windows = sys.platform == "win32"

    @property
    def interactive(self) -> bool:
        return self.stream.isatty()

    def __enter__(self) -> "KeyboardInput":
        if self.interactive and not self._windows:
            import termios
            import tty

            fd = self.stream.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Restore the terminal mode saved on entry."""
        if self._saved_attrs is not None:
            import termios

            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

    def poll(self) -> Optional[str]:
        """Return one pending key, or None without waiting."""
        if not self.interactive:
            return None

        if self._windows:
            import msvcrt

            if msvcrt.kbhit():
                return msvcrt.getwch()
            return None

        import select

        fd = self.stream.fileno()
        ready, _, _ = select.select([fd], [], [], 0)
        if not ready:
            return None
        data = os.read(fd, 1)
        if not data:
            return None
        return data.decode(errors="ignore") or None
