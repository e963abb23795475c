"""
Gearbox component - Five-speed transmission with boundary-clamped shifting.

Simulates:
- Fixed set of forward gear ratios
- Sequential up/down shifting that saturates at the first and top gear
- Wheel speed and road speed derived from engine RPM
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List
import numpy as np


class TransmissionMode(Enum):
    """Who decides when the gearbox shifts."""
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"

    def toggled(self) -> "TransmissionMode":
        """Return the other mode."""
        if self is TransmissionMode.AUTOMATIC:
            return TransmissionMode.MANUAL
        return TransmissionMode.AUTOMATIC


@dataclass
class GearboxConfig:
    """Configuration for the five-speed gearbox.

    Ratios are listed from first gear upwards. There is no neutral.
    """
    gear_ratios: List[float] = field(default_factory=lambda: [
        3.42,   # 1st
        2.14,   # 2nd
        1.45,   # 3rd
        1.00,   # 4th
        0.83,   # 5th
    ])

    def __post_init__(self):
        if not self.gear_ratios:
            raise ValueError("gear_ratios must contain at least one gear")
        if any(ratio <= 0 for ratio in self.gear_ratios):
            raise ValueError("gear ratios must be positive")


class Gearbox:
    """Ordered gear ratios plus the currently selected gear.

    The selected gear is 1-based and always stays within
    ``[1, max_gear]``; shifting past either end is silently ignored.
    """

    def __init__(self, config: GearboxConfig | None = None):
        """Initialize gearbox in first gear.

        Args:
            config: Gearbox configuration. Uses the stock ratios if None.
        """
        self.config = config or GearboxConfig()
        self._current_gear: int = 1

    @property
    def max_gear(self) -> int:
        """Highest selectable gear."""
        return len(self.config.gear_ratios)

    @property
    def is_top_gear(self) -> bool:
        """Check if the gearbox is in its highest gear."""
        return self._current_gear >= self.max_gear

    @property
    def is_bottom_gear(self) -> bool:
        """Check if the gearbox is in first gear."""
        return self._current_gear <= 1

    def current_gear(self) -> int:
        """Current gear number (1-based)."""
        return self._current_gear

    def current_ratio(self) -> float:
        """Ratio of the currently selected gear."""
        return self.config.gear_ratios[self._current_gear - 1]

    def shift_up(self) -> bool:
        """Move up one gear unless already in top gear.

        Returns:
            True if the gear changed
        """
        if self.is_top_gear:
            return False
        self._current_gear += 1
        return True

    def shift_down(self) -> bool:
        """Move down one gear unless already in first.

        Returns:
            True if the gear changed
        """
        if self.is_bottom_gear:
            return False
        self._current_gear -= 1
        return True

    def get_wheel_rpm_from_engine(self, engine_rpm: float, final_drive: float) -> float:
        """Calculate wheel RPM from engine RPM in the current gear.

        Args:
            engine_rpm: Current engine RPM
            final_drive: Final drive ratio

        Returns:
            Wheel RPM
        """
        return engine_rpm / (self.current_ratio() * final_drive)

    def get_speed_from_rpm(
        self,
        engine_rpm: float,
        final_drive: float,
        wheel_radius_m: float,
    ) -> float:
        """Calculate vehicle speed (m/s) from engine RPM.

        Args:
            engine_rpm: Current engine RPM
            final_drive: Final drive ratio
            wheel_radius_m: Driven wheel radius in meters

        Returns:
            Vehicle speed in m/s
        """
        wheel_rpm = self.get_wheel_rpm_from_engine(engine_rpm, final_drive)
        wheel_circumference = 2 * np.pi * wheel_radius_m
        return wheel_rpm * wheel_circumference / 60.0

    def reset(self) -> None:
        """Return to first gear."""
        self._current_gear = 1

    def get_state(self) -> dict:
        """Get current gearbox state for telemetry.

        Returns:
            Dictionary containing gearbox state values
        """
        return {
            "gear": self._current_gear,
            "gear_ratio": self.current_ratio(),
            "max_gear": self.max_gear,
        }
