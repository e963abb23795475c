"""
Engine state - The single mutable aggregate the simulation works on.

Contains:
- EngineConfig: fixed engine and drivetrain specification
- ShiftNotification: transient gear-change message with countdown
- ActionResult: outcome of a player or caller action that may be refused
- EngineState: physical state, derived metrics, upgrades and gearbox
"""

from dataclasses import dataclass, field
from enum import Enum

from sixstroke.engine.gearbox import Gearbox, TransmissionMode
from sixstroke.engine.performance import EngineMetrics
from sixstroke.engine.upgrades import UpgradeSet


@dataclass(frozen=True)
class EngineConfig:
    """Specification of a small three-cylinder six-stroke engine.

    All lengths in meters, pressures in pascals, temperatures in Celsius.
    """
    # Geometry
    bore_m: float = 0.086
    stroke_m: float = 0.086
    rod_length_m: float = 0.143
    deck_height_m: float = 0.2
    compression_ratio: float = 11.0
    num_cylinders: int = 3

    # RPM limits
    idle_rpm: float = 800.0
    max_rpm: float = 6000.0
    start_rpm: float = 1000.0

    # Combustion
    mean_effective_pressure_pa: float = 1_000_000.0
    base_volumetric_efficiency: float = 0.9
    water_injection_amount: float = 0.005

    # Thermal
    optimal_temp_c: float = 90.0
    start_temp_c: float = 90.0

    # Drivetrain
    wheel_radius_m: float = 0.3175
    final_drive_ratio: float = 3.73
    vehicle_mass_kg: float = 1500.0

    def __post_init__(self):
        positive = {
            "bore_m": self.bore_m,
            "stroke_m": self.stroke_m,
            "rod_length_m": self.rod_length_m,
            "mean_effective_pressure_pa": self.mean_effective_pressure_pa,
            "base_volumetric_efficiency": self.base_volumetric_efficiency,
            "wheel_radius_m": self.wheel_radius_m,
            "final_drive_ratio": self.final_drive_ratio,
            "vehicle_mass_kg": self.vehicle_mass_kg,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.num_cylinders < 1:
            raise ValueError("num_cylinders must be at least 1")
        # CR <= 1 would give zero or negative thermal efficiency
        if self.compression_ratio <= 1.0:
            raise ValueError("compression_ratio must be greater than 1")
        if not 0 < self.idle_rpm < self.max_rpm:
            raise ValueError("idle_rpm must be positive and below max_rpm")
        if not self.idle_rpm <= self.start_rpm <= self.max_rpm:
            raise ValueError("start_rpm must lie between idle_rpm and max_rpm")


@dataclass
class ShiftNotification:
    """Gear-change message shown for a limited time."""
    message: str = ""
    remaining_s: float = 0.0

    @property
    def active(self) -> bool:
        """Check if there is a message to display."""
        return bool(self.message) and self.remaining_s > 0

    def show(self, message: str, duration_s: float) -> None:
        """Replace the current message and restart the countdown."""
        self.message = message
        self.remaining_s = duration_s

    def tick(self, dt: float) -> None:
        """Count down by ``dt`` and clear the message once expired."""
        if self.remaining_s <= 0:
            return
        self.remaining_s -= dt
        if self.remaining_s <= 0:
            self.clear()

    def clear(self) -> None:
        self.message = ""
        self.remaining_s = 0.0


class ActionStatus(Enum):
    """Whether an action took effect."""
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an action that may be refused without raising."""
    status: ActionStatus
    message: str = ""

    @classmethod
    def applied(cls, message: str = "") -> "ActionResult":
        return cls(ActionStatus.APPLIED, message)

    @classmethod
    def rejected(cls, reason: str) -> "ActionResult":
        return cls(ActionStatus.REJECTED, reason)

    @property
    def is_applied(self) -> bool:
        return self.status is ActionStatus.APPLIED

    def __bool__(self) -> bool:
        return self.is_applied


@dataclass
class EngineState:
    """Everything the simulation knows about the engine at one instant.

    Physical state is mutated in place by the dynamics integrator; the
    ``metrics`` field is only ever replaced by a performance recompute.
    """
    config: EngineConfig = field(default_factory=EngineConfig)
    gearbox: Gearbox = field(default_factory=Gearbox)

    # Physical state
    rpm: float | None = None
    acceleration: float = 0.0
    jerk: float = 0.0
    engine_temperature: float | None = None
    water_injection_active: bool = False
    vehicle_speed: float = 0.0  # m/s

    # Control state
    transmission_mode: TransmissionMode = TransmissionMode.AUTOMATIC
    upgrades: UpgradeSet = field(default_factory=UpgradeSet)
    notification: ShiftNotification = field(default_factory=ShiftNotification)

    # Derived
    metrics: EngineMetrics = field(default_factory=EngineMetrics)

    def __post_init__(self):
        if self.rpm is None:
            self.rpm = self.config.start_rpm
        if self.engine_temperature is None:
            self.engine_temperature = self.config.start_temp_c

    @property
    def gear(self) -> int:
        """Current gear number (1-based)."""
        return self.gearbox.current_gear()

    @property
    def speed_kph(self) -> float:
        """Vehicle speed in km/h."""
        return self.vehicle_speed * 3.6
