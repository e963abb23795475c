"""
Engine - Owner of the engine state and its performance recompute.

Provides:
- Construction of a default six-stroke engine with gearbox
- Upgrade installation and water-injection control
- Vehicle speed from RPM through the drivetrain
- Telemetry snapshot
"""

import logging
from typing import Any, Dict
import numpy as np

from sixstroke.engine.gearbox import Gearbox, GearboxConfig
from sixstroke.engine.performance import EngineMetrics, PerformanceConfig, PerformanceModel
from sixstroke.engine.state import ActionResult, EngineConfig, EngineState
from sixstroke.engine.upgrades import Upgrade

logger = logging.getLogger(__name__)


class Engine:
    """Six-stroke engine with water injection, upgrades and a gearbox.

    Every mutation that can change the derived metrics (upgrade install,
    water-injection toggle, RPM or temperature change followed by
    ``recompute``) leaves ``state.metrics`` consistent with the state.

    Usage:
        engine = Engine()
        engine.apply_upgrade("turbocharger")
        print(engine.metrics.power_output)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        gearbox_config: GearboxConfig | None = None,
        performance_config: PerformanceConfig | None = None,
    ):
        """Initialize engine at its start RPM and temperature.

        Args:
            config: Engine specification. Uses defaults if None.
            gearbox_config: Gear ratios. Uses the stock five-speed if None.
            performance_config: Formula constants. Uses defaults if None.
        """
        self.config = config or EngineConfig()
        self.performance = PerformanceModel(performance_config)
        self.state = EngineState(config=self.config, gearbox=Gearbox(gearbox_config))
        self.recompute()

    @property
    def rpm(self) -> float:
        """Current engine RPM."""
        return self.state.rpm

    @rpm.setter
    def rpm(self, value: float) -> None:
        """Set engine RPM, clamped to idle..max. Does not recompute."""
        self.state.rpm = self.clamp_rpm(value)

    @property
    def metrics(self) -> EngineMetrics:
        """Metrics from the latest recompute."""
        return self.state.metrics

    @property
    def gearbox(self) -> Gearbox:
        return self.state.gearbox

    def clamp_rpm(self, value: float) -> float:
        """Saturate ``value`` to the idle..max RPM range."""
        return float(np.clip(value, self.config.idle_rpm, self.config.max_rpm))

    def recompute(self) -> EngineMetrics:
        """Refresh derived metrics and vehicle speed from the current state."""
        metrics = self.performance.update(self.state)
        self.update_vehicle_speed()
        return metrics

    def update_vehicle_speed(self) -> float:
        """Recalculate road speed (m/s) for the current RPM and gear."""
        self.state.vehicle_speed = self.state.gearbox.get_speed_from_rpm(
            self.state.rpm,
            self.config.final_drive_ratio,
            self.config.wheel_radius_m,
        )
        return self.state.vehicle_speed

    def apply_upgrade(self, upgrade: Upgrade | str) -> ActionResult:
        """Install an upgrade and recompute.

        Unknown identifiers are reported and leave the state untouched.

        Args:
            upgrade: Upgrade variant or its identifier

        Returns:
            APPLIED on success, REJECTED for unknown identifiers
        """
        if not isinstance(upgrade, Upgrade):
            name = str(upgrade)
            upgrade = Upgrade.from_name(name)
            if upgrade is None:
                logger.warning(f"Unknown upgrade: {name}")
                return ActionResult.rejected(f"Unknown upgrade: {name}")

        if self.state.upgrades.install(upgrade):
            logger.info(f"{upgrade.value} applied")
        else:
            logger.info(f"{upgrade.value} already installed")
        self.recompute()
        return ActionResult.applied(f"{upgrade.value} applied")

    def toggle_water_injection(self, active: bool) -> None:
        """Switch water injection on or off and recompute."""
        self.state.water_injection_active = active
        logger.info(f"Water injection {'activated' if active else 'deactivated'}")
        self.recompute()

    def reset(self) -> None:
        """Return to start RPM/temperature, first gear, no upgrades."""
        self.state = EngineState(config=self.config, gearbox=self.state.gearbox)
        self.state.gearbox.reset()
        self.recompute()

    def get_state(self) -> Dict[str, Any]:
        """Get current engine state for telemetry.

        Returns:
            Dictionary containing engine state values
        """
        state = self.state
        return {
            "rpm": state.rpm,
            "acceleration": state.acceleration,
            "jerk": state.jerk,
            "temperature_c": state.engine_temperature,
            "water_injection_active": state.water_injection_active,
            "speed_kph": state.speed_kph,
            "transmission_mode": state.transmission_mode.value,
            "gearbox": state.gearbox.get_state(),
            "upgrades": state.upgrades.get_state(),
            "metrics": state.metrics.as_dict(),
            "notification": state.notification.message,
        }
