"""
Dynamics integrator - Advances the engine state over time.

Handles:
- Random-walk jerk driving acceleration, RPM and temperature
- Random water-injection toggling
- Automatic gear selection by RPM thresholds
- Manual shifting and discrete accelerate/decelerate control steps
- Gear-shift notification timing
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple
import logging
import numpy as np

from sixstroke.engine.engine import Engine
from sixstroke.engine.gearbox import TransmissionMode
from sixstroke.engine.state import ActionResult, EngineState

logger = logging.getLogger(__name__)


@dataclass
class DynamicsConfig:
    """Integrator constants and saturation limits."""
    # Random jerk per second, uniformly drawn from [-jerk_noise, jerk_noise]
    jerk_noise: float = 100.0
    jerk_limit: float = 500.0
    acceleration_limit: float = 50.0
    rpm_per_acceleration: float = 10.0

    # Thermal
    temperature_bounds_c: Tuple[float, float] = (85.0, 110.0)
    heating_rate_c_per_s: float = 0.5
    cooling_rate_c_per_s: float = 0.2

    # Chance per update of flipping water injection
    water_injection_toggle_probability: float = 0.005

    # Automatic transmission
    upshift_rpm: float = 4000.0
    downshift_rpm: float = 2000.0
    shift_rpm_change: float = 1500.0

    # Discrete control steps
    control_rpm_step: float = 100.0
    control_heating_c: float = 0.5
    control_cooling_c: float = 0.2

    notification_duration_s: float = 3.0

    def __post_init__(self):
        low, high = self.temperature_bounds_c
        if low > high:
            raise ValueError("temperature_bounds_c must be (low, high)")
        if not 0.0 <= self.water_injection_toggle_probability <= 1.0:
            raise ValueError("water_injection_toggle_probability must be within [0, 1]")
        if self.downshift_rpm >= self.upshift_rpm:
            raise ValueError("downshift_rpm must be below upshift_rpm")


class DynamicsIntegrator:
    """Steps an ``Engine`` forward in time.

    Randomness comes from an injected ``numpy.random.Generator`` so a run
    is reproducible for a given seed. Every quantity the integrator moves
    saturates at its limits instead of raising.

    Usage:
        integrator = DynamicsIntegrator(Engine(), seed=42)
        for _ in range(600):
            integrator.update_dynamics(1 / 60)
    """

    def __init__(
        self,
        engine: Engine,
        config: DynamicsConfig | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        """Initialize integrator.

        Args:
            engine: Engine to drive
            config: Integrator constants. Uses defaults if None.
            rng: Random source. Created from ``seed`` if None.
            seed: Seed for the default random source
        """
        self.engine = engine
        self.config = config or DynamicsConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    @property
    def state(self) -> EngineState:
        return self.engine.state

    @property
    def transmission_mode(self) -> TransmissionMode:
        return self.state.transmission_mode

    def update_dynamics(self, dt: float) -> None:
        """Advance the state by ``dt`` seconds.

        Args:
            dt: Elapsed time in seconds
        """
        cfg = self.config
        state = self.state

        noise = self.rng.uniform(-cfg.jerk_noise, cfg.jerk_noise)
        state.jerk = float(np.clip(state.jerk + noise * dt, -cfg.jerk_limit, cfg.jerk_limit))

        state.acceleration = float(np.clip(
            state.acceleration + state.jerk * dt,
            -cfg.acceleration_limit,
            cfg.acceleration_limit,
        ))

        state.rpm = self.engine.clamp_rpm(state.rpm + state.acceleration * dt * cfg.rpm_per_acceleration)

        if state.acceleration > 0:
            temp_rate = cfg.heating_rate_c_per_s
        else:
            temp_rate = -cfg.cooling_rate_c_per_s
        state.engine_temperature = self._clamp_temperature(state.engine_temperature + temp_rate * dt)

        if self.rng.random() < cfg.water_injection_toggle_probability:
            self.engine.toggle_water_injection(not state.water_injection_active)

        previous_gear = state.gear
        self._automatic_shift()
        state.rpm = self.engine.clamp_rpm(state.rpm)

        self.engine.recompute()

        if state.gear != previous_gear:
            self._notify(f"Shifted to gear {state.gear}")
        else:
            state.notification.tick(dt)

    def accelerate(self) -> None:
        """Raise RPM by one control step and warm the engine slightly."""
        state = self.state
        previous_gear = state.gear

        state.rpm = self.engine.clamp_rpm(state.rpm + self.config.control_rpm_step)
        deviation = state.engine_temperature - self.engine.config.optimal_temp_c
        warming = self.config.control_heating_c * (1 - deviation / 100)
        state.engine_temperature = self._clamp_temperature(state.engine_temperature + max(0.0, warming))

        self._finish_control_step(previous_gear)

    def decelerate(self) -> None:
        """Drop RPM by one control step and cool the engine slightly."""
        state = self.state
        previous_gear = state.gear

        state.rpm = self.engine.clamp_rpm(state.rpm - self.config.control_rpm_step)
        deviation = state.engine_temperature - self.engine.config.optimal_temp_c
        cooling = self.config.control_cooling_c * (deviation / 100)
        state.engine_temperature = self._clamp_temperature(state.engine_temperature - max(0.0, cooling))

        self._finish_control_step(previous_gear)

    def adjust_acceleration(self, delta: float) -> float:
        """Nudge acceleration by ``delta``, saturating at the limit.

        Returns:
            New acceleration
        """
        limit = self.config.acceleration_limit
        self.state.acceleration = float(np.clip(self.state.acceleration + delta, -limit, limit))
        return self.state.acceleration

    def manual_upshift(self) -> ActionResult:
        """Shift up one gear when in manual mode.

        Returns:
            APPLIED if the gear changed, REJECTED otherwise
        """
        if self.transmission_mode is not TransmissionMode.MANUAL:
            return ActionResult.rejected("Manual shifting requires manual transmission mode")

        if not self.state.gearbox.shift_up():
            self._notify("Already in highest gear")
            return ActionResult.rejected("Already in highest gear")

        self.state.rpm = self.engine.clamp_rpm(self.state.rpm - self.config.shift_rpm_change)
        self.engine.recompute()
        message = f"Manually shifted up to gear {self.state.gear}"
        self._notify(message)
        return ActionResult.applied(message)

    def manual_downshift(self) -> ActionResult:
        """Shift down one gear when in manual mode.

        Returns:
            APPLIED if the gear changed, REJECTED otherwise
        """
        if self.transmission_mode is not TransmissionMode.MANUAL:
            return ActionResult.rejected("Manual shifting requires manual transmission mode")

        if not self.state.gearbox.shift_down():
            self._notify("Already in lowest gear")
            return ActionResult.rejected("Already in lowest gear")

        self.state.rpm = self.engine.clamp_rpm(self.state.rpm + self.config.shift_rpm_change)
        self.engine.recompute()
        message = f"Manually shifted down to gear {self.state.gear}"
        self._notify(message)
        return ActionResult.applied(message)

    def toggle_transmission_mode(self) -> TransmissionMode:
        """Switch between automatic and manual shifting.

        Returns:
            The new mode
        """
        self.state.transmission_mode = self.state.transmission_mode.toggled()
        logger.info(f"Transmission mode switched to {self.state.transmission_mode.value}")
        return self.state.transmission_mode

    def get_state(self) -> Dict[str, Any]:
        """Get integrator-related state for telemetry.

        Returns:
            Dictionary containing dynamics state values
        """
        state = self.state
        return {
            "jerk": state.jerk,
            "acceleration": state.acceleration,
            "rpm": state.rpm,
            "temperature_c": state.engine_temperature,
            "gear": state.gear,
            "transmission_mode": state.transmission_mode.value,
            "notification": state.notification.message,
            "notification_remaining_s": state.notification.remaining_s,
        }

    def _automatic_shift(self) -> bool:
        """Apply the RPM-threshold shift rule; at most one gear per call."""
        if self.transmission_mode is not TransmissionMode.AUTOMATIC:
            return False

        cfg = self.config
        state = self.state
        if state.rpm > cfg.upshift_rpm and not state.gearbox.is_top_gear:
            state.gearbox.shift_up()
            state.rpm -= cfg.shift_rpm_change
        elif state.rpm < cfg.downshift_rpm and not state.gearbox.is_bottom_gear:
            state.gearbox.shift_down()
            state.rpm += cfg.shift_rpm_change
        else:
            return False

        logger.debug(f"Automatic shift to gear {state.gear} at {state.rpm:.0f} rpm")
        return True

    def _finish_control_step(self, previous_gear: int) -> None:
        self._automatic_shift()
        self.state.rpm = self.engine.clamp_rpm(self.state.rpm)
        self.engine.recompute()
        if self.state.gear != previous_gear:
            self._notify(f"Shifted to gear {self.state.gear}")

    def _notify(self, message: str) -> None:
        self.state.notification.show(message, self.config.notification_duration_s)

    def _clamp_temperature(self, value: float) -> float:
        low, high = self.config.temperature_bounds_c
        return float(np.clip(value, low, high))
