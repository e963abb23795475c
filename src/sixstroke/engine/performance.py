"""
Performance model - Derived engine metrics from the current state.

Computes:
- Geometry (displacement, rod/stroke ratio, mean piston speed)
- Power and torque from mean effective pressure
- Otto-cycle thermal efficiency with water-injection and temperature corrections
- Fuel consumption, BSFC, CO2 and NOx
- Volumetric efficiency
"""

from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING, Tuple
import numpy as np

if TYPE_CHECKING:
    from sixstroke.engine.state import EngineConfig, EngineState


@dataclass(frozen=True)
class EngineMetrics:
    """Derived performance figures. Produced only by ``PerformanceModel``."""
    displacement: float = 0.0               # m^3, all cylinders
    cylinder_displacement: float = 0.0      # m^3, one cylinder
    rod_stroke_ratio: float = 0.0
    piston_speed: float = 0.0               # m/s
    power_output: float = 0.0               # kW
    torque: float = 0.0                     # Nm
    thermal_efficiency: float = 0.0
    volumetric_efficiency: float = 0.0
    fuel_consumption: float = 0.0
    brake_specific_fuel_consumption: float = 0.0
    co2_emissions: float = 0.0
    nox_emissions: float = 0.0
    engine_temperature: float = 0.0         # effective temperature used by this pass

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class PerformanceConfig:
    """Constants of the performance formulas."""
    gamma: float = 1.4                          # ratio of specific heats
    fuel_energy_kj_per_kg: float = 43000.0      # gasoline
    co2_per_bsfc: float = 3.2
    nox_power_factor: float = 0.01
    nox_reference_temp_c: float = 90.0

    # Water injection
    water_injection_efficiency_gain: float = 1.1
    water_injection_nox_factor: float = 0.8

    # Running away from optimal temperature costs efficiency
    temp_tolerance_c: float = 10.0
    temp_penalty_per_degree: float = 0.001

    volumetric_efficiency_bounds: Tuple[float, float] = (0.7, 1.0)

    # Derive fuel from the uncorrected efficiency and let the fuel/NOx
    # formulas overwrite upgrade effects
    legacy_ordering: bool = False


class PerformanceModel:
    """Recomputes ``EngineMetrics`` from an ``EngineState``.

    The result depends only on the state and its installed upgrades, so
    calling ``update`` repeatedly never compounds any effect.

    Two orderings are supported:
    - corrected (default): water-injection and temperature corrections to
      thermal efficiency are applied before fuel consumption is derived, and
      upgrade fuel/NOx multipliers act on the freshly derived values
    - legacy: fuel is derived from the uncorrected efficiency and the
      fuel/NOx formulas overwrite what the upgrades did to those metrics

    Callers guarantee ``rpm > 0`` (idle floor) and a positive efficiency;
    the model does not guard its divisions.
    """

    def __init__(self, config: PerformanceConfig | None = None):
        """Initialize model with optional custom constants.

        Args:
            config: Formula constants. Uses defaults if None.
        """
        self.config = config or PerformanceConfig()

    def ideal_thermal_efficiency(self, engine: "EngineConfig") -> float:
        """Otto-cycle efficiency ``1 - 1 / CR^(gamma - 1)``."""
        return 1.0 - 1.0 / engine.compression_ratio ** (self.config.gamma - 1.0)

    def base_metrics(self, engine: "EngineConfig", rpm: float, temperature_c: float) -> EngineMetrics:
        """Geometry, power, torque and ideal efficiency before any adjustment.

        Args:
            engine: Engine specification
            rpm: Engine speed
            temperature_c: Current engine temperature

        Returns:
            Metrics with fuel and emission figures still zero
        """
        cylinder_displacement = (np.pi / 4.0) * engine.bore_m ** 2 * engine.stroke_m
        displacement = cylinder_displacement * engine.num_cylinders
        power_kw = engine.mean_effective_pressure_pa * displacement * rpm / 120000.0
        torque_nm = power_kw * 1000.0 * 60.0 / (2.0 * np.pi * rpm)

        return EngineMetrics(
            displacement=displacement,
            cylinder_displacement=cylinder_displacement,
            rod_stroke_ratio=engine.rod_length_m / engine.stroke_m,
            piston_speed=2.0 * engine.stroke_m * rpm / 60.0,
            power_output=power_kw,
            torque=torque_nm,
            thermal_efficiency=self.ideal_thermal_efficiency(engine),
            volumetric_efficiency=engine.base_volumetric_efficiency,
            engine_temperature=temperature_c,
        )

    def compute(self, state: "EngineState") -> EngineMetrics:
        """Derive all metrics for the given state.

        Args:
            state: Engine state to evaluate

        Returns:
            Freshly computed metrics
        """
        base = self.base_metrics(state.config, state.rpm, state.engine_temperature)
        upgraded = state.upgrades.fold(base)

        if self.config.legacy_ordering:
            metrics = self._finish_legacy(state, upgraded)
        else:
            metrics = self._finish(state, upgraded)

        low, high = self.config.volumetric_efficiency_bounds
        return replace(
            metrics,
            volumetric_efficiency=float(np.clip(metrics.volumetric_efficiency, low, high)),
        )

    def update(self, state: "EngineState") -> EngineMetrics:
        """Recompute and store metrics on the state."""
        state.metrics = self.compute(state)
        return state.metrics

    def _finish(self, state: "EngineState", metrics: EngineMetrics) -> EngineMetrics:
        cfg = self.config
        net = state.upgrades.net_effect()
        temperature = metrics.engine_temperature

        efficiency = self._corrected_efficiency(state, metrics.thermal_efficiency, temperature)
        fuel = self._fuel_consumption(metrics.power_output, efficiency) * net.fuel_consumption
        bsfc = fuel * 3600.0 / metrics.power_output

        nox = self._nox(metrics.power_output, temperature) * net.nox_emissions
        if state.water_injection_active:
            nox *= cfg.water_injection_nox_factor

        return replace(
            metrics,
            thermal_efficiency=efficiency,
            fuel_consumption=fuel,
            brake_specific_fuel_consumption=bsfc,
            co2_emissions=bsfc * cfg.co2_per_bsfc,
            nox_emissions=nox,
        )

    def _finish_legacy(self, state: "EngineState", metrics: EngineMetrics) -> EngineMetrics:
        cfg = self.config
        temperature = metrics.engine_temperature

        fuel = self._fuel_consumption(metrics.power_output, metrics.thermal_efficiency)
        bsfc = fuel * 3600.0 / metrics.power_output

        nox = self._nox(metrics.power_output, temperature)
        if state.water_injection_active:
            nox *= cfg.water_injection_nox_factor

        return replace(
            metrics,
            thermal_efficiency=self._corrected_efficiency(state, metrics.thermal_efficiency, temperature),
            fuel_consumption=fuel,
            brake_specific_fuel_consumption=bsfc,
            co2_emissions=bsfc * cfg.co2_per_bsfc,
            nox_emissions=nox,
        )

    def _corrected_efficiency(self, state: "EngineState", efficiency: float, temperature: float) -> float:
        cfg = self.config
        if state.water_injection_active:
            efficiency *= cfg.water_injection_efficiency_gain

        deviation = abs(temperature - state.config.optimal_temp_c)
        if deviation > cfg.temp_tolerance_c:
            efficiency *= 1.0 - cfg.temp_penalty_per_degree * deviation
        return efficiency

    def _fuel_consumption(self, power_kw: float, efficiency: float) -> float:
        return power_kw * 3600.0 / (self.config.fuel_energy_kj_per_kg * efficiency)

    def _nox(self, power_kw: float, temperature: float) -> float:
        cfg = self.config
        return cfg.nox_power_factor * power_kw * (1.0 + (temperature - cfg.nox_reference_temp_c) / 100.0)
