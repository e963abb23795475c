"""
Engine upgrades - Installable modifiers on the derived performance metrics.

Each upgrade is a fixed variant with a pure effect: a set of multipliers
(plus an optional temperature offset) that maps one ``EngineMetrics`` to
another. Effects only multiply or add, so folding them over the installed
set gives the same result in any order.
"""

from dataclasses import dataclass, replace
from enum import Enum
from functools import reduce
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Tuple

if TYPE_CHECKING:
    from sixstroke.engine.performance import EngineMetrics


@dataclass(frozen=True)
class UpgradeEffect:
    """Multipliers an upgrade applies to the derived metrics."""
    fuel_consumption: float = 1.0
    thermal_efficiency: float = 1.0
    power_output: float = 1.0
    volumetric_efficiency: float = 1.0
    nox_emissions: float = 1.0
    temperature_offset_c: float = 0.0

    def apply(self, metrics: "EngineMetrics") -> "EngineMetrics":
        """Return a copy of ``metrics`` with this effect applied."""
        return replace(
            metrics,
            fuel_consumption=metrics.fuel_consumption * self.fuel_consumption,
            thermal_efficiency=metrics.thermal_efficiency * self.thermal_efficiency,
            power_output=metrics.power_output * self.power_output,
            volumetric_efficiency=metrics.volumetric_efficiency * self.volumetric_efficiency,
            nox_emissions=metrics.nox_emissions * self.nox_emissions,
            engine_temperature=metrics.engine_temperature + self.temperature_offset_c,
        )

    def combine(self, other: "UpgradeEffect") -> "UpgradeEffect":
        """Compose two effects into one equivalent effect."""
        return UpgradeEffect(
            fuel_consumption=self.fuel_consumption * other.fuel_consumption,
            thermal_efficiency=self.thermal_efficiency * other.thermal_efficiency,
            power_output=self.power_output * other.power_output,
            volumetric_efficiency=self.volumetric_efficiency * other.volumetric_efficiency,
            nox_emissions=self.nox_emissions * other.nox_emissions,
            temperature_offset_c=self.temperature_offset_c + other.temperature_offset_c,
        )


NO_EFFECT = UpgradeEffect()


class Upgrade(Enum):
    """The installable upgrades."""
    DIRECT_INJECTION = "direct_injection"
    TURBOCHARGER = "turbocharger"
    VARIABLE_VALVE_TIMING = "variable_valve_timing"
    EXHAUST_GAS_RECIRCULATION = "exhaust_gas_recirculation"
    WASTE_HEAT_RECOVERY = "waste_heat_recovery"
    SMART_COOLING = "smart_cooling"
    ADVANCED_MATERIALS = "advanced_materials"
    ENHANCED_ECU = "enhanced_ecu"
    CYLINDER_DEACTIVATION = "cylinder_deactivation"
    VARIABLE_COMPRESSION = "variable_compression"
    CERAMIC_COATING = "ceramic_coating"

    @property
    def effect(self) -> UpgradeEffect:
        """Effect this upgrade has once installed."""
        return UPGRADE_EFFECTS[self]

    def apply(self, metrics: "EngineMetrics") -> "EngineMetrics":
        """Apply this upgrade's effect to ``metrics``."""
        return self.effect.apply(metrics)

    @classmethod
    def from_name(cls, name: str) -> Optional["Upgrade"]:
        """Look up an upgrade by identifier.

        Args:
            name: Identifier such as ``"turbocharger"``

        Returns:
            Matching upgrade, or None if the name is unknown
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


UPGRADE_EFFECTS: Dict[Upgrade, UpgradeEffect] = {
    Upgrade.DIRECT_INJECTION: UpgradeEffect(fuel_consumption=0.9, thermal_efficiency=1.05),
    Upgrade.TURBOCHARGER: UpgradeEffect(power_output=1.2, volumetric_efficiency=1.15),
    Upgrade.VARIABLE_VALVE_TIMING: UpgradeEffect(volumetric_efficiency=1.1, fuel_consumption=0.95),
    Upgrade.EXHAUST_GAS_RECIRCULATION: UpgradeEffect(nox_emissions=0.7),
    Upgrade.WASTE_HEAT_RECOVERY: UpgradeEffect(thermal_efficiency=1.05),
    Upgrade.SMART_COOLING: UpgradeEffect(thermal_efficiency=1.02),
    Upgrade.ADVANCED_MATERIALS: UpgradeEffect(power_output=1.05),
    Upgrade.ENHANCED_ECU: UpgradeEffect(fuel_consumption=0.95, power_output=1.05),
    Upgrade.CYLINDER_DEACTIVATION: UpgradeEffect(fuel_consumption=0.92),
    Upgrade.VARIABLE_COMPRESSION: UpgradeEffect(thermal_efficiency=1.08, fuel_consumption=0.93),
    Upgrade.CERAMIC_COATING: UpgradeEffect(thermal_efficiency=1.03, temperature_offset_c=-5.0),
}


class UpgradeSet:
    """Installed flag for every known upgrade.

    Installation is set membership: installing an upgrade that is already
    present changes nothing.
    """

    def __init__(self):
        self._installed: Dict[Upgrade, bool] = {upgrade: False for upgrade in Upgrade}

    def __contains__(self, upgrade: Upgrade) -> bool:
        return self._installed.get(upgrade, False)

    def __iter__(self) -> Iterator[Upgrade]:
        return iter(self.installed())

    def __len__(self) -> int:
        return sum(self._installed.values())

    def install(self, upgrade: Upgrade) -> bool:
        """Mark an upgrade as installed.

        Returns:
            True if the upgrade was not installed before
        """
        newly_installed = not self._installed[upgrade]
        self._installed[upgrade] = True
        return newly_installed

    def installed(self) -> Tuple[Upgrade, ...]:
        """Installed upgrades in declaration order."""
        return tuple(upgrade for upgrade, active in self._installed.items() if active)

    def net_effect(self) -> UpgradeEffect:
        """Single effect equivalent to all installed upgrades."""
        return reduce(
            lambda acc, upgrade: acc.combine(upgrade.effect),
            self.installed(),
            NO_EFFECT,
        )

    def fold(self, metrics: "EngineMetrics") -> "EngineMetrics":
        """Apply every installed upgrade to ``metrics`` exactly once."""
        return reduce(lambda acc, upgrade: upgrade.apply(acc), self.installed(), metrics)

    def clear(self) -> None:
        """Uninstall everything."""
        for upgrade in self._installed:
            self._installed[upgrade] = False

    def get_state(self) -> Dict[str, bool]:
        """Installed flags keyed by identifier."""
        return {upgrade.value: active for upgrade, active in self._installed.items()}
