"""Basic tests for the SixStroke engine module."""

import pytest
import numpy as np

from sixstroke.engine.engine import Engine
from sixstroke.engine.gearbox import Gearbox, GearboxConfig, TransmissionMode
from sixstroke.engine.performance import EngineMetrics, PerformanceConfig, PerformanceModel
from sixstroke.engine.state import ActionStatus, EngineConfig, EngineState, ShiftNotification
from sixstroke.engine.upgrades import Upgrade, UpgradeEffect, UpgradeSet


def _fuel(power_kw: float, efficiency: float) -> float:
    return power_kw * 3600.0 / (43000.0 * efficiency)


IDEAL_EFFICIENCY = 1.0 - 11.0 ** -0.4


class TestGearbox:
    """Test gearbox component."""

    def test_gearbox_initialization(self):
        """Test gearbox starts in first gear."""
        gearbox = Gearbox()
        assert gearbox.current_gear() == 1
        assert gearbox.max_gear == 5
        assert gearbox.current_ratio() == 3.42

    def test_shift_up_through_all_gears(self):
        """Test upshifting walks the ratio list in order."""
        gearbox = Gearbox()
        ratios = [gearbox.current_ratio()]
        while gearbox.shift_up():
            ratios.append(gearbox.current_ratio())

        assert ratios == [3.42, 2.14, 1.45, 1.0, 0.83]
        assert gearbox.current_gear() == 5

    @pytest.mark.parametrize("start_gear", [1, 2, 3, 4, 5])
    def test_shift_boundaries_are_idempotent(self, start_gear):
        """Test shifting past either end leaves the gear in place."""
        gearbox = Gearbox()
        for _ in range(start_gear - 1):
            gearbox.shift_up()
        assert gearbox.current_gear() == start_gear

        for _ in range(10):
            gearbox.shift_up()
        assert gearbox.current_gear() == 5
        assert not gearbox.shift_up()
        assert gearbox.current_gear() == 5

        for _ in range(10):
            gearbox.shift_down()
        assert gearbox.current_gear() == 1
        assert not gearbox.shift_down()
        assert gearbox.current_gear() == 1

    def test_speed_from_rpm(self):
        """Test road speed follows wheel circumference and total ratio."""
        gearbox = Gearbox()
        speed = gearbox.get_speed_from_rpm(3000.0, final_drive=3.73, wheel_radius_m=0.3175)
        expected = 3000.0 / (3.42 * 3.73) * 2 * np.pi * 0.3175 / 60.0
        assert speed == pytest.approx(expected)

    def test_empty_gear_list_rejected(self):
        """Test a gearbox needs at least one gear."""
        with pytest.raises(ValueError):
            GearboxConfig(gear_ratios=[])

    def test_transmission_mode_toggle(self):
        """Test mode toggling alternates."""
        assert TransmissionMode.AUTOMATIC.toggled() is TransmissionMode.MANUAL
        assert TransmissionMode.MANUAL.toggled() is TransmissionMode.AUTOMATIC


class TestUpgrades:
    """Test upgrade effects and the installed set."""

    def test_eleven_upgrades(self):
        """Test the fixed upgrade vocabulary."""
        assert len(Upgrade) == 11
        assert Upgrade.from_name("turbocharger") is Upgrade.TURBOCHARGER
        assert Upgrade.from_name(" Ceramic_Coating ") is Upgrade.CERAMIC_COATING
        assert Upgrade.from_name("nitrous") is None

    def test_effect_is_pure(self):
        """Test applying an effect returns a new object and leaves the input alone."""
        metrics = EngineMetrics(power_output=10.0, thermal_efficiency=0.5, volumetric_efficiency=0.9)
        boosted = Upgrade.TURBOCHARGER.apply(metrics)

        assert boosted is not metrics
        assert metrics.power_output == 10.0
        assert boosted.power_output == pytest.approx(12.0)
        assert boosted.volumetric_efficiency == pytest.approx(0.9 * 1.15)

    def test_effects_commute(self):
        """Test folding effects in any order gives the same metrics."""
        metrics = EngineMetrics(
            power_output=10.0,
            thermal_efficiency=0.6,
            volumetric_efficiency=0.9,
            fuel_consumption=2.0,
            nox_emissions=0.1,
            engine_temperature=90.0,
        )
        forward = metrics
        for upgrade in Upgrade:
            forward = upgrade.apply(forward)
        backward = metrics
        for upgrade in reversed(list(Upgrade)):
            backward = upgrade.apply(backward)

        for name, value in forward.as_dict().items():
            assert value == pytest.approx(getattr(backward, name))

    def test_net_effect_matches_fold(self):
        """Test the combined effect equals applying each effect in turn."""
        upgrades = UpgradeSet()
        upgrades.install(Upgrade.DIRECT_INJECTION)
        upgrades.install(Upgrade.ENHANCED_ECU)
        upgrades.install(Upgrade.CERAMIC_COATING)

        metrics = EngineMetrics(power_output=10.0, thermal_efficiency=0.6, fuel_consumption=2.0,
                                engine_temperature=90.0)
        folded = upgrades.fold(metrics)
        combined = upgrades.net_effect().apply(metrics)

        assert folded.power_output == pytest.approx(combined.power_output)
        assert folded.fuel_consumption == pytest.approx(2.0 * 0.9 * 0.95)
        assert folded.thermal_efficiency == pytest.approx(0.6 * 1.05 * 1.03)
        assert folded.engine_temperature == pytest.approx(85.0)

    def test_install_is_idempotent(self):
        """Test installing twice keeps a single membership."""
        upgrades = UpgradeSet()
        assert upgrades.install(Upgrade.SMART_COOLING)
        assert not upgrades.install(Upgrade.SMART_COOLING)
        assert len(upgrades) == 1
        assert Upgrade.SMART_COOLING in upgrades
        assert upgrades.installed() == (Upgrade.SMART_COOLING,)

    def test_empty_set_has_no_effect(self):
        """Test no upgrades means the identity effect."""
        assert UpgradeSet().net_effect() == UpgradeEffect()


class TestPerformanceModel:
    """Test derived metric formulas."""

    def test_default_displacement(self):
        """Test displacement of the 86x86 mm three-cylinder."""
        engine = Engine()
        cylinder = np.pi / 4.0 * 0.086 ** 2 * 0.086

        assert engine.metrics.cylinder_displacement == pytest.approx(4.9956e-4, rel=1e-4)
        assert engine.metrics.displacement == pytest.approx(3 * cylinder)
        assert engine.metrics.displacement == pytest.approx(1.49868e-3, rel=1e-4)

    def test_ideal_thermal_efficiency(self):
        """Test Otto efficiency for CR 11 with gamma 1.4."""
        model = PerformanceModel()
        efficiency = model.ideal_thermal_efficiency(EngineConfig())
        assert efficiency == pytest.approx(IDEAL_EFFICIENCY)
        assert efficiency == pytest.approx(0.6168, abs=1e-4)

    def test_base_metrics(self):
        """Test power, torque and geometry at the start RPM."""
        engine = Engine()
        metrics = engine.metrics
        power = 1_000_000.0 * metrics.displacement * 1000.0 / 120000.0

        assert metrics.rod_stroke_ratio == pytest.approx(0.143 / 0.086)
        assert metrics.piston_speed == pytest.approx(2 * 0.086 * 1000.0 / 60.0)
        assert metrics.power_output == pytest.approx(power)
        assert metrics.torque == pytest.approx(power * 60000.0 / (2 * np.pi * 1000.0))
        assert metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY)
        assert metrics.volumetric_efficiency == pytest.approx(0.9)

    def test_torque_independent_of_rpm(self):
        """Test MEP-based torque does not change with RPM."""
        engine = Engine()
        low = engine.metrics.torque
        engine.rpm = 5000.0
        engine.recompute()
        assert engine.metrics.torque == pytest.approx(low)
        assert engine.metrics.power_output > 0

    def test_fuel_and_emissions(self):
        """Test fuel, BSFC, CO2 and NOx at optimal temperature."""
        engine = Engine()
        metrics = engine.metrics
        fuel = _fuel(metrics.power_output, IDEAL_EFFICIENCY)
        bsfc = fuel * 3600.0 / metrics.power_output

        assert metrics.fuel_consumption == pytest.approx(fuel)
        assert metrics.brake_specific_fuel_consumption == pytest.approx(bsfc)
        assert metrics.co2_emissions == pytest.approx(bsfc * 3.2)
        assert metrics.nox_emissions == pytest.approx(0.01 * metrics.power_output)

    def test_temperature_deviation_penalty(self):
        """Test running 15 degrees hot costs 1.5% efficiency."""
        engine = Engine()
        engine.state.engine_temperature = 105.0
        engine.recompute()
        metrics = engine.metrics

        assert metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY * 0.985)
        assert metrics.nox_emissions == pytest.approx(0.01 * metrics.power_output * 1.15)

    def test_small_deviation_has_no_penalty(self):
        """Test deviations up to the tolerance are free."""
        engine = Engine()
        engine.state.engine_temperature = 100.0
        engine.recompute()
        assert engine.metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY)

    def test_water_injection_corrected_ordering(self):
        """Test water injection feeds into fuel consumption."""
        engine = Engine()
        engine.toggle_water_injection(True)
        metrics = engine.metrics

        assert metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY * 1.1)
        assert metrics.fuel_consumption == pytest.approx(_fuel(metrics.power_output, IDEAL_EFFICIENCY * 1.1))
        assert metrics.nox_emissions == pytest.approx(0.01 * metrics.power_output * 0.8)

    def test_water_injection_legacy_ordering(self):
        """Test legacy ordering derives fuel from the uncorrected efficiency."""
        engine = Engine(performance_config=PerformanceConfig(legacy_ordering=True))
        engine.toggle_water_injection(True)
        metrics = engine.metrics

        assert metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY * 1.1)
        assert metrics.fuel_consumption == pytest.approx(_fuel(metrics.power_output, IDEAL_EFFICIENCY))

    def test_fuel_upgrade_corrected_vs_legacy(self):
        """Test direct injection's fuel saving only survives the corrected ordering."""
        corrected = Engine()
        legacy = Engine(performance_config=PerformanceConfig(legacy_ordering=True))
        for engine in (corrected, legacy):
            engine.apply_upgrade(Upgrade.DIRECT_INJECTION)

        efficiency = IDEAL_EFFICIENCY * 1.05
        power = corrected.metrics.power_output
        assert corrected.metrics.fuel_consumption == pytest.approx(_fuel(power, efficiency) * 0.9)
        assert legacy.metrics.fuel_consumption == pytest.approx(_fuel(power, efficiency))

    def test_egr_reduces_nox(self):
        """Test exhaust gas recirculation cuts NOx by 30%."""
        engine = Engine()
        engine.apply_upgrade("exhaust_gas_recirculation")
        assert engine.metrics.nox_emissions == pytest.approx(0.007 * engine.metrics.power_output)

    def test_turbocharger(self):
        """Test turbocharger boosts power and saturates volumetric efficiency."""
        engine = Engine()
        base_power = engine.metrics.power_output
        engine.apply_upgrade(Upgrade.TURBOCHARGER)

        assert engine.metrics.power_output == pytest.approx(base_power * 1.2)
        assert engine.metrics.volumetric_efficiency == pytest.approx(1.0)

    def test_volumetric_efficiency_floor(self):
        """Test a low base volumetric efficiency is raised to the lower bound."""
        engine = Engine(EngineConfig(base_volumetric_efficiency=0.5))
        assert engine.metrics.volumetric_efficiency == pytest.approx(0.7)

    def test_volumetric_efficiency_not_cumulative(self):
        """Test volumetric efficiency is rebuilt from the base on each pass."""
        engine = Engine()
        engine.apply_upgrade(Upgrade.VARIABLE_VALVE_TIMING)
        first = engine.metrics.volumetric_efficiency
        for _ in range(5):
            engine.recompute()

        assert first == pytest.approx(0.99)
        assert engine.metrics.volumetric_efficiency == pytest.approx(first)

    def test_ceramic_coating_does_not_drift_temperature(self):
        """Test the coating's cooling applies per pass, not to the stored state."""
        engine = Engine()
        engine.apply_upgrade(Upgrade.CERAMIC_COATING)
        for _ in range(10):
            engine.recompute()

        assert engine.state.engine_temperature == pytest.approx(90.0)
        assert engine.metrics.engine_temperature == pytest.approx(85.0)
        assert engine.metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY * 1.03)
        assert engine.metrics.nox_emissions == pytest.approx(0.01 * engine.metrics.power_output * 0.95)

    def test_compute_is_pure(self):
        """Test compute does not touch the state."""
        state = EngineState()
        model = PerformanceModel()
        first = model.compute(state)
        second = model.compute(state)

        assert first == second
        assert state.metrics == EngineMetrics()


class TestEngine:
    """Test the engine aggregate."""

    def test_engine_initialization(self):
        """Test engine starts at its start RPM in first gear."""
        engine = Engine()
        assert engine.rpm == 1000.0
        assert engine.state.gear == 1
        assert engine.state.engine_temperature == 90.0
        assert engine.state.transmission_mode is TransmissionMode.AUTOMATIC
        assert engine.state.vehicle_speed > 0

    def test_rpm_setter_clamps(self):
        """Test RPM saturates at idle and max."""
        engine = Engine()
        engine.rpm = 10_000.0
        assert engine.rpm == 6000.0
        engine.rpm = 0.0
        assert engine.rpm == 800.0

    def test_apply_upgrade_twice_same_metrics(self):
        """Test re-installing an upgrade does not compound."""
        engine = Engine()
        engine.apply_upgrade(Upgrade.ENHANCED_ECU)
        once = engine.metrics
        result = engine.apply_upgrade("enhanced_ecu")

        assert result.is_applied
        assert engine.metrics == once

    def test_unknown_upgrade_rejected(self):
        """Test unknown upgrade names are reported and ignored."""
        engine = Engine()
        before = engine.metrics
        result = engine.apply_upgrade("flux_capacitor")

        assert result.status is ActionStatus.REJECTED
        assert "flux_capacitor" in result.message
        assert not result
        assert len(engine.state.upgrades) == 0
        assert engine.metrics == before

    def test_toggle_water_injection(self):
        """Test water injection flag round trip."""
        engine = Engine()
        engine.toggle_water_injection(True)
        assert engine.state.water_injection_active
        engine.toggle_water_injection(False)
        assert not engine.state.water_injection_active
        assert engine.metrics.thermal_efficiency == pytest.approx(IDEAL_EFFICIENCY)

    def test_reset(self):
        """Test reset restores a stock engine."""
        engine = Engine()
        engine.apply_upgrade(Upgrade.TURBOCHARGER)
        engine.gearbox.shift_up()
        engine.rpm = 4000.0
        engine.reset()

        assert engine.rpm == 1000.0
        assert engine.state.gear == 1
        assert len(engine.state.upgrades) == 0

    def test_engine_state(self):
        """Test engine telemetry dictionary."""
        state = Engine().get_state()
        assert "rpm" in state
        assert "metrics" in state
        assert "upgrades" in state
        assert state["gearbox"]["gear"] == 1
        assert state["transmission_mode"] == "Automatic"

    @pytest.mark.parametrize("overrides", [
        {"idle_rpm": 7000.0},
        {"compression_ratio": 1.0},
        {"bore_m": 0.0},
        {"num_cylinders": 0},
        {"start_rpm": 500.0},
    ])
    def test_invalid_config_rejected(self, overrides):
        """Test nonsensical specifications fail at construction."""
        with pytest.raises(ValueError):
            EngineConfig(**overrides)


class TestShiftNotification:
    """Test the transient gear-shift message."""

    def test_countdown_clears_message(self):
        notification = ShiftNotification()
        notification.show("Shifted to gear 2", 3.0)
        assert notification.active

        notification.tick(2.0)
        assert notification.message == "Shifted to gear 2"
        notification.tick(1.0)
        assert notification.message == ""
        assert not notification.active
