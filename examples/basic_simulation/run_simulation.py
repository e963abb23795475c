#!/usr/bin/env python3
"""
Basic Simulation Example

This example demonstrates how to:
1. Build an engine and install upgrades
2. Drive it with discrete control steps in automatic mode
3. Switch to manual and shift by hand
4. Run the fixed-rate loop headless and read telemetry

Run with: python run_simulation.py
"""

from sixstroke import DynamicsIntegrator, Engine, SimulationLoop
from sixstroke.engine import Upgrade
from sixstroke.interface import ScriptedInput
from sixstroke.simulation import SimulatorConfig


def main():
    print("=" * 60)
    print("SixStroke Basic Simulation Example")
    print("=" * 60)

    # Step 1: Build the engine
    print("\n1. Building engine...")
    engine = Engine()
    print(f"   Displacement: {engine.metrics.displacement * 1e6:.0f} cc")
    print(f"   Power at {engine.rpm:.0f} rpm: {engine.metrics.power_output:.1f} kW")

    for upgrade in (Upgrade.TURBOCHARGER, Upgrade.DIRECT_INJECTION, Upgrade.CERAMIC_COATING):
        result = engine.apply_upgrade(upgrade)
        print(f"   {result.message}")
    print(f"   Power with upgrades: {engine.metrics.power_output:.1f} kW")

    # Step 2: Rev through the gears
    print("\n2. Accelerating in automatic mode...")
    integrator = DynamicsIntegrator(engine, seed=42)
    for step in range(120):
        integrator.accelerate()
        if integrator.state.notification.remaining_s == 3.0:
            print(f"   Step {step + 1}: {integrator.state.notification.message} "
                  f"at {integrator.state.rpm:.0f} rpm")
            integrator.state.notification.clear()

    # Step 3: Manual shifting
    print("\n3. Manual shifting...")
    integrator.toggle_transmission_mode()
    for _ in range(5):
        result = integrator.manual_downshift()
        print(f"   {result.message} (rpm {integrator.state.rpm:.0f})")

    # Step 4: Headless real-time loop
    print("\n4. Running 120 frames at 60 FPS...")
    keys = ["a"] * 5 + [None] * 50 + ["m"]
    loop = SimulationLoop(
        integrator,
        input_source=ScriptedInput(keys),
        config=SimulatorConfig(max_frames=120),
    )
    loop.run()

    telemetry = engine.get_state()
    print(f"   Frames: {loop.frame_count}, FPS: {loop.fps:.1f}")
    print(f"   RPM: {telemetry['rpm']:.0f}")
    print(f"   Gear: {telemetry['gearbox']['gear']} ({telemetry['transmission_mode']})")
    print(f"   Speed: {telemetry['speed_kph']:.1f} km/h")
    print(f"   Engine Temp: {telemetry['temperature_c']:.1f}°C")
    print(f"   Thermal Efficiency: {telemetry['metrics']['thermal_efficiency'] * 100:.1f}%")

    print("\n" + "=" * 60)
    print("Simulation complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
