"""
SixStroke - Real-time six-stroke engine and drivetrain simulation.

This package provides:
- An engine model deriving power, torque, efficiency, fuel use and emissions
- Installable upgrades and water injection
- A five-speed gearbox with automatic and manual shifting
- A seeded dynamics integrator and a fixed-rate simulation loop
- A live ANSI terminal dashboard driven by the keyboard
"""

__version__ = "0.1.0"

from sixstroke.engine.engine import Engine
from sixstroke.simulation.dynamics import DynamicsIntegrator
from sixstroke.simulation.simulator import SimulationLoop

__all__ = ["Engine", "DynamicsIntegrator", "SimulationLoop", "__version__"]
