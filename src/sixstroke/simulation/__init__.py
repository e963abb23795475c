"""
Simulation module - Time stepping of the engine.

This module contains:
- DynamicsIntegrator: Jerk/acceleration/RPM/temperature update and shifting
- SimulationLoop: Fixed-rate real-time driver
"""

from sixstroke.simulation.dynamics import DynamicsConfig, DynamicsIntegrator
from sixstroke.simulation.simulator import FrameRateTracker, SimulationLoop, SimulatorConfig

__all__ = [
    "DynamicsConfig",
    "DynamicsIntegrator",
    "FrameRateTracker",
    "SimulationLoop",
    "SimulatorConfig",
]
