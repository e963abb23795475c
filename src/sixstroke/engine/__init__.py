"""
Engine module - Six-stroke engine model.

This module contains the engine and its drivetrain:
- Engine: State owner, upgrade and water-injection control
- EngineState / EngineConfig: Mutable state and fixed specification
- PerformanceModel: Power, torque, efficiency, fuel and emissions
- Upgrade / UpgradeSet: Installable metric modifiers
- Gearbox: Five-speed gear selection
"""

from sixstroke.engine.gearbox import Gearbox, GearboxConfig, TransmissionMode
from sixstroke.engine.upgrades import Upgrade, UpgradeEffect, UpgradeSet
from sixstroke.engine.performance import EngineMetrics, PerformanceConfig, PerformanceModel
from sixstroke.engine.state import (
    ActionResult,
    ActionStatus,
    EngineConfig,
    EngineState,
    ShiftNotification,
)
from sixstroke.engine.engine import Engine

__all__ = [
    "Engine",
    "EngineConfig",
    "EngineState",
    "EngineMetrics",
    "PerformanceConfig",
    "PerformanceModel",
    "Upgrade",
    "UpgradeEffect",
    "UpgradeSet",
    "Gearbox",
    "GearboxConfig",
    "TransmissionMode",
    "ShiftNotification",
    "ActionResult",
    "ActionStatus",
]
