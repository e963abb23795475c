"""
SixStroke command line runner.

Usage:
    sixstroke                              # Interactive dashboard, automatic gearbox
    sixstroke --manual                     # Start with manual shifting
    sixstroke --upgrade turbocharger       # Install upgrades before starting
    sixstroke --random-upgrades --seed 7   # Random upgrade loadout, reproducible
    sixstroke --headless --frames 600      # Run without a terminal and print a summary
"""

import argparse
import logging
import sys
from typing import List, Optional
import numpy as np

from sixstroke import __version__
from sixstroke.engine.engine import Engine
from sixstroke.engine.performance import PerformanceConfig
from sixstroke.engine.upgrades import Upgrade
from sixstroke.interface.ports import CONTROLS_HELP, NullRenderer
from sixstroke.interface.terminal import KeyboardInput, TerminalDashboard
from sixstroke.simulation.dynamics import DynamicsIntegrator
from sixstroke.simulation.simulator import SimulationLoop, SimulatorConfig

logger = logging.getLogger(__name__)

HEADLESS_DEFAULT_FRAMES = 600


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="sixstroke",
        description="Real-time six-stroke engine simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Controls: {CONTROLS_HELP}",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sim_group = parser.add_argument_group("Simulation")
    sim_group.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random source (reproducible runs)",
    )
    sim_group.add_argument(
        "--fps",
        type=float,
        default=60.0,
        help="Target frame rate (default: 60)",
    )
    sim_group.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Stop after this many frames (default: run until Ctrl+C)",
    )
    sim_group.add_argument(
        "--manual",
        action="store_true",
        help="Start in manual transmission mode",
    )
    sim_group.add_argument(
        "--headless",
        action="store_true",
        help="No dashboard or keyboard; print a summary at the end",
    )

    engine_group = parser.add_argument_group("Engine")
    engine_group.add_argument(
        "--upgrade",
        action="append",
        default=[],
        metavar="NAME",
        help=f"Install an upgrade (repeatable). One of: {', '.join(u.value for u in Upgrade)}",
    )
    engine_group.add_argument(
        "--random-upgrades",
        action="store_true",
        help="Install each upgrade with a 50%% chance",
    )
    engine_group.add_argument(
        "--legacy-ordering",
        action="store_true",
        help="Derive fuel use from the uncorrected thermal efficiency",
    )

    log_group = parser.add_argument_group("Logging")
    log_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    log_group.add_argument(
        "--log-file",
        default=None,
        help="Write log records to this file",
    )

    return parser.parse_args(argv)


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    """Configure logging.

    The dashboard owns stdout, so records go to stderr or a file.
    """
    log_format = "%(asctime)s [%(levelname)s] %(message)s"
    if log_file:
        handlers = [logging.FileHandler(log_file)]
    else:
        handlers = [logging.StreamHandler(sys.stderr)]

    logging.basicConfig(
        level=getattr(logging, level),
        format=log_format,
        handlers=handlers,
    )


def build_engine(args: argparse.Namespace, rng: np.random.Generator) -> Engine:
    """Create the engine and install the requested upgrades."""
    engine = Engine(performance_config=PerformanceConfig(legacy_ordering=args.legacy_ordering))

    for name in args.upgrade:
        result = engine.apply_upgrade(name)
        if not result.is_applied:
            print(f"Ignoring --upgrade {name}: {result.message}", file=sys.stderr)

    if args.random_upgrades:
        for upgrade in Upgrade:
            if rng.random() < 0.5:
                engine.apply_upgrade(upgrade)

    return engine


def print_summary(loop: SimulationLoop) -> None:
    """Print the final state of a headless run."""
    state = loop.integrator.state
    metrics = state.metrics
    installed = ", ".join(u.value for u in state.upgrades) or "none"

    print("=" * 60)
    print("SixStroke Simulation Summary")
    print("=" * 60)
    print(f"   Frames: {loop.frame_count}")
    print(f"   Simulated time: {loop.sim_time:.2f} s")
    print(f"   Upgrades: {installed}")
    print(f"   RPM: {state.rpm:.0f}")
    print(f"   Gear: {state.gear} ({state.transmission_mode.value})")
    print(f"   Speed: {state.speed_kph:.1f} km/h")
    print(f"   Engine Temp: {state.engine_temperature:.1f}°C")
    print(f"   Power: {metrics.power_output:.1f} kW")
    print(f"   Torque: {metrics.torque:.1f} Nm")
    print(f"   Thermal Efficiency: {metrics.thermal_efficiency * 100:.1f}%")
    print(f"   BSFC: {metrics.brake_specific_fuel_consumption:.2f} g/kWh")
    print(f"   NOx: {metrics.nox_emissions:.3f} g/kWh")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        config = SimulatorConfig(target_fps=args.fps, max_frames=args.frames)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    rng = np.random.default_rng(args.seed)
    engine = build_engine(args, rng)
    logger.info(f"Installed upgrades: {', '.join(u.value for u in engine.state.upgrades) or 'none'}")
    integrator = DynamicsIntegrator(engine, rng=rng)
    if args.manual:
        integrator.toggle_transmission_mode()

    if args.headless:
        if config.max_frames is None:
            config.max_frames = HEADLESS_DEFAULT_FRAMES
        config.real_time = False
        loop = SimulationLoop(integrator, renderer=NullRenderer(), config=config)
        loop.run()
        print_summary(loop)
        return 0

    print(f"Running real-time simulation at {config.target_fps:.0f} FPS. Controls:")
    print(CONTROLS_HELP)

    with KeyboardInput() as keyboard:
        loop = SimulationLoop(integrator, keyboard, TerminalDashboard(), config)
        try:
            loop.run()
        except KeyboardInterrupt:
            print("\nSimulation stopped by user")
        finally:
            loop.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
