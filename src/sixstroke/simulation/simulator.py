"""
Simulator - Fixed-rate real-time loop around the dynamics integrator.

Provides:
- Frame pacing at a target rate
- Input polling and command dispatch
- Wall-clock time stepping
- Rolling frame-rate estimate
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional
import logging
import time

from sixstroke.engine.state import ActionResult
from sixstroke.interface.ports import Command, Frame, InputSource, NullRenderer, Renderer, ScriptedInput
from sixstroke.simulation.dynamics import DynamicsIntegrator

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Simulation loop configuration."""
    target_fps: float = 60.0
    acceleration_step: float = 10.0   # Acceleration change per key press
    fps_window: int = 60              # Frames averaged for the FPS estimate
    max_frames: int | None = None     # None = run until stopped
    real_time: bool = True            # Pace to wall clock, or step by the frame budget without sleeping

    def __post_init__(self):
        if self.target_fps <= 0:
            raise ValueError("target_fps must be positive")
        if self.fps_window < 1:
            raise ValueError("fps_window must be at least 1")

    @property
    def frame_budget_s(self) -> float:
        """Wall-clock time available to each frame."""
        return 1.0 / self.target_fps


class FrameRateTracker:
    """Average frame rate over the most recent frame durations."""

    def __init__(self, window: int = 60):
        self._durations: Deque[float] = deque(maxlen=window)

    @property
    def fps(self) -> float:
        total = sum(self._durations)
        if total <= 0:
            return 0.0
        return len(self._durations) / total

    def record(self, duration_s: float) -> float:
        """Add one frame duration and return the updated estimate."""
        self._durations.append(duration_s)
        return self.fps

    def reset(self) -> None:
        self._durations.clear()


class SimulationLoop:
    """Real-time driver: input, dynamics, render, sleep.

    Each frame polls one key without blocking, applies it, advances the
    integrator by the wall-clock time since the previous frame and hands
    a read-only ``Frame`` to the renderer. A slow frame is not made up
    for; the next frame's ``dt`` simply grows.

    Usage:
        loop = SimulationLoop(DynamicsIntegrator(Engine()), KeyboardInput(), TerminalDashboard())
        loop.run()
    """

    def __init__(
        self,
        integrator: DynamicsIntegrator,
        input_source: InputSource | None = None,
        renderer: Renderer | None = None,
        config: SimulatorConfig | None = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize loop.

        Args:
            integrator: Dynamics integrator to drive
            input_source: Key source. No input if None.
            renderer: Display collaborator. Nothing is drawn if None.
            config: Loop configuration. Uses 60 FPS defaults if None.
            clock: Monotonic clock in seconds
            sleep: Function used to wait out the frame budget
        """
        self.integrator = integrator
        self.input_source = input_source or ScriptedInput()
        self.renderer = renderer or NullRenderer()
        self.config = config or SimulatorConfig()
        self._clock = clock
        self._sleep = sleep

        self._fps = FrameRateTracker(self.config.fps_window)
        self._running: bool = False
        self._frame_count: int = 0
        self._sim_time: float = 0.0
        self._last_frame_start: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def frame_count(self) -> int:
        """Frames completed so far."""
        return self._frame_count

    @property
    def fps(self) -> float:
        """Rolling frame-rate estimate."""
        return self._fps.fps

    @property
    def sim_time(self) -> float:
        """Sum of all ``dt`` handed to the integrator."""
        return self._sim_time

    def start(self) -> None:
        """Mark the loop as running and reset the frame clock."""
        self._running = True
        self._last_frame_start = self._clock()

    def stop(self) -> None:
        """Ask ``run`` to return after the current frame."""
        self._running = False

    def handle_command(self, command: Command) -> ActionResult:
        """Apply one player command to the integrator.

        Args:
            command: Command to apply

        Returns:
            Outcome of the command
        """
        integrator = self.integrator
        if command is Command.ACCELERATE:
            integrator.adjust_acceleration(self.config.acceleration_step)
            return ActionResult.applied("Acceleration increased")
        if command is Command.DECELERATE:
            integrator.adjust_acceleration(-self.config.acceleration_step)
            return ActionResult.applied("Acceleration decreased")
        if command is Command.UPSHIFT:
            return integrator.manual_upshift()
        if command is Command.DOWNSHIFT:
            return integrator.manual_downshift()

        mode = integrator.toggle_transmission_mode()
        return ActionResult.applied(f"Transmission mode switched to {mode.value}")

    def handle_key(self, key: Optional[str]) -> Optional[ActionResult]:
        """Dispatch a key press; unbound keys and no key are ignored."""
        command = Command.from_key(key)
        if command is None:
            return None
        result = self.handle_command(command)
        if not result.is_applied:
            logger.debug(f"{command.name} rejected: {result.message}")
        return result

    def step(self, dt: float | None = None) -> Frame:
        """Run one frame without pacing.

        Args:
            dt: Time step to use. Measured from the wall clock if None.

        Returns:
            Frame handed to the renderer
        """
        frame_start = self._clock()
        if self._last_frame_start is None:
            self._last_frame_start = frame_start

        self.handle_key(self.input_source.poll())

        if dt is None:
            dt = frame_start - self._last_frame_start
        self._last_frame_start = frame_start

        self.integrator.update_dynamics(dt)
        self._sim_time += dt
        if dt > 0:
            self._fps.record(dt)

        frame = Frame(
            state=self.integrator.state,
            fps=self._fps.fps,
            frame_index=self._frame_count,
            sim_time=self._sim_time,
        )
        self.renderer.render(frame)
        self._frame_count += 1
        return frame

    def run(self) -> int:
        """Run frames at the target rate until stopped or ``max_frames``.

        Returns:
            Number of frames completed
        """
        budget = self.config.frame_budget_s
        max_frames = self.config.max_frames
        self.start()
        logger.info(f"Running simulation at {self.config.target_fps:.0f} FPS")

        while self._running:
            if max_frames is not None and self._frame_count >= max_frames:
                break

            if not self.config.real_time:
                self.step(budget)
                continue

            frame_start = self._clock()
            self.step()
            frame_duration = self._clock() - frame_start
            if frame_duration < budget:
                self._sleep(budget - frame_duration)

        self._running = False
        return self._frame_count

    def reset(self) -> None:
        """Forget timing and frame statistics."""
        self._fps.reset()
        self._frame_count = 0
        self._sim_time = 0.0
        self._last_frame_start = None
        self._running = False
