"""
Ports - The seams between the simulation core and its terminal.

Defines:
- Command: the player command vocabulary and its key bindings
- Frame: read-only snapshot handed to a renderer each frame
- InputSource / Renderer: protocols for input and display collaborators
- ScriptedInput / NullRenderer: headless collaborators for tests and batch runs
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, List, Optional, Protocol

from sixstroke.engine.state import EngineState


class Command(Enum):
    """Player commands, valued by their key binding."""
    ACCELERATE = "a"
    DECELERATE = "d"
    UPSHIFT = "e"
    DOWNSHIFT = "q"
    TOGGLE_MODE = "m"

    @classmethod
    def from_key(cls, key: Optional[str]) -> Optional["Command"]:
        """Map a key press to a command.

        Args:
            key: Single character, or None when no key was pressed.
                Matching is exact, so "A" and escape sequences are unbound.

        Returns:
            Bound command, or None for no key or an unbound key
        """
        if not key:
            return None
        try:
            return cls(key)
        except ValueError:
            return None


CONTROLS_HELP = "a: Accelerate | d: Decelerate | e: Upshift | q: Downshift | m: Mode | Ctrl+C: Exit"


@dataclass(frozen=True)
class Frame:
    """What a renderer gets to see after each update."""
    state: EngineState
    fps: float
    frame_index: int
    sim_time: float


class InputSource(Protocol):
    """Supplies at most one pending key per call without blocking."""

    def poll(self) -> Optional[str]:
        ...


class Renderer(Protocol):
    """Draws a frame. Must not mutate the state it is given."""

    def render(self, frame: Frame) -> None:
        ...


class ScriptedInput:
    """Input source that replays a fixed sequence of keys.

    ``None`` entries stand for frames without a key press. Once the
    script runs out every poll returns None.
    """

    def __init__(self, keys: Iterable[Optional[str]] = ()):
        self._keys: Deque[Optional[str]] = deque(keys)

    def push(self, key: Optional[str]) -> None:
        self._keys.append(key)

    def poll(self) -> Optional[str]:
        if not self._keys:
            return None
        return self._keys.popleft()


class NullRenderer:
    """Renderer that only remembers the frames it was given."""

    def __init__(self, keep: int = 0):
        """Initialize renderer.

        Args:
            keep: Number of most recent frames to retain (0 = none)
        """
        self.frames: List[Frame] = []
        self.keep = keep
        self.render_count = 0

    def render(self, frame: Frame) -> None:
        self.render_count += 1
        if self.keep:
            self.frames.append(frame)
            if len(self.frames) > self.keep:
                self.frames = self.frames[-self.keep:]
