"""
Interface module - Input and display collaborators.

This module contains:
- Command: Key-bound player commands
- Frame: Snapshot handed to renderers
- InputSource / Renderer: Collaborator protocols
- TerminalDashboard / KeyboardInput: ANSI terminal adapters
- ScriptedInput / NullRenderer: Headless adapters
"""

from sixstroke.interface.ports import (
    CONTROLS_HELP,
    Command,
    Frame,
    InputSource,
    NullRenderer,
    Renderer,
    ScriptedInput,
)
from sixstroke.interface.terminal import KeyboardInput, TerminalDashboard

__all__ = [
    "CONTROLS_HELP",
    "Command",
    "Frame",
    "InputSource",
    "Renderer",
    "ScriptedInput",
    "NullRenderer",
    "KeyboardInput",
    "TerminalDashboard",
]
