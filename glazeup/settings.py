"""
Runtime Settings

Connection parameters, pacing delays and retry bounds used by every phase.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, fields
from enum import Enum


def discard(msg: str):
    """Default log callback: drops the message."""


class FullscreenMethod(Enum):
    """How the fullscreen phase toggles fullscreen."""

    WM = "wm"  # GlazeWM toggle-fullscreen command
    F11 = "f11"  # F11 key sent to the focused window (Windows only)


@dataclass
class Settings:
    """glazeup runtime settings."""

    # GlazeWM IPC server
    host: str = "localhost"
    port: int = 6123
    request_timeout: float = 10.0

    # Pacing delays in seconds (time for the window manager to settle)
    connect_delay: float = 1.0
    layout_delay: float = 0.5
    focus_delay: float = 0.5
    close_delay: float = 0.5
    restore_delay: float = 0.3
    open_delay: float = 1.0

    # Open phase
    window_timeout: float = 60.0

    # Layout reconciliation
    tolerance: float = 0.002
    max_resize_iterations: int = 80
    max_direction_toggles: int = 5
    min_resize_step: int = 1
    max_resize_step: int = 5

    # Fullscreen phase
    fullscreen_method: FullscreenMethod | str = FullscreenMethod.WM

    def __post_init__(self):
        """Normalize enum values and validate bounds."""
        if not isinstance(self.fullscreen_method, FullscreenMethod):
            try:
                self.fullscreen_method = FullscreenMethod(
                    str(self.fullscreen_method).lower()
                )
            except ValueError:
                raise ValueError(
                    f"Invalid fullscreen method: {self.fullscreen_method}. "
                    "Use 'wm' or 'f11'"
                )
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.min_resize_step < 1 or self.max_resize_step < self.min_resize_step:
            raise ValueError(
                f"Invalid resize step bounds: {self.min_resize_step}..{self.max_resize_step}"
            )
        if self.max_resize_iterations < 0 or self.max_direction_toggles < 0:
            raise ValueError("Iteration bounds must not be negative")

    @property
    def url(self) -> str:
        """Websocket URL of the GlazeWM IPC server."""
        return f"ws://{self.host}:{self.port}"

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "Settings":
        """Build settings from GLAZEUP_* environment variables.

        Every field can be set as GLAZEUP_<FIELD_NAME_UPPERCASE>, for example
        GLAZEUP_PORT=6123 or GLAZEUP_LAYOUT_DELAY=0.2.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Values that take precedence over the environment

        Returns:
            Settings instance
        """
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = environ.get(f"GLAZEUP_{f.name.upper()}")
            if raw is None:
                continue
            default = getattr(cls, f.name)
            if isinstance(default, bool):
                values[f.name] = raw.lower() in ("1", "true", "yes", "on")
            elif isinstance(default, int):
                values[f.name] = int(raw)
            elif isinstance(default, float):
                values[f.name] = float(raw)
            else:
                values[f.name] = raw
        values.update(overrides)
        return cls(**values)
