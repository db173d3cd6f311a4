"""
Window Controller

Thin command layer over the window manager client shared by every phase:
focus, close and fullscreen commands, each followed by a settle delay so
the window manager has applied the change before the next query.
"""

from __future__ import annotations
import time
from typing import TYPE_CHECKING, Callable, Optional

from .objects import LiveContainer, find_focused_workspace, find_workspace
from .settings import Settings, discard

if TYPE_CHECKING:
    from .client import GlazeClient


class WindowController:
    """Issues window manager commands and paces them.

    The client is owned by the caller; the controller never closes it.
    """

    def __init__(
        self,
        client: "GlazeClient",
        settings: Optional[Settings] = None,
        log: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize window controller.

        Args:
            client: Connected window manager client (GlazeClient or compatible)
            settings: Delays used between commands
            log: Diagnostic callback
            sleep: Delay function (replaced in tests)
        """
        self.client = client
        self.settings = settings or Settings()
        self.log = log if log is not None else discard
        self._sleep = sleep

    def settle(self, delay: Optional[float] = None):
        """Wait for the window manager to apply the previous command."""
        delay = self.settings.layout_delay if delay is None else delay
        if delay > 0:
            self._sleep(delay)

    def run(self, command: str, subject_id: Optional[str] = None, delay: Optional[float] = None):
        """Run a command and settle."""
        self.client.run_command(command, subject_id)
        self.settle(delay)

    def query_workspace(self, name: str) -> Optional[LiveContainer]:
        """Query a single workspace by name (None if it does not exist)."""
        return find_workspace(self.client.query_workspaces(), name)

    def current_workspace(self) -> Optional[str]:
        """Name of the currently focused workspace."""
        focused = find_focused_workspace(self.client.query_workspaces())
        return focused.name if focused else None

    def focus_workspace(self, name: Optional[str], delay: Optional[float] = None):
        """Focus a workspace by name (no-op for an empty name)."""
        if not name:
            return
        self.log(f"Focusing workspace {name}")
        self.run(f"focus --workspace {name}", delay=self._delay(delay, "focus_delay"))

    def restore_workspace(self, name: Optional[str]):
        """Focus back to the workspace that had focus before the run."""
        if not name:
            return
        self.log(f"Focusing back to workspace {name}")
        self.run(f"focus --workspace {name}", delay=self.settings.restore_delay)

    def focus_container(self, container_id: Optional[str], delay: Optional[float] = None):
        """Focus a window or split container by id."""
        if not container_id:
            raise ValueError("container_id is required")
        self.run(f"focus --container-id {container_id}", delay=delay)

    def close_container(self, container_id: str):
        self.run("close", container_id, delay=self.settings.close_delay)

    def toggle_fullscreen(self, container_id: str):
        self.run("toggle-fullscreen", container_id)

    def _delay(self, delay: Optional[float], setting: str) -> float:
        return getattr(self.settings, setting) if delay is None else delay
