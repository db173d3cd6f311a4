"""
Fullscreen Manager

Fullscreen phase: matches live windows to config entries by position and
toggles fullscreen on those marked `fullscreen: true`.
"""

from __future__ import annotations
import subprocess
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional

from .application_launcher import IS_WINDOWS
from .config import Config, WorkspaceConfig, flatten_applications
from .objects import LiveContainer, find_all_windows
from .settings import FullscreenMethod, Settings, discard
from .window_controller import WindowController

if TYPE_CHECKING:
    from .client import GlazeClient

SEND_F11_COMMAND = (
    "Add-Type -AssemblyName System.Windows.Forms; "
    "[System.Windows.Forms.SendKeys]::SendWait('{F11}')"
)


def _send_f11():
    """Press F11 in the focused window (Windows only)."""
    if not IS_WINDOWS:
        return
    subprocess.run(
        [
            "powershell",
            "-NoProfile",
            "-NonInteractive",
            "-WindowStyle",
            "Hidden",
            "-Command",
            SEND_F11_COMMAND,
        ],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
    )


@dataclass
class FullscreenTarget:
    """A live window that should be fullscreened."""

    id: str
    title: str


def fullscreen_targets(workspace: WorkspaceConfig, live: Optional[LiveContainer]) -> List[FullscreenTarget]:
    """Pair config entries with live windows by index and keep fullscreen ones."""
    if live is None:
        return []
    targets = []
    for app, window in zip(flatten_applications(workspace), find_all_windows(live)):
        if app.fullscreen and window.id:
            targets.append(FullscreenTarget(window.id, window.title or app.display_name))
    return targets


class FullscreenManager:
    """Toggles fullscreen on configured windows."""

    def __init__(
        self,
        client: "GlazeClient",
        settings: Optional[Settings] = None,
        log: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        send_key: Callable[[], None] = _send_f11,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.log = log if log is not None else discard
        self.controller = WindowController(client, self.settings, self.log, sleep)
        self._send_key = send_key

    def run(self, config: Config, workspace_name: Optional[str] = None):
        """Run the fullscreen phase.

        Args:
            config: Session config
            workspace_name: Only process this workspace (all if None)
        """
        if workspace_name:
            workspaces = [ws for ws in config.workspaces if ws.name == workspace_name]
            if not workspaces:
                self.log(f'Workspace "{workspace_name}" not found in config.')
                return
        else:
            workspaces = config.workspaces

        for workspace in workspaces:
            live = self.controller.query_workspace(workspace.name)
            targets = fullscreen_targets(workspace, live)
            if not targets:
                if workspace_name:
                    self.log(
                        f'No fullscreen windows in workspace "{workspace.name}" '
                        "(config fullscreen: true matched to current windows)."
                    )
                continue
            self.controller.focus_workspace(workspace.name)
            self.fullscreen(targets)

    def fullscreen(self, targets: List[FullscreenTarget]):
        """Focus each target and toggle it to fullscreen."""
        if not targets:
            return
        self.log(f"Fullscreening {len(targets)} window(s)...")
        for target in targets:
            self.log(f"Fullscreening: {target.title} (id: {target.id})")
            self.controller.focus_container(target.id)
            if self.settings.fullscreen_method == FullscreenMethod.F11:
                self._send_key()
            else:
                self.controller.toggle_fullscreen(target.id)
