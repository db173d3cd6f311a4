"""
Workspace Cleaner

Clear phase: closes every window in the configured workspaces.
"""

from __future__ import annotations
import time
from typing import TYPE_CHECKING, Callable, List, Optional

from .config import Config
from .exceptions import PhaseError
from .objects import find_all_windows, find_workspace
from .settings import Settings, discard
from .window_controller import WindowController

if TYPE_CHECKING:
    from .client import GlazeClient


class WorkspaceCleaner:
    """Closes all windows of the configured workspaces.

    Windows are closed by id first. Some applications ignore a close aimed
    at an unfocused workspace, so any leftovers are closed again with their
    workspace focused. The phase fails if a workspace still holds windows.
    """

    def __init__(
        self,
        client: "GlazeClient",
        settings: Optional[Settings] = None,
        log: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.log = log if log is not None else discard
        self.controller = WindowController(client, self.settings, self.log, sleep)

    def run(self, config: Config, original_workspace: Optional[str] = None):
        """Run the clear phase.

        Args:
            config: Session config (only workspace names are used)
            original_workspace: Workspace to focus back to after a focused clear

        Raises:
            PhaseError: If a window has no id or a workspace is not empty afterwards
        """
        names = [ws.name for ws in config.workspaces]
        if not names:
            self.log("No workspaces defined in config")
            return

        self.log("--- Before clear ---")
        self._census(names)

        if original_workspace is None:
            original_workspace = self.controller.current_workspace()
        self.log(f"Original workspace: {original_workspace or '(unknown)'}")

        for name in names:
            self.clear_workspace(name)
            if self._window_count(name) > 0:
                self.clear_workspace_with_focus(name, original_workspace)

        self.log("--- After clear ---")
        counts = self._census(names)
        for name, count in zip(names, counts):
            if count > 0:
                raise PhaseError(f'Workspace "{name}" still has {count} window(s) after clear')
        self.log("All configured workspaces cleared.")

    def clear_workspace(self, name: str) -> int:
        """Close every window of a workspace by id.

        Returns:
            Number of windows closed
        """
        self.log(f"Clearing workspace {name}")
        workspace = self.controller.query_workspace(name)
        if workspace is None:
            # GlazeWM removes empty workspaces, so nothing to close
            self.log(f"Workspace {name} not found")
            return 0

        closed = 0
        for window in find_all_windows(workspace):
            self._close(window.id, window.title)
            closed += 1
        self.log(f"Closed {closed} windows from workspace {name}")
        return closed

    def clear_workspace_with_focus(self, name: str, original_workspace: Optional[str]):
        """Focus a workspace, close its remaining windows, then focus back."""
        self.log(f"Focusing workspace {name} and closing remaining windows...")
        self.controller.focus_workspace(name)

        workspace = self.controller.query_workspace(name)
        if workspace is None:
            self.log(f"Workspace {name} not found after focus")
            return

        for window in find_all_windows(workspace):
            self._close(window.id, window.title)

        self.controller.restore_workspace(original_workspace)

    def _close(self, window_id: Optional[str], title: Optional[str]):
        title = title or "Unknown"
        if not window_id:
            raise PhaseError(f"Window has no ID: {title}")
        self.log(f"Closing window: {title} (ID: {window_id})")
        self.controller.close_container(window_id)

    def _window_count(self, name: str) -> int:
        return len(find_all_windows(self.controller.query_workspace(name)))

    def _census(self, names: List[str]) -> List[int]:
        workspaces = self.client.query_workspaces()
        windows = self.client.query_windows()
        self.log(f"Workspaces: {len(workspaces)}")
        self.log(f"Total windows: {len(windows)}")
        counts = []
        for name in names:
            count = len(find_all_windows(find_workspace(workspaces, name)))
            self.log(f'  Workspace "{name}": {count} windows')
            counts.append(count)
        return counts
