"""
Workspace Opener

Open phase: launches each workspace's applications into it and waits until
the window manager manages the same number of windows.

Applications are started in config order (flatten_applications), which is
what lets later phases match live windows to config entries by position.
"""

from __future__ import annotations
import time
from typing import TYPE_CHECKING, Callable, Optional

from pubsub import pub

from . import topics
from .application_launcher import ApplicationLauncher
from .config import Config, WorkspaceConfig, flatten_applications
from .exceptions import OpenTimeoutError
from .objects import find_all_windows, find_workspace
from .settings import Settings, discard
from .window_controller import WindowController

if TYPE_CHECKING:
    from .client import GlazeClient


class WindowWaiter:
    """Waits until a workspace holds an expected number of windows.

    Races the window_managed life-cycle event against a timeout: each time
    the window manager reports a newly managed window the workspace is
    re-queried, and waiting ends once the count is reached.
    """

    def __init__(
        self,
        client: "GlazeClient",
        workspace_name: str,
        expected: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.workspace_name = workspace_name
        self.expected = expected
        self._clock = clock
        self._changed = False

    def _on_window_managed(self, data):
        self._changed = True

    def count(self) -> int:
        workspace = find_workspace(self.client.query_workspaces(), self.workspace_name)
        return len(find_all_windows(workspace))

    def wait(self, timeout: float, poll_interval: float = 0.5) -> int:
        """Block until the expected count is reached or timeout expires.

        Returns:
            The final window count
        """
        if self.expected <= 0:
            return self.count()

        pub.subscribe(self._on_window_managed, topics.WINDOW_MANAGED)
        try:
            with self.client.subscribe(["window_managed"]):
                deadline = self._clock() + timeout
                count = self.count()
                while count < self.expected:
                    remaining = deadline - self._clock()
                    if remaining <= 0:
                        break
                    self.client.pump(min(remaining, poll_interval))
                    if self._changed:
                        self._changed = False
                        count = self.count()
                return self.count()
        finally:
            pub.unsubscribe(self._on_window_managed, topics.WINDOW_MANAGED)


class WorkspaceOpener:
    """Launches configured applications workspace by workspace."""

    def __init__(
        self,
        client: "GlazeClient",
        launcher: ApplicationLauncher,
        settings: Optional[Settings] = None,
        log: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.launcher = launcher
        self.settings = settings or Settings()
        self.log = log if log is not None else discard
        self._sleep = sleep
        self._clock = clock
        self.controller = WindowController(client, self.settings, self.log, sleep)

    def run(self, config: Config):
        """Run the open phase for every configured workspace.

        Raises:
            LaunchError: If an application cannot be started
            OpenTimeoutError: If a workspace's windows do not all appear in time
        """
        self.log("--- Opening applications ---")
        for workspace in config.workspaces:
            self.open_workspace(workspace)
        self.log("Done.")

    def open_workspace(self, workspace: WorkspaceConfig) -> int:
        """Launch one workspace's applications and wait for their windows.

        Returns:
            Number of applications launched
        """
        applications = flatten_applications(workspace)
        if not applications:
            return 0

        self.controller.focus_workspace(workspace.name)

        launched = 0
        for app in applications:
            if not self.launcher.launch(app):
                continue
            launched += 1
            if self.settings.open_delay > 0:
                self._sleep(self.settings.open_delay)

        if launched > 0:
            self.wait_for_windows(workspace.name, launched)
        return launched

    def wait_for_windows(self, name: str, expected: int):
        """Wait until a workspace has at least `expected` windows.

        Raises:
            OpenTimeoutError: If the windows do not appear within window_timeout
        """
        timeout = self.settings.window_timeout
        self.log(f"Waiting for windows in workspace {name} (max {timeout:g}s)...")
        waiter = WindowWaiter(self.client, name, expected, self._clock)
        count = waiter.wait(timeout)
        if count < expected:
            raise OpenTimeoutError(
                f"Workspace {name}: timed out after {timeout:g}s "
                f"({count}/{expected} windows)"
            )
        self.log(f"Workspace {name}: {count} window(s) up")
