"""
Startup Orchestrator

Runs the startup phases against one GlazeWM connection:

    clear -> open -> layout -> verify -> fullscreen

Phases always run in that order, whatever order they were requested in.
The orchestrator owns the client: it restores the originally focused
workspace and closes the connection when the run ends, successfully or not.
"""

from __future__ import annotations
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from pubsub import pub

from . import topics
from .application_launcher import ApplicationLauncher, StartAppsResolver
from .client import ClientError, GlazeClient
from .config import Config, ConfigError, load_config
from .exceptions import PhaseError
from .fullscreen_manager import FullscreenManager
from .layouts import LayoutBuilder, LayoutVerifier
from .settings import Settings, discard
from .window_controller import WindowController
from .workspace_cleaner import WorkspaceCleaner
from .workspace_opener import WorkspaceOpener

PHASES = ("clear", "open", "layout", "verify", "fullscreen")


def select_phases(phases: Optional[Iterable[str]] = None, skip_layout: bool = False) -> list:
    """Resolve requested phases into canonical run order.

    Args:
        phases: Phase names (all phases if None or empty)
        skip_layout: Drop the layout and verify phases

    Raises:
        ValueError: If a phase name is unknown
    """
    requested = set(phases or PHASES)
    unknown = requested - set(PHASES)
    if unknown:
        raise ValueError(
            f"Unknown phase(s): {', '.join(sorted(unknown))}. "
            f"Choose from: {', '.join(PHASES)}"
        )
    if skip_layout:
        requested -= {"layout", "verify"}
    return [phase for phase in PHASES if phase in requested]


class StartupRunner:
    """Runs startup phases for a session config."""

    def __init__(
        self,
        config: Config,
        client: GlazeClient,
        settings: Optional[Settings] = None,
        log: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        launcher: Optional[ApplicationLauncher] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize startup runner.

        Args:
            config: Session config
            client: Connected GlazeWM client, closed when run() returns
            settings: Runtime settings
            log: Diagnostic callback
            sleep: Delay function (replaced in tests)
            launcher: Application launcher (a fresh one with its own
                StartAppsResolver if None)
            clock: Monotonic clock for the open phase timeout
        """
        self.config = config
        self.client = client
        self.settings = settings or Settings()
        self.log = log if log is not None else discard
        self._sleep = sleep
        self.launcher = launcher or ApplicationLauncher(StartAppsResolver(), self.log)
        self.controller = WindowController(client, self.settings, self.log, sleep)

        self.cleaner = WorkspaceCleaner(client, self.settings, self.log, sleep)
        self.opener = WorkspaceOpener(client, self.launcher, self.settings, self.log, sleep, clock)
        self.builder = LayoutBuilder(client, self.settings, self.log, sleep)
        self.verifier = LayoutVerifier(client, self.settings, self.log)
        self.fullscreen = FullscreenManager(client, self.settings, self.log, sleep)

        self.original_workspace: Optional[str] = None

    def run(
        self,
        phases: Optional[Iterable[str]] = None,
        workspace_name: Optional[str] = None,
        skip_layout: bool = False,
    ) -> int:
        """Run the selected phases.

        Args:
            phases: Phase names to run (all if None or empty)
            workspace_name: Restrict the fullscreen phase to one workspace
            skip_layout: Skip the layout and verify phases

        Returns:
            Exit status: 0 on success, 1 if a phase failed
        """
        try:
            selected = select_phases(phases, skip_layout)
            if skip_layout:
                self.log("Skipping layout (--no-layout)")

            self.log("Querying workspaces and windows...")
            self.original_workspace = self.controller.current_workspace()

            for phase in selected:
                pub.sendMessage(topics.PHASE_STARTED, phase=phase)
                result = self.run_phase(phase, workspace_name)
                pub.sendMessage(topics.PHASE_FINISHED, phase=phase, result=result)
        except (ClientError, PhaseError, ConfigError, ValueError) as e:
            self.log(f"Error: {e}")
            return 1
        except Exception as e:
            self.log(f"Unexpected error: {e!r}")
            return 1
        finally:
            self._finish()

        return 0

    def run_phase(self, phase: str, workspace_name: Optional[str] = None):
        """Run a single phase and return its result."""
        if phase == "clear":
            self.cleaner.run(self.config, self.original_workspace)
            return True
        if phase == "open":
            self.opener.run(self.config)
            return True
        if phase == "layout":
            return self.builder.apply(self.config)
        if phase == "verify":
            return self.verifier.verify(self.config)
        if phase == "fullscreen":
            self.fullscreen.run(self.config, workspace_name)
            return True
        raise ValueError(f"Unknown phase: {phase}")

    def _finish(self):
        """Focus back to the original workspace and disconnect."""
        try:
            if self.client.connected:
                self.controller.restore_workspace(self.original_workspace)
        except ClientError as e:
            self.log(f"Error: {e}")
        finally:
            self.client.close()


def startup_from_config(
    config_path: Union[str, Path],
    phases: Optional[Iterable[str]] = None,
    workspace_name: Optional[str] = None,
    skip_layout: bool = False,
    settings: Optional[Settings] = None,
    log: Optional[Callable[[str], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    client: Optional[GlazeClient] = None,
    launcher: Optional[ApplicationLauncher] = None,
) -> int:
    """Load a config file, connect to GlazeWM and run the phases.

    Returns:
        Exit status: 0 on success, 1 on failure
    """
    log = log if log is not None else discard
    settings = settings or Settings()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        log(f"Error: {e}")
        return 1
    if not config.workspaces:
        log("No workspaces defined in config")
        return 1

    if client is None:
        client = GlazeClient(settings.url, settings.request_timeout, log)
    try:
        client.connect()
    except ClientError as e:
        log(f"Error: {e}")
        return 1
    if settings.connect_delay > 0:
        sleep(settings.connect_delay)

    runner = StartupRunner(config, client, settings, log, sleep, launcher)
    return runner.run(phases, workspace_name, skip_layout)
