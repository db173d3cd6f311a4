"""
Application Launcher

Spawns configured applications, detached from this process.

A window's "application" is one of:
- an executable path ending in .exe, started with its args (plus the link
  for browsers, opened as a new window and in kiosk mode when fullscreen)
- an AUMID (contains "!"), started through explorer's shell:AppsFolder
- an exact Start Menu display name, resolved to an AUMID (Windows only)
"""

from __future__ import annotations
import json
import os
import subprocess
import sys
from typing import Callable, Dict, List, Optional

from .config import PLACEHOLDER_APPLICATION, WindowNode
from .exceptions import LaunchError
from .settings import discard

IS_WINDOWS = sys.platform == "win32"

START_APPS_COMMAND = (
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
    "Get-StartApps | ConvertTo-Json"
)


def _run_powershell(command: str) -> str:
    """Run a PowerShell command silently and return its stdout."""
    completed = subprocess.run(
        [
            "powershell",
            "-NoProfile",
            "-NonInteractive",
            "-WindowStyle",
            "Hidden",
            "-Command",
            command,
        ],
        capture_output=True,
        check=True,
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
    )
    return completed.stdout.decode("utf-8", errors="replace")


class StartAppsResolver:
    """Maps Start Menu display names to AUMIDs.

    The table is read from Get-StartApps on the first lookup and kept for
    the resolver's lifetime. Create one resolver per run and pass it to the
    launcher; it must not be shared as a module global.
    """

    def __init__(self, runner: Callable[[str], str] = _run_powershell, enabled: bool = IS_WINDOWS):
        """Initialize resolver.

        Args:
            runner: Runs a PowerShell command and returns stdout
            enabled: Whether Start Menu lookup is available on this platform
        """
        self._runner = runner
        self.enabled = enabled
        self._apps: Optional[Dict[str, str]] = None

    @property
    def loaded(self) -> bool:
        return self._apps is not None

    def resolve(self, name: str) -> Optional[str]:
        """Look up the AUMID for a display name (None if unknown)."""
        return self._load().get(name.strip())

    def _load(self) -> Dict[str, str]:
        if self._apps is not None:
            return self._apps
        self._apps = {}
        if not self.enabled:
            return self._apps

        try:
            raw = self._runner(START_APPS_COMMAND)
        except (OSError, subprocess.CalledProcessError):
            return self._apps

        raw = raw.strip().lstrip("\ufeff")
        try:
            parsed = json.loads(raw)
        except ValueError:
            return self._apps

        items = parsed if isinstance(parsed, list) else [parsed] if parsed else []
        for item in items:
            if not isinstance(item, dict):
                continue
            name = item.get("Name", item.get("name"))
            app_id = item.get("AppId", item.get("AppID", item.get("appId")))
            if name is not None and app_id is not None:
                self._apps[str(name).strip()] = str(app_id).strip()
        return self._apps


class ApplicationLauncher:
    """Starts the application behind a window config entry."""

    def __init__(
        self,
        resolver: Optional[StartAppsResolver] = None,
        log: Optional[Callable[[str], None]] = None,
        spawn: Optional[Callable[[List[str]], object]] = None,
    ):
        """Initialize application launcher.

        Args:
            resolver: Start Menu name resolver (its table loads on first lookup)
            log: Diagnostic callback
            spawn: Starts a detached process from an argv list
        """
        self.resolver = resolver or StartAppsResolver()
        self.log = log if log is not None else discard
        self._spawn = spawn or self._spawn_detached

    def launch(self, app: WindowNode) -> bool:
        """Launch one application.

        Returns:
            True if a process was started, False if the entry was skipped

        Raises:
            LaunchError: If a display name is unknown or the spawn fails
        """
        argv = self.command_for(app)
        if argv is None:
            return False
        try:
            self._spawn(argv)
        except OSError as e:
            raise LaunchError(f"Failed to open {app.display_name}: {e}")
        return True

    def command_for(self, app: WindowNode) -> Optional[List[str]]:
        """Build the argv that starts an application (None to skip it)."""
        application = app.application
        name = app.title or "Unknown"

        if not application or application == PLACEHOLDER_APPLICATION:
            self.log(f"Skipping {name}: no application")
            return None

        if application.lower().endswith(".exe"):
            args = list(app.args)
            if app.link:
                args.append("-new-window")
                if app.fullscreen:
                    args.append("-kiosk")
                args.append(app.link)
            self.log(f"Opening: {name}{' ' + app.link if app.link else ''}")
            return [application] + args

        if "!" in application:
            self.log(f"Opening: {name} (AUMID)")
            return ["explorer.exe", "shell:AppsFolder\\" + application]

        if not self.resolver.enabled:
            self.log(f"Skipping {name}: launch by name is Windows-only")
            return None

        aumid = self.resolver.resolve(application)
        if aumid is None:
            raise LaunchError(f"App not found: {application}")
        self.log(f"Opening: {name}")
        return ["explorer.exe", "shell:AppsFolder\\" + aumid]

    def _spawn_detached(self, argv: List[str]):
        """Start a process that outlives this one."""
        kwargs = {}
        if IS_WINDOWS:
            kwargs["creationflags"] = (
                subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
            )
        else:
            kwargs["start_new_session"] = True
        subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            env=os.environ.copy(),
            **kwargs,
        )
