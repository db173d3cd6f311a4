"""
glazeup

Restores a GlazeWM session from a declarative JSON layout: clears the
configured workspaces, launches their applications, rebuilds the split
tree with its size ratios, verifies the result and fullscreens marked
windows.

This package provides:
- A GlazeWM websocket IPC client with life-cycle events over pub/sub
- The session config model (workspaces, splits, windows)
- Layout reconciliation (structure + ratio phases) and verification
- Startup phases and their orchestrator
- A snapshot parser that turns a live capture into a config

Example usage:
    from glazeup import Settings, startup_from_config

    status = startup_from_config("config.json", settings=Settings(), log=print)

Or run directly:
    python -m glazeup run
"""

__version__ = "0.1.0"

from .client import ClientError, CommandError, GlazeClient, Subscription

from .config import (
    Config,
    ConfigError,
    SplitNode,
    WindowNode,
    WorkspaceConfig,
    flatten_applications,
    load_config,
    save_config,
)

from .objects import LiveContainer, find_all_windows, find_split_containing

from .layouts import LayoutBuilder, LayoutVerifier, compare_ratios, compare_structure

from .exceptions import LaunchError, OpenTimeoutError, PhaseError

from .parser import ParseError, parse_snapshot_file, parse_workspaces

from .settings import FullscreenMethod, Settings

from .startup import PHASES, StartupRunner, startup_from_config

__all__ = [
    # Client
    "GlazeClient",
    "Subscription",
    "ClientError",
    "CommandError",
    # Config
    "Config",
    "ConfigError",
    "WorkspaceConfig",
    "SplitNode",
    "WindowNode",
    "flatten_applications",
    "load_config",
    "save_config",
    # Live objects
    "LiveContainer",
    "find_all_windows",
    "find_split_containing",
    # Layouts
    "LayoutBuilder",
    "LayoutVerifier",
    "compare_ratios",
    "compare_structure",
    # Phases
    "PHASES",
    "StartupRunner",
    "startup_from_config",
    "PhaseError",
    "OpenTimeoutError",
    "LaunchError",
    # Parser
    "ParseError",
    "parse_snapshot_file",
    "parse_workspaces",
    # Settings
    "Settings",
    "FullscreenMethod",
]
