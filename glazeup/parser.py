"""
Snapshot Parser

Turns a captured `glazewm query workspaces` JSON document into a session
config, keeping only the fields the config needs. Launch targets cannot be
recovered from a snapshot, so windows get a placeholder application that
must be filled in by hand.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .config import (
    PLACEHOLDER_APPLICATION,
    Config,
    ConfigNode,
    SplitNode,
    WindowNode,
    WorkspaceConfig,
)
from .settings import discard


class ParseError(ValueError):
    """Raised when a snapshot cannot be read or holds none of the workspaces."""


def container_to_node(data: Dict[str, Any]) -> Optional[ConfigNode]:
    """Convert a live split or window container into a config node."""
    kind = data.get("type")
    if kind == "window":
        args = data.get("args")
        return WindowNode(
            title=data.get("title") or "",
            application=PLACEHOLDER_APPLICATION if data.get("processName") else "",
            tiling_size=float(data.get("tilingSize", 1)),
            args=list(args) if isinstance(args, list) else [],
        )
    if kind == "split":
        children = [container_to_node(c) for c in data.get("children") or [] if isinstance(c, dict)]
        return SplitNode(
            tiling_direction=(data.get("tilingDirection") or "horizontal").lower(),
            tiling_size=float(data.get("tilingSize", 1)),
            children=[c for c in children if c is not None],
        )
    return None


def parse_workspaces(
    snapshot: Any,
    names: Sequence[str],
    warn: Callable[[str], None] = discard,
) -> Config:
    """Extract the named workspaces from a snapshot.

    Args:
        snapshot: Parsed snapshot with a data.workspaces list
        names: Workspace names to extract, in output order
        warn: Called for every requested workspace missing from the snapshot

    Raises:
        ParseError: If the snapshot is malformed or no workspace was found
    """
    data = snapshot.get("data") if isinstance(snapshot, dict) else None
    live_workspaces = data.get("workspaces") if isinstance(data, dict) else None
    if not isinstance(live_workspaces, list):
        raise ParseError("Invalid workspace JSON format (missing 'data.workspaces')")

    found: List[Dict[str, Any]] = []
    for name in names:
        match = next(
            (ws for ws in live_workspaces if isinstance(ws, dict) and ws.get("name") == name),
            None,
        )
        if match is None:
            warn(f"Warning: Workspace '{name}' not found in the data")
        else:
            found.append(match)

    if not found:
        raise ParseError("None of the specified workspaces were found")

    config = Config()
    for workspace in found:
        children = [
            container_to_node(c) for c in workspace.get("children") or [] if isinstance(c, dict)
        ]
        config.workspaces.append(
            WorkspaceConfig(
                name=workspace.get("name") or "Unknown",
                tiling_direction=(workspace.get("tilingDirection") or "horizontal").lower(),
                children=[c for c in children if c is not None],
            )
        )
    return config


def parse_snapshot_file(
    path: Union[str, Path],
    names: Sequence[str],
    warn: Callable[[str], None] = discard,
) -> Config:
    """Read a snapshot file and extract the named workspaces."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise ParseError(f"File '{path}' not found")
    except OSError as e:
        raise ParseError(f"Error reading file: {e}")

    try:
        snapshot = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Error parsing JSON: {e}")

    return parse_workspaces(snapshot, names, warn)
