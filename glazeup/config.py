"""
Session Configuration Model

The declarative target layout: workspaces holding a tree of split and
window nodes, each annotated with a tiling direction and a size ratio.

The depth-first window order returned by flatten_applications() is both the
order applications are launched in and the index basis used to match live
windows back to their config entries after the open phase.
"""

from __future__ import annotations
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

PLACEHOLDER_APPLICATION = "FILL ME IN"
"""Written by the snapshot parser where the launch target must be filled in."""


class ConfigError(ValueError):
    """Raised when a config file cannot be read or parsed."""


def _direction(data: Dict[str, Any], default: str) -> str:
    value = data.get("tilingDirection", data.get("tiling_direction"))
    return str(value).lower() if value else default


def _size(data: Dict[str, Any]) -> Optional[float]:
    value = data.get("tilingSize", data.get("tiling_size"))
    return float(value) if value is not None else None


@dataclass
class WindowNode:
    """A window to launch and place."""

    title: str = ""
    application: str = ""
    tiling_size: Optional[float] = None
    args: List[str] = field(default_factory=list)
    link: Optional[str] = None
    fullscreen: bool = False

    type = "window"
    children: List["ConfigNode"] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WindowNode":
        args = data.get("args")
        return cls(
            title=data.get("title") or data.get("name") or "",
            application=data.get("application") or data.get("path") or "",
            tiling_size=_size(data),
            args=[str(a) for a in args] if isinstance(args, list) else [],
            link=data.get("link") or None,
            fullscreen=bool(data.get("fullscreen", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": "window",
            "title": self.title,
            "application": self.application,
        }
        if self.tiling_size is not None:
            out["tilingSize"] = self.tiling_size
        if self.args:
            out["args"] = list(self.args)
        if self.link:
            out["link"] = self.link
        if self.fullscreen:
            out["fullscreen"] = True
        return out

    @property
    def display_name(self) -> str:
        return self.title or self.application or "Unknown"


@dataclass
class SplitNode:
    """A tiling container grouping its children along one axis."""

    tiling_direction: str = "vertical"
    tiling_size: Optional[float] = None
    children: List["ConfigNode"] = field(default_factory=list)

    type = "split"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplitNode":
        return cls(
            tiling_direction=_direction(data, "vertical"),
            tiling_size=_size(data),
            children=_parse_children(data.get("children")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "split", "tilingDirection": self.tiling_direction}
        if self.tiling_size is not None:
            out["tilingSize"] = self.tiling_size
        out["children"] = [child.to_dict() for child in self.children]
        return out

    @property
    def is_binary(self) -> bool:
        return len(self.children) == 2


ConfigNode = Union[WindowNode, SplitNode]


def _parse_node(data: Any) -> Optional[ConfigNode]:
    if not isinstance(data, dict):
        return None
    if data.get("type") == "window":
        return WindowNode.from_dict(data)
    if data.get("type") == "split":
        return SplitNode.from_dict(data)
    return None


def _parse_children(items: Any) -> List[ConfigNode]:
    if not isinstance(items, list):
        return []
    nodes = (_parse_node(item) for item in items)
    return [node for node in nodes if node is not None]


@dataclass
class WorkspaceConfig:
    """A named workspace and the layout tree it should hold."""

    name: str
    tiling_direction: str = "horizontal"
    children: List[ConfigNode] = field(default_factory=list)

    type = "workspace"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceConfig":
        return cls(
            name=str(data.get("name") or ""),
            tiling_direction=_direction(data, "horizontal"),
            children=_parse_children(data.get("children")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "tilingDirection": self.tiling_direction,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class Config:
    """All workspaces of a session, in the order they are processed."""

    workspaces: List[WorkspaceConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Config":
        if not isinstance(data, dict):
            raise ConfigError("Config must be a JSON object with a 'workspaces' list")
        items = data.get("workspaces") or []
        if not isinstance(items, list):
            raise ConfigError("'workspaces' must be a list")
        workspaces = [
            WorkspaceConfig.from_dict(item) for item in items if isinstance(item, dict)
        ]
        workspaces = [ws for ws in workspaces if ws.name]
        seen = set()
        for ws in workspaces:
            if ws.name in seen:
                raise ConfigError(f"Duplicate workspace name: {ws.name}")
            seen.add(ws.name)
        return cls(workspaces)

    def to_dict(self) -> Dict[str, Any]:
        return {"workspaces": [ws.to_dict() for ws in self.workspaces]}

    def get_workspace(self, name: str) -> Optional[WorkspaceConfig]:
        for workspace in self.workspaces:
            if workspace.name == name:
                return workspace
        return None


def flatten_applications(workspace: Union[WorkspaceConfig, SplitNode]) -> List[WindowNode]:
    """List the window nodes of a workspace in depth-first order.

    Splits are descended into and skipped; windows are collected in the
    order they are encountered. This is the launch order, and position i of
    the result corresponds to the i-th live window of the workspace once
    every application has opened.

    Args:
        workspace: Workspace (or split) config node

    Returns:
        Window nodes in open order
    """
    windows: List[WindowNode] = []

    def walk(nodes: List[ConfigNode]):
        for node in nodes:
            if isinstance(node, WindowNode):
                windows.append(node)
            elif isinstance(node, SplitNode):
                walk(node.children)

    walk(workspace.children)
    return windows


def target_ratios(children: List[ConfigNode]) -> List[float]:
    """Target size ratios of sibling config nodes.

    Children without a tilingSize get an equal share of their parent.
    """
    if not children:
        return []
    equal_share = 1.0 / len(children)
    return [
        child.tiling_size if child.tiling_size is not None else equal_share
        for child in children
    ]


def load_config(path: Union[str, Path]) -> Config:
    """Load a session config from a JSON file.

    Raises:
        ConfigError: If the file is missing, unreadable or not valid JSON
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise ConfigError(f"Config file '{path}' not found")
    except OSError as e:
        raise ConfigError(f"Error reading config file '{path}': {e}")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Error parsing config file '{path}': {e}")

    return Config.from_dict(data)


def save_config(config: Config, path: Union[str, Path]):
    """Write a config as JSON, replacing the target file atomically."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
