"""
Live Window Manager Objects

Snapshot of GlazeWM's container tree as returned by `query workspaces`,
plus read-only helpers for walking it. Snapshots are never mutated: after
every command the tree is queried again because ids and structure change.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence


@dataclass
class LiveContainer:
    """A workspace, split or window container reported by the window manager."""

    type: str
    id: Optional[str] = None
    tiling_size: float = 0.0
    tiling_direction: Optional[str] = None
    children: List["LiveContainer"] = field(default_factory=list)
    name: Optional[str] = None
    title: Optional[str] = None
    process_name: Optional[str] = None
    has_focus: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiveContainer":
        """Build a container tree from GlazeWM JSON (camelCase keys)."""
        direction = data.get("tilingDirection")
        return cls(
            type=data.get("type", ""),
            id=data.get("id"),
            tiling_size=data.get("tilingSize") or 0.0,
            tiling_direction=direction.lower() if direction else None,
            children=[
                cls.from_dict(child)
                for child in data.get("children") or []
                if isinstance(child, dict)
            ],
            name=data.get("name"),
            title=data.get("title"),
            process_name=data.get("processName"),
            has_focus=bool(data.get("hasFocus", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to GlazeWM-style JSON."""
        out: Dict[str, Any] = {"type": self.type, "id": self.id}
        if self.type != "workspace":
            out["tilingSize"] = self.tiling_size
        if self.tiling_direction is not None:
            out["tilingDirection"] = self.tiling_direction
        if self.name is not None:
            out["name"] = self.name
        if self.title is not None:
            out["title"] = self.title
        if self.process_name is not None:
            out["processName"] = self.process_name
        out["hasFocus"] = self.has_focus
        if self.type != "window":
            out["children"] = [child.to_dict() for child in self.children]
        return out

    @property
    def is_window(self) -> bool:
        return self.type == "window"

    @property
    def is_container(self) -> bool:
        """Whether this node can hold children (workspace or split)."""
        return self.type in ("workspace", "split")


def find_all_windows(container: Optional[LiveContainer]) -> List[LiveContainer]:
    """Collect every window under a container in depth-first child order.

    Splits are traversed transparently: their windows are included but the
    split nodes themselves are not.

    Args:
        container: Workspace, split or window (None yields an empty list)

    Returns:
        Windows in document order
    """
    if container is None:
        return []
    if container.is_window:
        return [container]

    windows: List[LiveContainer] = []
    for child in container.children:
        if child.is_window:
            windows.append(child)
        elif child.children:
            windows.extend(find_all_windows(child))
    return windows


def find_workspace(
    workspaces: Iterable[LiveContainer], name: Optional[str]
) -> Optional[LiveContainer]:
    """Find a workspace by name."""
    for workspace in workspaces:
        if workspace.name == name:
            return workspace
    return None


def find_focused_workspace(
    workspaces: Iterable[LiveContainer],
) -> Optional[LiveContainer]:
    """Find the workspace that currently has focus."""
    for workspace in workspaces:
        if workspace.has_focus:
            return workspace
    return None


def get_node_by_path(
    root: Optional[LiveContainer], path: Sequence[int]
) -> Optional[LiveContainer]:
    """Follow a path of child indices from root.

    Args:
        root: Starting container
        path: Child indices, e.g. [0, 1] is the second child of the first child

    Returns:
        The container at path, or None if any index is out of range
    """
    node = root
    for index in path:
        if node is None or index < 0 or index >= len(node.children):
            return None
        node = node.children[index]
    return node


def find_split_containing(
    container: Optional[LiveContainer], id_a: str, id_b: str
) -> Optional[LiveContainer]:
    """Find the split whose direct children are exactly the two given ids."""
    if container is None or not container.is_container:
        return None
    wanted = {id_a, id_b}
    for child in container.children:
        if child.type != "split":
            continue
        child_ids = [c.id for c in child.children if c.id]
        if len(child_ids) == 2 and set(child_ids) == wanted:
            return child
        found = find_split_containing(child, id_a, id_b)
        if found is not None:
            return found
    return None
