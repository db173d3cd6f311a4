"""
Layout Verifier

Read-only audit of the live layout against the config: structure (node
types, tiling directions, child counts) and size ratios. It reports the
first mismatch per workspace and never issues commands.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from ..config import Config, ConfigNode, SplitNode, WindowNode, WorkspaceConfig, target_ratios
from ..objects import LiveContainer, find_workspace
from ..settings import Settings, discard
from .layout_base import RatioPolicy, normalize_sizes

if TYPE_CHECKING:
    from ..client import GlazeClient


@dataclass
class Structure:
    """Shape of a layout tree: what the verifier compares."""

    type: str
    tiling_direction: Optional[str] = None
    children: List["Structure"] = field(default_factory=list)


@dataclass
class Comparison:
    """Result of a comparison; path and message locate the first mismatch."""

    match: bool
    path: str
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.match


def config_structure(node: Union[WorkspaceConfig, ConfigNode, None]) -> Optional[Structure]:
    """Extract the structure of a config node."""
    if node is None:
        return None
    if isinstance(node, WindowNode):
        return Structure("window")
    if isinstance(node, SplitNode):
        direction = (node.tiling_direction or "vertical").lower()
    else:
        direction = (node.tiling_direction or "horizontal").lower()
    return Structure(
        node.type,
        direction,
        [config_structure(child) for child in node.children],
    )


def live_structure(node: Optional[LiveContainer]) -> Optional[Structure]:
    """Extract the structure of a live container."""
    if node is None:
        return None
    if node.type == "window":
        return Structure("window")
    if node.type == "split":
        direction = node.tiling_direction or "vertical"
    elif node.type == "workspace":
        direction = node.tiling_direction or "horizontal"
    else:
        return None
    children = [live_structure(child) for child in node.children]
    return Structure(node.type, direction, [c for c in children if c is not None])


def _child_path(path: str, index: int) -> str:
    return f"{path}.children[{index}]" if path else f"children[{index}]"


def compare_structure(
    want: Optional[Structure], actual: Optional[Structure], path: str = ""
) -> Comparison:
    """Compare two structures exactly.

    Types must match, tiling directions must match where both sides define
    one, and children must match in count and, recursively, in order.
    """
    if want is None and actual is None:
        return Comparison(True, path)
    if want is None:
        return Comparison(False, path, f"config has no node at {path}, actual has {actual.type}")
    if actual is None:
        return Comparison(False, path, f"actual has no node at {path}, config expects {want.type}")
    if want.type != actual.type:
        return Comparison(False, path, f"type mismatch: want {want.type}, actual {actual.type}")
    if want.tiling_direction is not None and actual.tiling_direction is not None:
        if want.tiling_direction != actual.tiling_direction:
            return Comparison(
                False,
                path,
                f"tiling direction mismatch: want {want.tiling_direction}, "
                f"actual {actual.tiling_direction}",
            )
    if len(want.children) != len(actual.children):
        return Comparison(
            False,
            path,
            f"children count: want {len(want.children)}, actual {len(actual.children)}",
        )
    for i, (want_child, actual_child) in enumerate(zip(want.children, actual.children)):
        result = compare_structure(want_child, actual_child, _child_path(path, i))
        if not result.match:
            return result
    return Comparison(True, path)


def compare_ratios(
    want: Union[WorkspaceConfig, ConfigNode, None],
    actual: Optional[LiveContainer],
    path: str = "",
    policy: Optional[RatioPolicy] = None,
) -> Comparison:
    """Compare configured size ratios with live ones.

    Only containers whose child counts agree are compared; structural
    mismatches are left to compare_structure. Live sizes are normalised
    against their siblings' sum. A child mismatches when its error is
    strictly greater than the tolerance.
    """
    policy = policy or RatioPolicy()
    want_children = want.children if want is not None else []
    actual_children = actual.children if actual is not None else []
    if not want_children or len(want_children) != len(actual_children):
        return Comparison(True, path)

    ratios = normalize_sizes(actual_children) or [0.0] * len(actual_children)
    for i, (target, current) in enumerate(zip(target_ratios(want_children), ratios)):
        if policy.exceeds(target - current):
            return Comparison(
                False,
                _child_path(path, i),
                f"ratio: want {target * 100:.2f}%, got {current * 100:.2f}%",
            )

    for i, (want_child, actual_child) in enumerate(zip(want_children, actual_children)):
        result = compare_ratios(want_child, actual_child, _child_path(path, i), policy)
        if not result.match:
            return result
    return Comparison(True, path)


class LayoutVerifier:
    """Checks every configured workspace against the live layout."""

    def __init__(
        self,
        client: "GlazeClient",
        settings: Optional[Settings] = None,
        log: Optional[Callable[[str], None]] = None,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.log = log if log is not None else discard
        self.policy = RatioPolicy(tolerance=self.settings.tolerance)

    def verify(self, config: Config) -> bool:
        """Verify structure and ratios of all workspaces.

        Returns:
            True only if every workspace matches in structure and ratios
        """
        self.log("--- Verifying layout (structure + tiling direction + ratios) ---")

        workspaces = self.client.query_workspaces()
        all_structure_match = True
        all_ratio_match = True

        for workspace in config.workspaces:
            name = workspace.name
            live = find_workspace(workspaces, name)
            if live is None:
                self.log(f"Workspace {name}: not found")
                all_structure_match = False
                all_ratio_match = False
                continue

            structure = self.verify_structure(workspace, live)
            if structure.match:
                self.log(f"Workspace {name}: structure + tiling direction MATCH")
            else:
                self.log(
                    f"Workspace {name}: structure MISMATCH at {structure.path}: "
                    f"{structure.message}"
                )
                all_structure_match = False

            ratios = self.verify_ratios(workspace, live)
            if ratios.match:
                self.log(
                    f"Workspace {name}: ratios MATCH "
                    f"(within {self.policy.tolerance * 100:.2f}%)"
                )
            else:
                self.log(f"Workspace {name}: ratio MISMATCH at {ratios.path}: {ratios.message}")
                all_ratio_match = False

        all_match = all_structure_match and all_ratio_match
        if all_match:
            self.log("Verify done: structure and ratios match config.")
        else:
            self.log("Verify done: some mismatches.")
        return all_match

    def verify_structure(self, workspace: WorkspaceConfig, live: LiveContainer) -> Comparison:
        return compare_structure(config_structure(workspace), live_structure(live), workspace.name)

    def verify_ratios(self, workspace: WorkspaceConfig, live: LiveContainer) -> Comparison:
        return compare_ratios(workspace, live, workspace.name, self.policy)
