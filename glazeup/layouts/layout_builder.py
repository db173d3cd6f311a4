"""
Layout Builder

Drives a workspace's live windows toward its configured split tree using
only imperative window manager commands, in two passes:

1. Structure: set the workspace tiling direction, then group each binary
   split under the workspace into a split container (focus A, set direction,
   focus B, move B left into A's container).
2. Ratios: refine each container's child sizes with resize commands,
   outermost containers first, until every child is within tolerance of its
   target ratio or the iteration bound is reached.

The live tree is re-queried after every command; nothing is diffed
incrementally. Windows are matched to config entries by position in the
depth-first window order (see config.flatten_applications).
"""

from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence

from ..client import CommandError
from ..config import (
    Config,
    ConfigNode,
    SplitNode,
    WindowNode,
    WorkspaceConfig,
    flatten_applications,
    target_ratios,
)
from ..objects import (
    LiveContainer,
    find_all_windows,
    find_split_containing,
    get_node_by_path,
)
from ..settings import Settings, discard
from ..window_controller import WindowController
from .layout_base import (
    RatioPolicy,
    TilingDirection,
    format_path,
    normalize_sizes,
    worst_error,
)

if TYPE_CHECKING:
    from ..client import GlazeClient


@dataclass
class RatioContainer:
    """A container whose child ratios can be refined."""

    path: List[int]
    depth: int
    direction: TilingDirection
    config_children: List[ConfigNode]


@dataclass
class RatioResult:
    """Outcome of refining one container."""

    path: List[int]
    iterations: int = 0
    converged: bool = False
    max_error: Optional[float] = None
    errors: List[float] = field(default_factory=list)


def collect_ratio_containers(
    config_node: WorkspaceConfig | SplitNode,
    live_node: Optional[LiveContainer],
) -> List[RatioContainer]:
    """Pair config and live containers whose child counts agree.

    Walks both trees in lockstep and returns every pairing, shallowest first,
    so outer ratios are approximated before nested ones. Subtrees whose child
    counts differ are not descended into.
    """
    found: List[RatioContainer] = []

    def walk(config: ConfigNode | WorkspaceConfig, live: Optional[LiveContainer], path: List[int], depth: int):
        config_children = config.children
        live_children = live.children if live is not None else []
        if not config_children or len(live_children) != len(config_children):
            return
        default = (
            TilingDirection.HORIZONTAL
            if isinstance(config, WorkspaceConfig)
            else TilingDirection.VERTICAL
        )
        found.append(
            RatioContainer(
                path=path,
                depth=depth,
                direction=TilingDirection.parse(config.tiling_direction, default),
                config_children=list(config_children),
            )
        )
        for i, (child, live_child) in enumerate(zip(config_children, live_children)):
            walk(child, live_child, path + [i], depth + 1)

    walk(config_node, live_node, [], 0)
    # Stable sort keeps document order within a depth
    found.sort(key=lambda container: container.depth)
    return found


class LayoutBuilder:
    """Applies configured split trees and ratios to live workspaces.

    The client is borrowed from the caller and never closed here.
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
        self.policy = RatioPolicy(
            tolerance=self.settings.tolerance,
            min_step=self.settings.min_resize_step,
            max_step=self.settings.max_resize_step,
        )

    def apply(self, config: Config) -> Dict[str, Optional[List[RatioResult]]]:
        """Run the layout phase for every configured workspace.

        Returns:
            Workspace name -> ratio results (None where layout was skipped)
        """
        self.log("--- Applying layout (tiled) ---")
        results = {}
        for workspace in config.workspaces:
            results[workspace.name] = self.apply_workspace(workspace)
        self.log("Layout applied.")
        return results

    def apply_workspace(self, workspace: WorkspaceConfig) -> Optional[List[RatioResult]]:
        """Build structure and ratios for one workspace.

        The workspace is skipped without issuing any command when it does not
        exist or its live window count differs from the configured one.

        Returns:
            Ratio results, or None if the workspace was skipped
        """
        name = workspace.name
        applications = flatten_applications(workspace)
        if not applications:
            return None

        live = self.controller.query_workspace(name)
        if live is None:
            self.log(f"Workspace {name} not found (skip layout)")
            return None

        windows = find_all_windows(live)
        if len(windows) != len(applications):
            self.log(
                f"Workspace {name}: {len(windows)} windows, "
                f"{len(applications)} in config (skip layout)"
            )
            return None

        self.controller.focus_workspace(name, delay=self.settings.layout_delay)
        self.set_workspace_direction(name, workspace.tiling_direction)
        self.controller.settle()

        live = self.controller.query_workspace(name)
        if live is None:
            self.log(f"Workspace {name} not found")
            return None

        self.log(f"Initial workspace structure: {len(live.children)} direct children")
        self.build_tree(workspace, find_all_windows(live))
        self.controller.settle()

        live = self.controller.query_workspace(name)
        if live is None:
            return None
        results = self.apply_tiling_sizes(workspace, live)
        self.controller.settle()
        return results

    # Structure phase

    def set_workspace_direction(self, name: str, direction: str) -> bool:
        """Toggle the workspace's tiling direction until it matches.

        GlazeWM has no way to set a workspace's direction directly, so the
        direction is toggled and re-queried, at most max_direction_toggles
        times.

        Returns:
            True if the direction matches, False otherwise
        """
        want = TilingDirection.parse(direction, TilingDirection.HORIZONTAL)
        max_toggles = self.settings.max_direction_toggles

        for attempt in range(max_toggles + 1):
            live = self.controller.query_workspace(name)
            if live is None:
                return False

            current = TilingDirection.parse(live.tiling_direction, TilingDirection.HORIZONTAL)
            if current == want:
                self.log(f"Workspace {name}: tiling direction already {current.value}")
                return True
            if attempt == max_toggles:
                break

            self.log(
                f"Workspace {name}: toggling tiling direction "
                f"(current: {current.value}, want: {want.value})"
            )
            self.controller.run("toggle-tiling-direction", live.id)
        return False

    def build_tree(self, workspace: WorkspaceConfig, windows: Sequence[LiveContainer]):
        """Group every binary split directly under the workspace.

        Nested splits below the first level are not grouped. Splits that
        cannot be grouped are logged and skipped.

        Args:
            workspace: Workspace config
            windows: Live windows in depth-first order, index-aligned with
                flatten_applications(workspace)
        """
        index_of = {id(node): i for i, node in enumerate(flatten_applications(workspace))}
        current = list(windows)

        for node in workspace.children:
            if not isinstance(node, SplitNode):
                continue
            regrouped = self.group_split(workspace, node, current, index_of)
            if regrouped is not None:
                current = regrouped

    def group_split(
        self,
        workspace: WorkspaceConfig,
        split: SplitNode,
        windows: Sequence[LiveContainer],
        index_of: Dict[int, int],
    ) -> Optional[List[LiveContainer]]:
        """Group the two windows of a split into one split container.

        Returns:
            The workspace's windows after grouping, or None if skipped
        """
        if not split.is_binary:
            self.log(f"Skipping split with {len(split.children)} children (only pairs are grouped)")
            return None

        first, second = split.children
        if not isinstance(first, WindowNode) or not isinstance(second, WindowNode):
            self.log(
                f"Skipping split of {first.type} and {second.type} "
                "(only window pairs are grouped)"
            )
            return None

        idx0 = index_of.get(id(first))
        idx1 = index_of.get(id(second))
        if idx0 is None or idx1 is None or idx0 == idx1 or max(idx0, idx1) >= len(windows):
            self.log(f"Skipping split: cannot resolve windows {first.display_name}, {second.display_name}")
            return None

        win0 = windows[idx0]
        win1 = windows[idx1]
        if not win0.id or not win1.id:
            self.log(f"Skipping split: no live id for {first.display_name} or {second.display_name}")
            return None

        direction = TilingDirection.parse(split.tiling_direction, TilingDirection.VERTICAL).value
        self.log(
            f"Grouping into {direction} split: {first.display_name} (idx {idx0}), "
            f"{second.display_name} (idx {idx1})"
        )

        try:
            self.controller.run(f"focus --workspace {workspace.name}")
            self.controller.focus_container(win0.id)
            self.controller.run(f"set-tiling-direction {direction}")
            self.controller.focus_container(win1.id)
            self.controller.run("move --direction left", win1.id)

            live = self.controller.query_workspace(workspace.name)
            if live is None:
                self.log(f"Workspace {workspace.name} not found after grouping")
                return None

            container = find_split_containing(live, win0.id, win1.id)
            if container is not None and container.id:
                # Moving into the split does not always keep its direction
                self.controller.run(f"set-tiling-direction {direction}", container.id)
                self.log("Focusing split container for next grouping")
                self.controller.focus_container(container.id)
        except CommandError as e:
            self.log(f"Error during grouping: {e}")
            return None

        return find_all_windows(live)

    # Ratio phase

    def apply_tiling_sizes(
        self, workspace: WorkspaceConfig, live: LiveContainer
    ) -> List[RatioResult]:
        """Resize children until their ratios match the configured sizes."""
        return [
            self.refine_container(workspace.name, container)
            for container in collect_ratio_containers(workspace, live)
        ]

    def refine_container(self, workspace_name: str, container: RatioContainer) -> RatioResult:
        """Resize the worst-off child of one container until within tolerance.

        Each iteration re-queries the container, picks the child with the
        largest ratio error and resizes it by a whole-percent step along the
        container's axis. Refinement stops when converged, when the container
        disappears or changes shape, when a step can no longer reduce the
        error, when the error grows, or after max_resize_iterations steps.
        """
        result = RatioResult(path=list(container.path))
        axis = container.direction.resize_axis
        targets = target_ratios(container.config_children)
        where = format_path(container.path)

        while True:
            live = self.controller.query_workspace(workspace_name)
            node = get_node_by_path(live, container.path)
            if node is None or len(node.children) != len(targets):
                break

            ratios = normalize_sizes(node.children)
            if ratios is None:
                break

            index, diff = worst_error(targets, ratios)
            if index < 0:
                result.converged = True
                break

            error = abs(diff)
            previous = result.max_error
            result.max_error = error
            result.errors.append(error)

            if not self.policy.exceeds(error):
                result.converged = True
                break
            if previous is not None and error > previous:
                self.log(f"Resize path {where}: error grew to {error * 100:.2f}%, stopping")
                break
            if result.iterations >= self.settings.max_resize_iterations:
                self.log(f"Resize path {where}: not converged after {result.iterations} steps")
                break

            step = self.policy.step_percent(diff)
            if self.policy.overshoots(diff, step):
                self.log(
                    f"Resize path {where}: remaining error {error * 100:.2f}% "
                    f"is below the {step}% step, stopping"
                )
                break

            child_id = node.children[index].id
            if not child_id:
                break

            sign = "+" if diff > 0 else "-"
            command = f"resize --{axis} {sign}{step}%"
            self.log(
                f"Resize path {where} child {index}: {command} "
                f"(target {targets[index] * 100:.2f}%, current {ratios[index] * 100:.2f}%)"
            )
            self.controller.focus_container(child_id)
            self.controller.run(command, child_id)
            result.iterations += 1

        return result
