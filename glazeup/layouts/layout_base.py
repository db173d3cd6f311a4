"""
Layout Reconciliation Base

Shared vocabulary for the layout builder and verifier: tiling directions,
ratio normalisation and the tolerance / resize-step policy.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..objects import LiveContainer

# Float noise allowance when comparing an error against the tolerance, so an
# error exactly at the tolerance counts as a match.
_EPSILON = 1e-9


class TilingDirection(Enum):
    """Axis along which a container arranges its children."""

    HORIZONTAL = "horizontal"  # Children arranged left-to-right
    VERTICAL = "vertical"  # Children arranged top-to-bottom

    @classmethod
    def parse(cls, value: Optional[str], default: "TilingDirection") -> "TilingDirection":
        if not value:
            return default
        try:
            return cls(value.lower())
        except ValueError:
            return default

    @property
    def resize_axis(self) -> str:
        """Resize flag that changes a child's share along this direction."""
        return "width" if self == TilingDirection.HORIZONTAL else "height"


@dataclass
class RatioPolicy:
    """Tolerance and resize step bounds for ratio refinement."""

    tolerance: float = 0.002
    min_step: int = 1
    max_step: int = 5

    def exceeds(self, error: float) -> bool:
        """Whether an absolute ratio error is outside the tolerance."""
        return abs(error) - self.tolerance > _EPSILON

    def step_percent(self, error: float) -> int:
        """Resize step in whole percent for a signed ratio error."""
        # Half-up rounding of the error in percent
        percent = int(abs(error) * 100 + 0.5)
        return min(self.max_step, max(self.min_step, percent))

    def overshoots(self, error: float, step: int) -> bool:
        """Whether a step would leave the child at least as far from target."""
        return step / 100 >= 2 * abs(error)


def normalize_sizes(children: Sequence[LiveContainer]) -> Optional[List[float]]:
    """Convert manager-reported tiling sizes into ratios of their sum.

    Returns:
        Ratios summing to 1, or None if the sizes sum to zero or less
    """
    total = sum(child.tiling_size or 0.0 for child in children)
    if total <= 0:
        return None
    return [(child.tiling_size or 0.0) / total for child in children]


def worst_error(targets: Sequence[float], ratios: Sequence[float]) -> tuple[int, float]:
    """Find the child whose ratio is furthest from its target.

    Returns:
        (index, signed error target - current); index is -1 when there are
        no children
    """
    worst_index = -1
    worst_diff = 0.0
    for i, (target, current) in enumerate(zip(targets, ratios)):
        diff = target - current
        if worst_index < 0 or abs(diff) > abs(worst_diff):
            worst_index = i
            worst_diff = diff
    return worst_index, worst_diff


def format_path(path: Sequence[int]) -> str:
    return "[" + ",".join(str(i) for i in path) + "]"
